"""
Transactional storage for sessions, assignments, attempts and results
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from quizplay.errors import AlreadyAnswered, QuizSessionError
from quizplay.models import (
    AnswerAttempt,
    AttemptMetrics,
    QuizSession,
    SessionQuiz,
    SessionResult,
    SessionStatus,
)

logger = logging.getLogger(__name__)

DUPLICATE_ATTEMPT_CONSTRAINT = "uq_answer_attempts_session_quiz"
# SQLite reports the columns rather than the constraint name
DUPLICATE_ATTEMPT_COLUMNS = "answer_attempts.session_id, answer_attempts.quiz_id"


def is_duplicate_attempt(error: IntegrityError) -> bool:
    """True when the violation is the one-attempt-per-(session, quiz) constraint"""
    message = str(error.orig)
    return DUPLICATE_ATTEMPT_CONSTRAINT in message or DUPLICATE_ATTEMPT_COLUMNS in message


class SessionRepository:
    """
    Session storage bound to one database session (one request)

    Mutating methods only flush; nothing is committed outside transaction().
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["SessionRepository"]:
        """Commit on success; roll back everything on any exception"""
        try:
            yield self
            self.db.commit()
        except QuizSessionError:
            self.db.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction rolled back: {str(e)}")
            self.db.rollback()
            raise

    # Sessions

    def create_session(
        self,
        user_id: int,
        quiz_ids: List[int],
        started_at: datetime
    ) -> QuizSession:
        """Insert the session row and its ordered assignments (order 0..n-1)"""
        session = QuizSession(
            user_id=user_id,
            status=SessionStatus.IN_PROGRESS,
            started_at=started_at,
            total_questions=len(quiz_ids),
            answered_count=0,
        )
        self.db.add(session)
        self.db.flush()

        self.db.add_all([
            SessionQuiz(session_id=session.id, quiz_id=quiz_id, order=index)
            for index, quiz_id in enumerate(quiz_ids)
        ])
        self.db.flush()
        return session

    def get_session(self, session_id: int, user_id: int) -> Optional[QuizSession]:
        return self.db.execute(
            select(QuizSession).where(
                QuizSession.id == session_id,
                QuizSession.user_id == user_id,
            )
        ).scalar_one_or_none()

    def lock_active_session(self, session_id: int, user_id: int) -> Optional[QuizSession]:
        """Fetch an IN_PROGRESS session owned by user_id, locking its row"""
        return self.db.execute(
            select(QuizSession)
            .where(
                QuizSession.id == session_id,
                QuizSession.user_id == user_id,
                QuizSession.status == SessionStatus.IN_PROGRESS,
            )
            .with_for_update()
        ).scalar_one_or_none()

    def increment_answered(self, session: QuizSession) -> int:
        """Atomically bump answered_count and return the new value"""
        self.db.execute(
            update(QuizSession)
            .where(QuizSession.id == session.id)
            .values(answered_count=QuizSession.answered_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(session, attribute_names=["answered_count"])
        return session.answered_count

    # Assignments

    def find_assignment(self, session_id: int, quiz_id: int) -> Optional[SessionQuiz]:
        return self.db.execute(
            select(SessionQuiz).where(
                SessionQuiz.session_id == session_id,
                SessionQuiz.quiz_id == quiz_id,
            )
        ).scalar_one_or_none()

    def assignment_at(self, session_id: int, order: int) -> Optional[SessionQuiz]:
        return self.db.execute(
            select(SessionQuiz).where(
                SessionQuiz.session_id == session_id,
                SessionQuiz.order == order,
            )
        ).scalar_one_or_none()

    # Attempts

    def find_attempt(self, session_id: int, quiz_id: int) -> Optional[AnswerAttempt]:
        return self.db.execute(
            select(AnswerAttempt).where(
                AnswerAttempt.session_id == session_id,
                AnswerAttempt.quiz_id == quiz_id,
            )
        ).scalar_one_or_none()

    def add_attempt(
        self,
        session_id: int,
        quiz_id: int,
        user_id: int,
        answer_id: int,
        is_correct: bool,
        time_taken: int,
        coins_earned: int,
        created_at: datetime
    ) -> AnswerAttempt:
        """
        Insert an attempt with its metrics

        The (session_id, quiz_id) unique constraint catches a concurrent
        duplicate that slipped past find_attempt.
        """
        attempt = AnswerAttempt(
            session_id=session_id,
            quiz_id=quiz_id,
            user_id=user_id,
            selected_answer_id=answer_id,
            created_at=created_at,
            metrics=AttemptMetrics(
                is_correct=is_correct,
                time_taken=time_taken,
                coins_earned=coins_earned,
            ),
        )
        self.db.add(attempt)
        try:
            self.db.flush()
        except IntegrityError as e:
            if not is_duplicate_attempt(e):
                raise
            logger.warning(
                f"Duplicate attempt rejected by constraint: session={session_id} quiz={quiz_id}"
            )
            raise AlreadyAnswered() from None
        return attempt

    def attempts_for_session(self, session_id: int) -> List[AnswerAttempt]:
        return list(self.db.execute(
            select(AnswerAttempt)
            .options(selectinload(AnswerAttempt.metrics))
            .where(AnswerAttempt.session_id == session_id)
            .order_by(AnswerAttempt.id)
        ).scalars())

    # Results

    def complete_session(
        self,
        session: QuizSession,
        attempts: List[AnswerAttempt],
        correct_answers: int,
        total_time_spent: int,
        total_coins_earned: int,
        accuracy: float,
        completed_at: datetime
    ) -> SessionResult:
        """Write the result, link every attempt to it and close the session"""
        result = SessionResult(
            session_id=session.id,
            user_id=session.user_id,
            total_questions=session.total_questions,
            correct_answers=correct_answers,
            total_time_spent=total_time_spent,
            total_coins_earned=total_coins_earned,
            accuracy=accuracy,
            completed_at=completed_at,
        )
        self.db.add(result)
        self.db.flush()

        for attempt in attempts:
            attempt.result_id = result.id

        session.status = SessionStatus.COMPLETED
        session.completed_at = completed_at
        self.db.flush()
        return result

    def get_result(self, session_id: int) -> Optional[SessionResult]:
        return self.db.execute(
            select(SessionResult)
            .options(selectinload(SessionResult.attempts).selectinload(AnswerAttempt.metrics))
            .where(SessionResult.session_id == session_id)
        ).scalar_one_or_none()
