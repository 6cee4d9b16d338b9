"""
Quiz session engine

Start -> sequential answer submission -> finalization. Every request runs in a
single database transaction so that validation, scoring, the answered-count
bump and (for the last answer) the session result are applied together or not
at all.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from quizplay.config import settings
from quizplay.errors import (
    InvalidToken,
    NoQuizzesAvailable,
    QuizNotInSession,
    ResultNotAvailable,
    SessionNotActive,
    SessionNotFound,
    AlreadyAnswered,
)
from quizplay.models import Answer, Difficulty, Quiz, QuizSession, SessionResult, SessionStatus
from quizplay.repositories import AnswerKeyStore, SessionRepository, answer_key_store
from quizplay.utils.start_token import BadTokenError, StartTimeToken, start_time_token

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionEngine:
    """
    Orchestrates start, next-question lookup, answer submission and finalize

    Args:
        start_token: codec for the anti-cheat start-time token
        content: quiz content / answer key lookups
        clock: returns the current UTC time; injectable for tests
    """

    def __init__(
        self,
        start_token: StartTimeToken,
        content: AnswerKeyStore = answer_key_store,
        clock: Callable[[], datetime] = utc_now
    ):
        self.start_token = start_token
        self.content = content
        self.clock = clock

    def start_session(
        self,
        db: Session,
        user_id: int,
        difficulty: Optional[Difficulty] = None,
        category_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Create a session with a randomly chosen, fixed question order

        Returns:
            {"session_id", "current_quiz", "total_quizzes"}

        Raises:
            NoQuizzesAvailable: nothing matches the filters
        """
        limit = limit or settings.DEFAULT_SESSION_SIZE
        repo = SessionRepository(db)

        with repo.transaction():
            quiz_ids = self.content.find_quiz_ids_random(
                db, limit, difficulty=difficulty, category_id=category_id
            )
            if not quiz_ids:
                logger.warning(
                    f"No quizzes for user {user_id} "
                    f"(difficulty={difficulty}, category={category_id})"
                )
                raise NoQuizzesAvailable()

            started_at = self.clock()
            session = repo.create_session(user_id, quiz_ids, started_at)
            current_quiz = self._client_quiz(db, quiz_ids[0], 0, started_at)
            session_id = session.id

        logger.info(f"Session {session_id} started for user {user_id} with {len(quiz_ids)} quizzes")

        return {
            "session_id": session_id,
            "current_quiz": current_quiz,
            "total_quizzes": len(quiz_ids),
        }

    def fetch_next_quiz(
        self,
        repo: SessionRepository,
        session_id: int,
        current_index: int
    ) -> Optional[Dict[str, Any]]:
        """
        Client payload for the question after current_index, or None

        The returned start token is minted now, i.e. it is the issue time of
        the next question.
        """
        assignment = repo.assignment_at(session_id, current_index + 1)
        if assignment is None:
            return None
        return self._client_quiz(repo.db, assignment.quiz_id, assignment.order, self.clock())

    def submit_answer(
        self,
        db: Session,
        user_id: int,
        session_id: int,
        quiz_id: int,
        answer_id: Optional[int],
        start_token: str
    ) -> Dict[str, Any]:
        """
        Score one answer; the answer that completes the session also finalizes it

        Args:
            answer_id: chosen answer, or None when the client sent nothing
            start_token: the token issued with this question

        Returns:
            {"correct", "earned_reward", "elapsed_seconds", "next_quiz", "result"}

        Raises:
            SessionNotActive, QuizNotInSession, AlreadyAnswered, InvalidToken
        """
        received_at = self.clock()
        repo = SessionRepository(db)

        with repo.transaction():
            session = repo.lock_active_session(session_id, user_id)
            if session is None:
                logger.warning(f"Submit rejected: session {session_id} not active for user {user_id}")
                raise SessionNotActive()

            assignment = repo.find_assignment(session.id, quiz_id)
            if assignment is None:
                logger.warning(f"Submit rejected: quiz {quiz_id} not in session {session_id}")
                raise QuizNotInSession()

            if repo.find_attempt(session.id, quiz_id) is not None:
                logger.warning(f"Submit rejected: quiz {quiz_id} already answered in session {session_id}")
                raise AlreadyAnswered()

            try:
                issued_at = self.start_token.decode(start_token)
            except BadTokenError as e:
                logger.warning(f"Submit rejected: bad start token for session {session_id}: {e}")
                raise InvalidToken() from None

            quiz = self.content.find_quiz(db, quiz_id)
            time_taken = self.elapsed_seconds(issued_at, received_at)
            timed_out = bool(quiz.time_limit) and time_taken > quiz.time_limit
            # A late answer is never credited, whatever was submitted
            effective_answer_id = None if timed_out else answer_id

            scored = self.resolve_scored_answer(quiz, effective_answer_id)
            coins_earned = quiz.max_prize if scored.is_correct else 0

            repo.add_attempt(
                session_id=session.id,
                quiz_id=quiz_id,
                user_id=user_id,
                answer_id=scored.id,
                is_correct=scored.is_correct,
                time_taken=time_taken,
                coins_earned=coins_earned,
                created_at=received_at,
            )
            answered = repo.increment_answered(session)

            logger.info(
                f"Session {session.id} quiz {quiz_id}: correct={scored.is_correct} "
                f"time_taken={time_taken}s timed_out={timed_out} ({answered}/{session.total_questions})"
            )

            response = {
                "correct": scored.is_correct,
                "earned_reward": coins_earned,
                "elapsed_seconds": time_taken,
                "next_quiz": None,
                "result": None,
            }

            # Also covers out-of-order play where the last answer is not the last index
            if answered >= session.total_questions:
                result = self.finalize(repo, session)
                response["result"] = self.result_payload(result, repo.attempts_for_session(session.id))
            else:
                response["next_quiz"] = self.fetch_next_quiz(repo, session.id, assignment.order)

        return response

    def finalize(self, repo: SessionRepository, session: QuizSession) -> SessionResult:
        """
        Aggregate every attempt into the session result and complete the session

        Only reachable from the submission that brings answered_count up to
        total_questions, which can happen once per session.
        """
        attempts = repo.attempts_for_session(session.id)

        correct_answers = sum(1 for a in attempts if a.metrics and a.metrics.is_correct)
        total_time_spent = sum(a.metrics.time_taken for a in attempts if a.metrics)
        total_coins_earned = sum(a.metrics.coins_earned for a in attempts if a.metrics)
        accuracy = (
            round(correct_answers / session.total_questions * 100, 2)
            if session.total_questions else 0.0
        )

        result = repo.complete_session(
            session,
            attempts,
            correct_answers=correct_answers,
            total_time_spent=total_time_spent,
            total_coins_earned=total_coins_earned,
            accuracy=accuracy,
            completed_at=self.clock(),
        )

        logger.info(
            f"Session {session.id} completed: {correct_answers}/{session.total_questions} "
            f"correct, accuracy={accuracy}%"
        )
        return result

    def get_session_summary(self, db: Session, user_id: int, session_id: int) -> Dict[str, Any]:
        """Status of one of the caller's sessions; never issues a start token"""
        repo = SessionRepository(db)
        session = repo.get_session(session_id, user_id)
        if session is None:
            raise SessionNotFound()

        summary = {
            "session_id": session.id,
            "status": session.status.value,
            "total_questions": session.total_questions,
            "answered_count": session.answered_count,
            "started_at": session.started_at,
            "completed_at": session.completed_at,
            "result": None,
        }
        if session.status == SessionStatus.COMPLETED:
            result = repo.get_result(session.id)
            summary["result"] = self.result_payload(result, result.attempts)
        return summary

    def get_session_result(self, db: Session, user_id: int, session_id: int) -> Dict[str, Any]:
        repo = SessionRepository(db)
        session = repo.get_session(session_id, user_id)
        if session is None:
            raise SessionNotFound()

        result = repo.get_result(session.id)
        if result is None:
            raise ResultNotAvailable()
        return self.result_payload(result, result.attempts)

    @staticmethod
    def elapsed_seconds(issued_at: datetime, received_at: datetime) -> int:
        """Whole seconds between issue and receipt, floored, never negative"""
        return max(0, math.floor((received_at - issued_at).total_seconds()))

    @staticmethod
    def resolve_scored_answer(quiz: Quiz, answer_id: Optional[int]) -> Answer:
        """
        The answer to record for this attempt

        The chosen answer when it belongs to the quiz; otherwise the incorrect
        answer with the lowest id (falling back to the first answer).
        """
        if not quiz.answers:
            raise ValueError(f"Quiz {quiz.id} has no answers")

        if answer_id is not None:
            for answer in quiz.answers:
                if answer.id == answer_id:
                    return answer

        incorrect = [a for a in quiz.answers if not a.is_correct]
        if incorrect:
            return min(incorrect, key=lambda a: a.id)
        return min(quiz.answers, key=lambda a: a.id)

    @staticmethod
    def result_payload(result: SessionResult, attempts) -> Dict[str, Any]:
        return {
            "id": result.id,
            "session_id": result.session_id,
            "total_questions": result.total_questions,
            "correct_answers": result.correct_answers,
            "total_time_spent": result.total_time_spent,
            "total_coins_earned": result.total_coins_earned,
            "accuracy": result.accuracy,
            "completed_at": result.completed_at,
            "attempts": [
                {
                    "quiz_id": a.quiz_id,
                    "selected_answer_id": a.selected_answer_id,
                    "is_correct": a.metrics.is_correct,
                    "time_taken": a.metrics.time_taken,
                    "coins_earned": a.metrics.coins_earned,
                }
                for a in attempts
            ],
        }

    def _client_quiz(self, db: Session, quiz_id: int, index: int, issued_at: datetime) -> Dict[str, Any]:
        payload = dict(self.content.public_quiz(db, quiz_id))
        payload["current_quiz_index"] = index
        payload["start_token"] = self.start_token.encode(issued_at)
        return payload


# Global instance
session_engine = SessionEngine(start_token=start_time_token)
