"""
QuizSession and SessionQuiz models - session lifecycle and fixed question order
"""
import enum

from sqlalchemy import (
    Column, Integer, DateTime, Enum, ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from quizplay.database import Base


class SessionStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class QuizSession(Base):
    """
    Quiz sessions table - one user's run through a server-chosen question list

    total_questions is fixed at start; answered_count only grows and never
    exceeds it.
    """
    __tablename__ = "quiz_sessions"
    __table_args__ = (
        CheckConstraint("answered_count >= 0 AND answered_count <= total_questions",
                        name="ck_quiz_sessions_answered_count"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(
        Enum(SessionStatus, name="session_status"),
        nullable=False,
        default=SessionStatus.IN_PROGRESS,
    )
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))
    total_questions = Column(Integer, nullable=False)
    answered_count = Column(Integer, nullable=False, default=0)

    assignments = relationship(
        "SessionQuiz",
        back_populates="session",
        order_by="SessionQuiz.order",
    )
    result = relationship("SessionResult", back_populates="session", uselist=False)

    def __repr__(self):
        return (
            f"<QuizSession(id={self.id}, user_id={self.user_id}, status={self.status}, "
            f"answered={self.answered_count}/{self.total_questions})>"
        )


class SessionQuiz(Base):
    """
    Session assignment rows - (session, order) -> quiz, written once at start
    """
    __tablename__ = "session_quizzes"
    __table_args__ = (
        UniqueConstraint("session_id", "order", name="uq_session_quizzes_order"),
        UniqueConstraint("session_id", "quiz_id", name="uq_session_quizzes_quiz"),
    )

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("quiz_sessions.id"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False)
    order = Column(Integer, nullable=False)

    session = relationship("QuizSession", back_populates="assignments")

    def __repr__(self):
        return f"<SessionQuiz(session_id={self.session_id}, order={self.order}, quiz_id={self.quiz_id})>"
