"""
AnswerAttempt and AttemptMetrics models - one scored answer per (session, quiz)
"""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from quizplay.database import Base


class AnswerAttempt(Base):
    __tablename__ = "answer_attempts"
    __table_args__ = (
        UniqueConstraint("session_id", "quiz_id", name="uq_answer_attempts_session_quiz"),
    )

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("quiz_sessions.id"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    # The answer actually scored, which is not always the one submitted
    selected_answer_id = Column(Integer, ForeignKey("answers.id"), nullable=False)
    result_id = Column(Integer, ForeignKey("session_results.id"), index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    metrics = relationship(
        "AttemptMetrics",
        back_populates="attempt",
        uselist=False,
        cascade="all, delete-orphan",
    )
    quiz = relationship("Quiz")
    selected_answer = relationship("Answer")
    result = relationship("SessionResult", back_populates="attempts")

    def __repr__(self):
        return f"<AnswerAttempt(session_id={self.session_id}, quiz_id={self.quiz_id})>"


class AttemptMetrics(Base):
    __tablename__ = "attempt_metrics"

    id = Column(Integer, primary_key=True)
    attempt_id = Column(
        Integer, ForeignKey("answer_attempts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    is_correct = Column(Boolean, nullable=False)
    time_taken = Column(Integer, nullable=False)  # seconds, server computed
    coins_earned = Column(Integer, nullable=False, default=0)

    attempt = relationship("AnswerAttempt", back_populates="metrics")

    def __repr__(self):
        return f"<AttemptMetrics(attempt_id={self.attempt_id}, correct={self.is_correct})>"
