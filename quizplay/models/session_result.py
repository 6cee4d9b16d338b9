"""
SessionResult model - immutable aggregate written when a session completes
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from quizplay.database import Base


class SessionResult(Base):
    __tablename__ = "session_results"

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("quiz_sessions.id"), nullable=False, unique=True)
    user_id = Column(Integer, nullable=False, index=True)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    total_time_spent = Column(Integer, nullable=False)
    total_coins_earned = Column(Integer, nullable=False)
    accuracy = Column(Float, nullable=False)  # 0.00 to 100.00
    completed_at = Column(DateTime(timezone=True), nullable=False, index=True)

    session = relationship("QuizSession", back_populates="result")
    attempts = relationship("AnswerAttempt", back_populates="result", order_by="AnswerAttempt.id")

    def __repr__(self):
        return f"<SessionResult(session_id={self.session_id}, accuracy={self.accuracy})>"
