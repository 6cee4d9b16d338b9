"""
Quiz and Answer models - question content consulted by the session engine
"""
import enum

from sqlalchemy import Column, String, Integer, Text, Boolean, TIMESTAMP, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from quizplay.database import Base


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class AnswerLabel(str, enum.Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class Quiz(Base):
    """
    Quizzes table - one question with its ordered answer options
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True)
    question = Column(Text, nullable=False)
    description = Column(Text)
    time_limit = Column(Integer)  # seconds, null = untimed
    max_prize = Column(Integer, nullable=False, default=0)
    difficulty = Column(Enum(Difficulty, name="difficulty"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    created_by = Column(Integer)
    created_at = Column(TIMESTAMP, server_default=func.now())

    answers = relationship(
        "Answer",
        back_populates="quiz",
        order_by="Answer.id",
        cascade="all, delete-orphan",
    )
    category = relationship("Category")

    def __repr__(self):
        return f"<Quiz(id={self.id}, difficulty={self.difficulty}, category_id={self.category_id})>"


class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(Enum(AnswerLabel, name="answer_label"), nullable=False)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    quiz = relationship("Quiz", back_populates="answers")

    def __repr__(self):
        return f"<Answer(id={self.id}, quiz_id={self.quiz_id}, label={self.label})>"
