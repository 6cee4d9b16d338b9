"""
Database models package
"""
from quizplay.models.category import Category
from quizplay.models.quiz import Quiz, Answer, Difficulty, AnswerLabel
from quizplay.models.quiz_session import QuizSession, SessionQuiz, SessionStatus
from quizplay.models.answer_attempt import AnswerAttempt, AttemptMetrics
from quizplay.models.session_result import SessionResult

__all__ = [
    "Category",
    "Quiz",
    "Answer",
    "Difficulty",
    "AnswerLabel",
    "QuizSession",
    "SessionQuiz",
    "SessionStatus",
    "AnswerAttempt",
    "AttemptMetrics",
    "SessionResult",
]
