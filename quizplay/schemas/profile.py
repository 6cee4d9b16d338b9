"""
Pydantic schemas for player statistics endpoints
"""
from datetime import datetime
from typing import List, Optional

from quizplay.schemas.session import CamelModel


class CategoryScore(CamelModel):
    """Mean accuracy over the player's results touching a category"""
    category_id: int
    category_name: str
    accuracy: float
    quiz_count: int


class UserStats(CamelModel):
    total_played_quizzes: int
    total_earned_coins: int
    total_correct_answers: int
    high_score: float
    success_rate: float
    rank_this_month: int
    category_scores: List[CategoryScore]


class HistoryCategory(CamelModel):
    id: int
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None


class QuizHistoryItem(CamelModel):
    id: int
    session_id: int
    category: Optional[HistoryCategory] = None
    total_questions: int
    correct_answers: int
    total_time_spent: int
    total_coins_earned: int
    accuracy: float
    completed_at: datetime
