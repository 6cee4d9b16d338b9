"""
Read-only access to quiz content and answer keys
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from quizplay.errors import QuizNotFound
from quizplay.models import Category, Difficulty, Quiz
from quizplay.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)


class AnswerKeyStore:
    """
    Lookups against content owned by quiz authoring

    find_quiz returns correctness flags and is for scoring only;
    public_quiz is the client-safe rendering and the only one that is cached.
    """

    def __init__(self, cache: CacheService):
        self.cache = cache

    def find_quiz(self, db: Session, quiz_id: int) -> Quiz:
        quiz = db.execute(
            select(Quiz).options(selectinload(Quiz.answers)).where(Quiz.id == quiz_id)
        ).scalar_one_or_none()
        if quiz is None:
            raise QuizNotFound(f"Quiz {quiz_id} not found")
        return quiz

    def find_quiz_ids_random(
        self,
        db: Session,
        limit: int,
        difficulty: Optional[Difficulty] = None,
        category_id: Optional[int] = None
    ) -> List[int]:
        """
        Pick up to `limit` quiz ids matching the filters in random order

        Ordering is done by the database (ORDER BY random()) so every matching
        quiz is equally likely to be picked and to land in any position.
        """
        stmt = select(Quiz.id)
        if difficulty is not None:
            stmt = stmt.where(Quiz.difficulty == difficulty)
        if category_id is not None:
            stmt = stmt.where(Quiz.category_id == category_id)
        stmt = stmt.order_by(func.random()).limit(limit)

        return list(db.execute(stmt).scalars())

    def find_category(self, db: Session, category_id: int) -> Optional[Category]:
        return db.get(Category, category_id)

    def public_quiz(self, db: Session, quiz_id: int) -> Dict[str, Any]:
        """
        Client-safe quiz content: no correctness flags

        Served from redis when possible, loaded and cached otherwise.
        """
        cached = self.cache.get_quiz(quiz_id)
        if cached:
            return cached

        quiz = self.find_quiz(db, quiz_id)
        payload = {
            "id": quiz.id,
            "question": quiz.question,
            "description": quiz.description,
            "time_limit": quiz.time_limit,
            "max_prize": quiz.max_prize,
            "difficulty": quiz.difficulty.value,
            "category_id": quiz.category_id,
            "answers": [
                {"id": a.id, "label": a.label.value, "text": a.text}
                for a in quiz.answers
            ],
        }
        self.cache.set_quiz(quiz_id, payload)
        return payload


# Global instance
answer_key_store = AnswerKeyStore(cache_service)
