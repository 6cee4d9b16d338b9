"""
Player statistics derived from completed session results
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quizplay.models import AnswerAttempt, Category, Quiz, SessionResult

logger = logging.getLogger(__name__)


class StatsService:
    """Service for per-user quiz statistics and history"""

    TOP_CATEGORIES = 5

    def get_user_stats(self, db: Session, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Aggregate statistics for a user

        Args:
            db: Database session
            user_id: Player id
            now: Reference time for the monthly rank (defaults to current UTC)

        Returns:
            Dictionary with totals, high score, success rate, monthly rank and
            best categories
        """
        results = db.execute(
            select(SessionResult).where(SessionResult.user_id == user_id)
        ).scalars().all()

        total_played = len(results)
        total_coins = sum(r.total_coins_earned for r in results)
        total_correct = sum(r.correct_answers for r in results)
        high_score = max((r.accuracy for r in results), default=0.0)
        success_rate = (
            sum(r.accuracy for r in results) / total_played if total_played else 0.0
        )

        month_start = self._start_of_month(now or datetime.now(timezone.utc))
        rank = self._monthly_rank(db, user_id, month_start)

        logger.info(f"Stats computed for user {user_id}: played={total_played}, rank={rank}")

        return {
            "total_played_quizzes": total_played,
            "total_earned_coins": total_coins,
            "total_correct_answers": total_correct,
            "high_score": high_score,
            "success_rate": round(success_rate, 2),
            "rank_this_month": rank,
            "category_scores": self._top_category_scores(db, user_id),
        }

    def get_history(self, db: Session, user_id: int) -> List[Dict[str, Any]]:
        """Completed sessions newest first, tagged with their first question's category"""
        results = db.execute(
            select(SessionResult)
            .where(SessionResult.user_id == user_id)
            .order_by(SessionResult.completed_at.desc(), SessionResult.id.desc())
        ).scalars().all()

        history = []
        for result in results:
            category = db.execute(
                select(Category)
                .join(Quiz, Quiz.category_id == Category.id)
                .join(AnswerAttempt, AnswerAttempt.quiz_id == Quiz.id)
                .where(AnswerAttempt.result_id == result.id)
                .order_by(AnswerAttempt.id)
                .limit(1)
            ).scalar_one_or_none()

            history.append({
                "id": result.id,
                "session_id": result.session_id,
                "category": {
                    "id": category.id,
                    "name": category.name,
                    "color": category.color,
                    "icon": category.icon,
                } if category else None,
                "total_questions": result.total_questions,
                "correct_answers": result.correct_answers,
                "total_time_spent": result.total_time_spent,
                "total_coins_earned": result.total_coins_earned,
                "accuracy": result.accuracy,
                "completed_at": result.completed_at,
            })

        return history

    def _start_of_month(self, now: datetime) -> datetime:
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    def _monthly_rank(self, db: Session, user_id: int, month_start: datetime) -> int:
        """1 + number of users who earned more coins than user_id this month"""
        coins = func.sum(SessionResult.total_coins_earned)
        totals = dict(db.execute(
            select(SessionResult.user_id, coins)
            .where(SessionResult.completed_at >= month_start)
            .group_by(SessionResult.user_id)
        ).all())

        mine = totals.get(user_id, 0) or 0
        return 1 + sum(1 for other, total in totals.items() if other != user_id and (total or 0) > mine)

    def _top_category_scores(self, db: Session, user_id: int) -> List[Dict[str, Any]]:
        """Mean result accuracy per category the user has played, best first"""
        rows = db.execute(
            select(Category.id, Category.name, SessionResult.id, SessionResult.accuracy)
            .join(Quiz, Quiz.category_id == Category.id)
            .join(AnswerAttempt, AnswerAttempt.quiz_id == Quiz.id)
            .join(SessionResult, SessionResult.id == AnswerAttempt.result_id)
            .where(SessionResult.user_id == user_id)
            .distinct()
        ).all()

        per_category = defaultdict(lambda: {"name": "", "accuracies": []})
        for category_id, name, _result_id, accuracy in rows:
            per_category[category_id]["name"] = name
            per_category[category_id]["accuracies"].append(accuracy)

        scores = [
            {
                "category_id": category_id,
                "category_name": data["name"],
                "accuracy": round(sum(data["accuracies"]) / len(data["accuracies"]), 2),
                "quiz_count": len(data["accuracies"]),
            }
            for category_id, data in per_category.items()
        ]
        scores.sort(key=lambda x: (-x["accuracy"], x["category_id"]))

        return scores[:self.TOP_CATEGORIES]


# Global instance
stats_service = StatsService()
