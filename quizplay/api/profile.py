"""
Player statistics API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from quizplay.database import get_db
from quizplay.dependencies import get_current_user_id
from quizplay.schemas.profile import QuizHistoryItem, UserStats
from quizplay.services.stats_service import stats_service

router = APIRouter(prefix="/api/users", tags=["profile"])
logger = logging.getLogger(__name__)


@router.get("/me/stats", response_model=UserStats)
def get_my_stats(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Statistics over the caller's completed sessions

    Returns:
    - Totals (sessions, coins, correct answers)
    - High score and mean accuracy
    - Rank by coins earned this month
    - Top categories by accuracy
    """
    try:
        logger.info(f"Fetching stats for user {user_id}")
        return UserStats(**stats_service.get_user_stats(db, user_id))

    except Exception as e:
        logger.error(f"Failed to fetch stats for user {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to retrieve user statistics")


@router.get("/me/history", response_model=List[QuizHistoryItem])
def get_my_history(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Completed sessions, newest first"""
    try:
        return [QuizHistoryItem(**item) for item in stats_service.get_history(db, user_id)]

    except Exception as e:
        logger.error(f"Failed to fetch history for user {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to retrieve quiz history")
