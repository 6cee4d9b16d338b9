"""
Quiz session API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from quizplay.database import get_db
from quizplay.dependencies import get_current_user_id, get_session_engine
from quizplay.schemas.session import (
    SessionResultResponse,
    SessionSummaryResponse,
    StartSessionRequest,
    StartSessionResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from quizplay.services.session_engine import SessionEngine

router = APIRouter(prefix="/api/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=StartSessionResponse)
def start_session(
    request: StartSessionRequest,
    user_id: int = Depends(get_current_user_id),
    engine: SessionEngine = Depends(get_session_engine),
    db: Session = Depends(get_db),
):
    """
    Start a quiz session

    - Picks up to `limit` quizzes matching the filters in random order
    - Fixes that order for the whole session
    - Returns the first quiz with its start token
    """
    logger.info(f"Starting session for user {user_id}")

    session = engine.start_session(
        db,
        user_id,
        difficulty=request.difficulty,
        category_id=request.category_id,
        limit=request.limit,
    )
    return StartSessionResponse(**session)


@router.post("/{session_id}/answers", response_model=SubmitAnswerResponse)
def submit_answer(
    session_id: int,
    submission: SubmitAnswerRequest,
    user_id: int = Depends(get_current_user_id),
    engine: SessionEngine = Depends(get_session_engine),
    db: Session = Depends(get_db),
):
    """
    Submit the answer for one quiz of the session

    Elapsed time is measured from the start token, not from the client's
    clock. Answers arriving after the quiz's time limit score as incorrect.
    The answer that completes the session also returns the final result.
    """
    response = engine.submit_answer(
        db,
        user_id,
        session_id,
        quiz_id=submission.quiz_id,
        answer_id=submission.answer_id,
        start_token=submission.start_token,
    )
    return SubmitAnswerResponse(**response)


@router.get("/{session_id}", response_model=SessionSummaryResponse)
def get_session(
    session_id: int,
    user_id: int = Depends(get_current_user_id),
    engine: SessionEngine = Depends(get_session_engine),
    db: Session = Depends(get_db),
):
    """Session status and, once completed, its result"""
    return SessionSummaryResponse(**engine.get_session_summary(db, user_id, session_id))


@router.get("/{session_id}/result", response_model=SessionResultResponse)
def get_session_result(
    session_id: int,
    user_id: int = Depends(get_current_user_id),
    engine: SessionEngine = Depends(get_session_engine),
    db: Session = Depends(get_db),
):
    """Final result of a completed session"""
    return SessionResultResponse(**engine.get_session_result(db, user_id, session_id))
