"""
Pydantic schemas for quiz session requests and responses
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quizplay.config import settings
from quizplay.models import AnswerLabel, Difficulty


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionRequest(CamelModel):
    """Filters for picking a session's questions"""
    difficulty: Optional[Difficulty] = None
    category_id: Optional[int] = Field(None, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=settings.MAX_SESSION_SIZE, description="Number of questions")


class SubmitAnswerRequest(CamelModel):
    """One answer; answerId null means nothing was chosen"""
    quiz_id: int = Field(..., ge=1)
    answer_id: Optional[int] = None
    start_token: str = Field(..., min_length=3, description="Token issued with this question")


class ClientAnswer(CamelModel):
    """Answer option as shown to the player (no correctness flag)"""
    id: int
    label: AnswerLabel
    text: str


class ClientQuiz(CamelModel):
    """The question currently presented to the player"""
    id: int
    question: str
    description: Optional[str] = None
    time_limit: Optional[int] = None
    max_prize: int
    difficulty: Difficulty
    category_id: int
    answers: List[ClientAnswer]
    current_quiz_index: int
    start_token: str


class StartSessionResponse(CamelModel):
    session_id: int
    current_quiz: ClientQuiz
    total_quizzes: int


class AttemptSummary(CamelModel):
    quiz_id: int
    selected_answer_id: int
    is_correct: bool
    time_taken: int
    coins_earned: int


class SessionResultResponse(CamelModel):
    """Aggregate written when the session completes"""
    id: int
    session_id: int
    total_questions: int
    correct_answers: int
    total_time_spent: int
    total_coins_earned: int
    accuracy: float
    completed_at: datetime
    attempts: List[AttemptSummary]


class SubmitAnswerResponse(CamelModel):
    correct: bool
    earned_reward: int
    elapsed_seconds: int
    next_quiz: Optional[ClientQuiz] = None
    result: Optional[SessionResultResponse] = None


class SessionSummaryResponse(CamelModel):
    session_id: int
    status: str
    total_questions: int
    answered_count: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    result: Optional[SessionResultResponse] = None
