import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["START_TOKEN_SECRET"] = "test-secret"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"

import pytest  # noqa: E402
from sqlalchemy import select  # noqa: E402

from quizplay.database import Base, SessionLocal, engine  # noqa: E402
from quizplay.models import Answer, AnswerLabel, Category, Difficulty, Quiz  # noqa: E402
from quizplay.repositories.answer_key_store import AnswerKeyStore  # noqa: E402
from quizplay.services.session_engine import SessionEngine  # noqa: E402
from quizplay.utils.cache import CacheService  # noqa: E402
from quizplay.utils.start_token import StartTimeToken  # noqa: E402


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_codec():
    return StartTimeToken.from_secret("test-secret")


@pytest.fixture
def quiz_engine(token_codec, clock):
    return SessionEngine(
        start_token=token_codec,
        content=AnswerKeyStore(CacheService(enabled=False)),
        clock=clock,
    )


@pytest.fixture
def make_category(db):
    def _make(name="General"):
        category = Category(name=name, color="#0088ff", icon="book")
        db.add(category)
        db.commit()
        return category
    return _make


@pytest.fixture
def make_quiz(db):
    """Create a quiz with four answers; `correct` is the index of the right one"""
    def _make(category, correct=0, time_limit=10, max_prize=100, difficulty=Difficulty.EASY):
        quiz = Quiz(
            question="What is the answer?",
            description="A seeded question",
            time_limit=time_limit,
            max_prize=max_prize,
            difficulty=difficulty,
            category_id=category.id,
            answers=[
                Answer(label=label, text=f"Option {label.value}", is_correct=(i == correct))
                for i, label in enumerate(AnswerLabel)
            ],
        )
        db.add(quiz)
        db.commit()
        return quiz
    return _make


def correct_answer_id(db, quiz_id):
    return db.execute(
        select(Answer.id).where(Answer.quiz_id == quiz_id, Answer.is_correct.is_(True))
    ).scalar_one()


def wrong_answer_id(db, quiz_id):
    return db.execute(
        select(Answer.id)
        .where(Answer.quiz_id == quiz_id, Answer.is_correct.is_(False))
        .order_by(Answer.id.desc())
    ).scalars().first()
