from datetime import datetime, timezone

import pytest

from quizplay.services.stats_service import StatsService
from tests.conftest import correct_answer_id, wrong_answer_id


def _play(db, quiz_engine, user_id, category_id, right: bool):
    started = quiz_engine.start_session(db, user_id, category_id=category_id, limit=1)
    quiz_id = started["current_quiz"]["id"]
    answer_id = correct_answer_id(db, quiz_id) if right else wrong_answer_id(db, quiz_id)
    return quiz_engine.submit_answer(
        db, user_id, started["session_id"], quiz_id, answer_id, started["current_quiz"]["start_token"]
    )


@pytest.fixture
def played(db, quiz_engine, make_category, make_quiz):
    maths = make_category("Maths")
    art = make_category("Art")
    make_quiz(maths, max_prize=100)
    make_quiz(art, max_prize=40)

    _play(db, quiz_engine, 1, maths.id, right=True)
    _play(db, quiz_engine, 1, art.id, right=False)
    _play(db, quiz_engine, 2, maths.id, right=True)
    _play(db, quiz_engine, 2, maths.id, right=True)
    return maths, art


def test_user_stats(db, clock, played):
    maths, art = played
    stats = StatsService().get_user_stats(db, 1, now=clock.now)

    assert stats["total_played_quizzes"] == 2
    assert stats["total_earned_coins"] == 100
    assert stats["total_correct_answers"] == 1
    assert stats["high_score"] == 100
    assert stats["success_rate"] == 50
    # user 2 earned 200 coins this month
    assert stats["rank_this_month"] == 2
    assert [c["category_name"] for c in stats["category_scores"]] == ["Maths", "Art"]
    assert stats["category_scores"][0]["accuracy"] == 100
    assert stats["category_scores"][1]["accuracy"] == 0


def test_rank_only_counts_current_month(db, played):
    next_month = datetime(2026, 11, 5, tzinfo=timezone.utc)
    assert StatsService().get_user_stats(db, 1, now=next_month)["rank_this_month"] == 1


def test_stats_for_new_player(db):
    stats = StatsService().get_user_stats(db, 99)

    assert stats["total_played_quizzes"] == 0
    assert stats["success_rate"] == 0
    assert stats["high_score"] == 0
    assert stats["rank_this_month"] == 1
    assert stats["category_scores"] == []


def test_history_newest_first(db, clock, quiz_engine, played):
    history = StatsService().get_history(db, 1)

    assert len(history) == 2
    assert history[0]["id"] > history[1]["id"]
    assert history[0]["category"]["name"] == "Art"
    assert history[1]["category"]["name"] == "Maths"
