"""
Data access: question content lookups and transactional session storage
"""
from quizplay.repositories.answer_key_store import AnswerKeyStore, answer_key_store
from quizplay.repositories.session_repository import SessionRepository

__all__ = ["AnswerKeyStore", "answer_key_store", "SessionRepository"]
