"""
Redis cache for client-safe quiz content
"""
import redis
import json
import logging
from typing import Optional, Any, Dict
from quizplay.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-backed cache for the public rendering of a quiz

    Only content without correctness flags is ever stored here. Every method
    degrades to a no-op when redis is disabled or unreachable.
    """

    KEY_PREFIX = "quiz:public"

    def __init__(self, url: str = None, enabled: bool = True):
        self.redis_client = None
        if not enabled:
            logger.info("Quiz cache disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2
            )
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def quiz_key(self, quiz_id: int) -> str:
        return f"{self.KEY_PREFIX}:{quiz_id}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds (default QUIZ_CACHE_TTL)
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.QUIZ_CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except redis.RedisError as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def get_quiz(self, quiz_id: int) -> Optional[Dict[str, Any]]:
        return self.get(self.quiz_key(quiz_id))

    def set_quiz(self, quiz_id: int, payload: Dict[str, Any]) -> bool:
        return self.set(self.quiz_key(quiz_id), payload)


# Global instance
cache_service = CacheService(enabled=settings.CACHE_ENABLED)
