# bookstore/services/rate_limiter.py
import time
import uuid

import redis
from redis.exceptions import RedisError

from bookstore.domain.errors import RateLimitError
from bookstore.utils.logging import get_logger
from bookstore.utils.retry import redis_retry
from bookstore.utils.settings import REDIS_URL

logger = get_logger(__name__)

WINDOW_SECONDS = 60

# attempts per client per window
RATE_LIMITS = {
    "register": 3,
    "login": 5,
    "change_password": 3,
}


class RateLimiter:
    """
    Sliding window limiter for the auth endpoints.
    One sorted set per (scope, client): members are attempts scored by
    timestamp, old ones trimmed on every hit, the key expires with the window.
    Shared through Redis, so limits hold across worker processes.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def _hit(self, key: str, window: int) -> int:
        now = time.time()
        pipe = self.redis.pipeline()
        pipe.zremrangebyscore(key, 0, now - window)
        pipe.zadd(key, {f"{now}:{uuid.uuid4().hex}": now})
        pipe.zcard(key)
        pipe.expire(key, window)
        _, _, count, _ = pipe.execute()
        return count

    def check(self, scope: str, client_id: str):
        limit = RATE_LIMITS[scope]
        key = f"ratelimit:{scope}:{client_id}"

        try:
            count = self._hit(key, WINDOW_SECONDS)
        except RedisError as e:
            # fail open
            logger.warning(f"Rate limiter unavailable, letting {scope} from {client_id} through: {e}")
            return

        if count > limit:
            logger.warning(f"Rate limit hit: {scope} from {client_id} ({count}/{limit} per {WINDOW_SECONDS}s)")
            raise RateLimitError(f"Too many {scope.replace('_', ' ')} attempts, please try again later")
