import hashlib
import json
import logging
from functools import lru_cache
from typing import Dict, Optional

import redis

from assetguard.config.settings import get_settings

logger = logging.getLogger(__name__)


class ReportCache:
    """
    Detection reports cached by request hash.

    Detection is deterministic for a given snapshot, candidate and as-of
    date, so a hit is equivalent to recomputing. Redis errors are logged and
    treated as misses; the cache never fails a request.
    """

    def __init__(self, redis_url: Optional[str] = None, ttl_seconds: Optional[int] = None):
        settings = get_settings()
        self.redis_client = redis.from_url(redis_url or settings.redis_url, decode_responses=True)
        self.ttl_seconds = ttl_seconds or settings.cache_ttl_seconds

    def get(self, request_hash: str) -> Optional[Dict]:
        try:
            cached = self.redis_client.get(f"report:{request_hash}")
        except redis.RedisError as exc:
            logger.warning(f"Report cache read failed: {exc}")
            return None
        if cached:
            return json.loads(cached)
        return None

    def set(self, request_hash: str, report: Dict) -> None:
        try:
            self.redis_client.setex(
                f"report:{request_hash}",
                self.ttl_seconds,
                json.dumps(report, default=str)
            )
        except redis.RedisError as exc:
            logger.warning(f"Report cache write failed: {exc}")

    @staticmethod
    def hash_request(payload: Dict, as_of: str) -> str:
        """Hash of the request body plus the as-of date that anchors date-relative rules."""
        data = json.dumps({"request": payload, "as_of": as_of}, sort_keys=True, default=str)
        return hashlib.sha256(data.encode()).hexdigest()[:16]

    def health_check(self) -> bool:
        try:
            self.redis_client.ping()
            return True
        except redis.RedisError:
            return False


@lru_cache(maxsize=1)
def _shared_cache() -> ReportCache:
    return ReportCache()


def get_report_cache() -> Optional[ReportCache]:
    """FastAPI dependency; None when caching is disabled."""
    if not get_settings().cache_enabled:
        return None
    return _shared_cache()
