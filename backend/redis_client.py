"""
Redis helpers: catalog and guest caching, session revocation, rate limiting.

Redis is optional. When it is down every cache lookup misses, nothing is
revoked and rate limits are not enforced.
"""
import os
import inspect
import json
import logging
import redis
from typing import Optional, List, Dict, Any, Tuple
from functools import wraps
from fastapi import HTTPException, status
import time

logger = logging.getLogger(__name__)

CATALOG_CACHE_TTL = int(os.getenv("CATALOG_CACHE_TTL", "300"))
GUEST_CACHE_TTL = int(os.getenv("GUEST_CACHE_TTL", "60"))


class RedisClient:

    def __init__(self):
        self.redis_host = os.getenv("REDIS_HOST", "redis")
        redis_port_env = os.getenv("REDIS_SERVICE_PORT") or os.getenv("REDIS_PORT") or "6379"
        self.redis_port = int(str(redis_port_env).split(":")[-1])

        try:
            self.client = redis.Redis(
                host=self.redis_host,
                port=self.redis_port,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            self.client.ping()
        except Exception as e:
            logger.warning("Could not connect to Redis at %s:%s: %s", self.redis_host, self.redis_port, e)
            self.client = None

    def is_available(self) -> bool:
        if not self.client:
            return False
        try:
            self.client.ping()
            return True
        except redis.RedisError:
            return False

    def _set_json(self, key: str, value: Any, ttl: int) -> bool:
        if not self.is_available():
            return False
        try:
            self.client.setex(key, ttl, json.dumps(value, default=str))
            return True
        except redis.RedisError as e:
            logger.warning("Failed to cache %s: %s", key, e)
            return False

    def _get_json(self, key: str) -> Optional[Any]:
        if not self.is_available():
            return None
        try:
            cached = self.client.get(key)
            if cached:
                return json.loads(cached)
        except (redis.RedisError, ValueError) as e:
            logger.warning("Failed to read %s from cache: %s", key, e)
        return None

    def _delete_pattern(self, pattern: str) -> bool:
        if not self.is_available():
            return False
        try:
            keys = self.client.keys(pattern)
            if keys:
                self.client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.warning("Failed to invalidate %s: %s", pattern, e)
            return False

    # ========== Services catalog ==========

    def cache_services(self, services: List[Dict], ttl: int = CATALOG_CACHE_TTL) -> bool:
        return self._set_json("services:all", services, ttl)

    def get_cached_services(self) -> Optional[List[Dict]]:
        return self._get_json("services:all")

    def invalidate_services_cache(self) -> bool:
        return self._delete_pattern("services:*")

    # ========== Menu items catalog ==========

    def cache_menu_items(self, items: List[Dict], item_type: Optional[str] = None,
                         ttl: int = CATALOG_CACHE_TTL) -> bool:
        return self._set_json(f"menu_items:{item_type or 'all'}", items, ttl)

    def get_cached_menu_items(self, item_type: Optional[str] = None) -> Optional[List[Dict]]:
        return self._get_json(f"menu_items:{item_type or 'all'}")

    def invalidate_menu_items_cache(self) -> bool:
        return self._delete_pattern("menu_items:*")

    # ========== Guests ==========

    def cache_guests(self, guests: List[Dict], search: Optional[str] = None, ttl: int = GUEST_CACHE_TTL) -> bool:
        # searches are not cached, they are short-lived and unbounded
        if search:
            return False
        return self._set_json("guests:all", guests, ttl)

    def get_cached_guests(self, search: Optional[str] = None) -> Optional[List[Dict]]:
        if search:
            return None
        return self._get_json("guests:all")

    def invalidate_guests_cache(self) -> bool:
        return self._delete_pattern("guests:*")

    # ========== Sessions ==========

    def revoke_session(self, session_id: str, expires_at: Optional[int] = None) -> bool:
        if not self.is_available() or not session_id:
            return False
        ttl = int(expires_at - time.time()) if expires_at else 24 * 3600
        if ttl <= 0:
            return True
        try:
            self.client.setex(f"session:revoked:{session_id}", ttl, "1")
            return True
        except redis.RedisError as e:
            logger.warning("Failed to revoke session %s: %s", session_id, e)
            return False

    def is_session_revoked(self, session_id: Optional[str]) -> bool:
        if not session_id or not self.is_available():
            return False
        try:
            return bool(self.client.exists(f"session:revoked:{session_id}"))
        except redis.RedisError as e:
            logger.warning("Failed to check session %s: %s", session_id, e)
            return False

    # ========== Rate Limiting ==========

    def check_rate_limit(self, key: str, max_requests: int = 10, window: int = 60) -> Tuple[bool, int]:
        """Return (allowed, remaining requests in the window)."""
        if not self.is_available():
            return True, max_requests

        try:
            current = self.client.incr(key)
            if current == 1:
                self.client.expire(key, window)

            remaining = max(0, max_requests - current)
            allowed = current <= max_requests

            return allowed, remaining
        except redis.RedisError as e:
            logger.warning("Rate limit check failed: %s", e)
            return True, max_requests

    # ========== Utilities ==========

    def clear_all_cache(self) -> bool:
        cleared = True
        for pattern in ["services:*", "menu_items:*", "guests:*"]:
            cleared = self._delete_pattern(pattern) and cleared
        return cleared

    def get_cache_info(self) -> Dict[str, Any]:
        if not self.is_available():
            return {"status": "unavailable"}

        try:
            info = {
                "status": "available",
                "services_cached": self.client.exists("services:all"),
                "menu_item_lists_cached": len(self.client.keys("menu_items:*")),
                "guests_cached": self.client.exists("guests:all"),
                "revoked_sessions": len(self.client.keys("session:revoked:*")),
            }
            return info
        except redis.RedisError as e:
            return {"status": "error", "error": str(e)}


redis_client = RedisClient()


def rate_limit(max_requests: int = 10, window: int = 60, key_prefix: str = "rate_limit"):
    """Limit calls to a route per client address.

    Sync routes keep a sync wrapper so FastAPI still runs them in its
    threadpool instead of on the event loop.
    """
    def decorator(func):
        def check(args, kwargs):
            request = kwargs.get('request') or (args[0] if args and hasattr(args[0], 'client') else None)

            if request and getattr(request, 'client', None) is not None:
                client_host = getattr(request.client, 'host', None) or "unknown"
                rate_key = f"{key_prefix}:{func.__name__}:{client_host}"
            else:
                rate_key = f"{key_prefix}:{func.__name__}:global"

            allowed, remaining = redis_client.check_rate_limit(rate_key, max_requests, window)

            if not allowed:
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail=f"Rate limit exceeded. Try again in {window} seconds."
                )
            return remaining

        def add_headers(response, remaining):
            if hasattr(response, 'headers'):
                response.headers["X-RateLimit-Limit"] = str(max_requests)
                response.headers["X-RateLimit-Remaining"] = str(remaining)
                response.headers["X-RateLimit-Reset"] = str(int(time.time()) + window)
            return response

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                remaining = check(args, kwargs)
                return add_headers(await func(*args, **kwargs), remaining)
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            remaining = check(args, kwargs)
            return add_headers(func(*args, **kwargs), remaining)
        return wrapper
    return decorator
