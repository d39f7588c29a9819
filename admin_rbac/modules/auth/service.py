import hashlib
import logging
import time
from supabase import AsyncClient
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    """
    Identity provider backed by Supabase Auth.

    Maps a bearer token to the acting user id. Missing, invalid and expired
    tokens all resolve to None, which callers treat as unauthenticated.
    """

    def __init__(
        self,
        supabase: AsyncClient,
        cache_ttl_seconds: float = _AUTH_CACHE_TTL_SEC,
        cache_max_size: int = _AUTH_CACHE_MAX_SIZE
    ):
        self.supabase = supabase
        self.cache_ttl_seconds = cache_ttl_seconds
        self.cache_max_size = cache_max_size
        # sha256(token) -> (user_id, expiry); bounds repeated auth API calls for the same token
        self._cache: Dict[str, Tuple[str, float]] = {}

    async def get_user_id(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None

        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in self._cache:
            user_id, expiry = self._cache[cache_key]
            if now < expiry:
                return user_id
            del self._cache[cache_key]

        try:
            user_response = await self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info("Rejected bearer token: %s", e)
            return None

        if not user_response or not user_response.user:
            return None

        user_id = user_response.user.id
        if len(self._cache) < self.cache_max_size:
            self._cache[cache_key] = (user_id, now + self.cache_ttl_seconds)
        return user_id
