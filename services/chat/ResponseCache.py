"""Best-effort response cache in front of the answering pipeline.

Keys are derived from (session_id, normalized query). Backend failures and
undecodable entries degrade to a miss; nothing raised by the cache client
ever reaches the caller.
"""

import hashlib
import re

import pydantic

from shared.clients.cache.CacheClientInterface import CacheClientInterface
from shared.errors.exceptions import CacheError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse

KEY_PREFIX = "rag:chat"

_RE_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    """Trim, collapse inner whitespace and lowercase a query."""
    return _RE_WHITESPACE.sub(" ", query.strip()).lower()


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def session_prefix(session_id: str) -> str:
    """Key prefix shared by every entry of one session.

    The session id is hashed to a fixed length, so no session prefix is ever
    a prefix of another session's keys and no glob character reaches the backend.
    """
    return f"{KEY_PREFIX}:{_digest(session_id)}:"


def build_key(session_id: str, query: str) -> str:
    """Derive the cache key for a (session, query) pair."""
    return f"{session_prefix(session_id)}{_digest(normalize_query(query))}"


class ResponseCache:
    """Memoizes (session, query) → ChatResponse on an optional cache client."""

    def __init__(self, helper_config: HelperConfig, cache_client: CacheClientInterface | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._cache_client = cache_client
        self.ttl = int(helper_config.get_number_val("CACHE_TTL", default=3600))

    def is_enabled(self) -> bool:
        return self._cache_client is not None

    async def get(self, session_id: str, query: str) -> ChatResponse | None:
        """Return the cached answer, or None on miss, outage or a corrupt entry."""
        if self._cache_client is None:
            return None
        key = build_key(session_id, query)
        try:
            raw = await self._cache_client.do_get(key)
        except CacheError as exc:
            self.logging.warning("Cache lookup failed for session=%s, treating as miss: %s", session_id, exc)
            return None
        except Exception as exc:
            self.logging.error("Unexpected cache error on lookup for session=%s, treating as miss: %r", session_id, exc)
            return None
        if raw is None:
            return None
        try:
            return ChatResponse.model_validate_json(raw)
        except pydantic.ValidationError as exc:
            self.logging.warning("Discarding undecodable cache entry %s: %s", key, exc)
            return None

    async def set(self, session_id: str, query: str, value: ChatResponse, ttl: int | None = None) -> None:
        """Store an answer. Failures are logged and dropped."""
        if self._cache_client is None:
            return
        try:
            await self._cache_client.do_set(build_key(session_id, query), value.model_dump_json(), ttl or self.ttl)
        except CacheError as exc:
            self.logging.warning("Cache write failed for session=%s: %s", session_id, exc)
        except Exception as exc:
            self.logging.error("Unexpected cache error on write for session=%s: %r", session_id, exc)

    async def invalidate(self, session_id: str) -> int:
        """Remove every cached answer of a session.

        Returns:
            int: Number of removed entries, 0 if the cache is disabled or unreachable.
        """
        if self._cache_client is None:
            return 0
        try:
            return await self._cache_client.do_delete_prefix(session_prefix(session_id))
        except CacheError as exc:
            self.logging.warning("Cache invalidation failed for session=%s: %s", session_id, exc)
            return 0
        except Exception as exc:
            self.logging.error("Unexpected cache error on invalidation for session=%s: %r", session_id, exc)
            return 0
