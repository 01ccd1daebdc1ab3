import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .cfbd import ON_DEMAND_TIMEOUT
from .context import AppContext
from .resources import CACHE_TTL, Resource
from .store import CacheStoreError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class CacheLookup(str, Enum):
    HIT = "HIT"
    MISS = "MISS"
    DECODE_ERROR = "DECODE_ERROR"   # entry present but unusable, left in place
    BYPASS = "BYPASS"               # request has no cache key (games without team)
    DISABLED = "DISABLED"           # no cache store for this process


@dataclass(frozen=True)
class CacheRead:
    lookup: CacheLookup
    body: bytes | None = None


@dataclass(frozen=True)
class ProxyResult:
    body: bytes
    status_code: int
    content_type: str
    cache: CacheLookup
    stored: bool = False


class CacheProxy:
    """
    check cache -> fetch upstream -> maybe cache -> respond, for any Resource.

    Check-then-fetch-then-write is not atomic: two concurrent misses on the
    same key both go upstream and both write; last write wins.
    """

    def __init__(self, context: AppContext):
        self.client = context.client
        self.store = context.store

    def read(self, resource: Resource, key: str | None) -> CacheRead:
        if self.store is None:
            return CacheRead(CacheLookup.DISABLED)
        if key is None:
            return CacheRead(CacheLookup.BYPASS)

        try:
            if not self.store.exists(key):
                return CacheRead(CacheLookup.MISS)
            raw = self.store.get(key)
        except CacheStoreError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return CacheRead(CacheLookup.MISS)

        # expired between EXISTS and GET
        if raw is None:
            return CacheRead(CacheLookup.MISS)

        logger.info("Cache key found: %s", key)
        try:
            body = resource.decode_cached(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning("Cached value for %s could not be decoded, refetching: %s", key, e)
            return CacheRead(CacheLookup.DECODE_ERROR)
        return CacheRead(CacheLookup.HIT, body)

    def write(self, key: str, value: Any) -> bool:
        """
        Best effort: a failed write is logged, never raised.
        """
        if self.store is None:
            return False
        try:
            self.store.set(key, json.dumps(value), ttl=CACHE_TTL)
        except (CacheStoreError, TypeError, ValueError) as e:
            logger.warning("Failed to cache %s: %s", key, e)
            return False
        logger.info("Cache key written: %s", key)
        return True

    def get(self, resource: Resource, year: int, team: str | None = None,
            timeout: float = ON_DEMAND_TIMEOUT) -> ProxyResult:
        """
        Serve one request. Raises UpstreamUnreachable when the cache can't
        answer and the upstream API can't be reached.
        """
        key = resource.cache_key(year, team)
        cached = self.read(resource, key)
        if cached.lookup is CacheLookup.HIT:
            return ProxyResult(cached.body, 200, JSON_CONTENT_TYPE, cached.lookup)

        resp = self.client.fetch(resource.kind, year, team=team, timeout=timeout)
        rendered = resource.render(resp)
        if rendered is None:
            # unusable payload or upstream error: forward raw bytes and status
            return ProxyResult(
                resp.body,
                resp.status_code,
                resp.content_type or JSON_CONTENT_TYPE,
                cached.lookup,
            )

        stored = False
        if key is not None and self.store is not None:
            stored = self.write(key, rendered.cache_value)

        content_type = rendered.content_type or resp.content_type or JSON_CONTENT_TYPE
        return ProxyResult(rendered.body, resp.status_code, content_type, cached.lookup, stored)
