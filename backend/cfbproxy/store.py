"""
Key-value cache stores.

Both backends hold JSON-encoded strings under plain string keys with an
optional time-to-live. Only SET/GET/EXISTS/DEL/PING are used; no transactions
and no multi-key operations.
"""
import logging
import time
from abc import ABC, abstractmethod
from datetime import timedelta

import redis
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .db import CONNECT_TIMEOUT_SECONDS, init_db, make_engine, make_sessionmaker
from .repo import cache_delete, cache_get, cache_set

logger = logging.getLogger(__name__)


class CacheStoreError(Exception):
    """Raised when the backing store cannot complete an operation."""


class CacheStore(ABC):
    @abstractmethod
    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def ping(self) -> None:
        ...

    def close(self) -> None:
        pass


def _split_addr(addr: str) -> tuple[str, int]:
    host, _, port = addr.rpartition(":")
    if not host:
        return addr, 6379
    return host, int(port)


class RedisStore(CacheStore):
    def __init__(self, addr: str = "localhost:6379", client: redis.Redis | None = None):
        self.addr = addr
        if client is None:
            host, port = _split_addr(addr)
            client = redis.Redis(
                host=host,
                port=port,
                db=0,
                password=None,
                socket_connect_timeout=CONNECT_TIMEOUT_SECONDS,
                socket_timeout=CONNECT_TIMEOUT_SECONDS,
                decode_responses=True,
            )
        self._client = client

    def set(self, key, value, ttl=None):
        try:
            self._client.set(key, value, ex=ttl)
        except redis.RedisError as e:
            raise CacheStoreError(f"failed to set {key}: {e}") from e

    def get(self, key):
        try:
            return self._client.get(key)
        except redis.RedisError as e:
            raise CacheStoreError(f"failed to get {key}: {e}") from e

    def exists(self, key):
        try:
            return self._client.exists(key) > 0
        except redis.RedisError as e:
            raise CacheStoreError(f"failed to check key existence {key}: {e}") from e

    def delete(self, key):
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            raise CacheStoreError(f"failed to delete {key}: {e}") from e

    def ping(self):
        try:
            self._client.ping()
        except redis.RedisError as e:
            raise CacheStoreError(f"failed to connect to Redis at {self.addr}: {e}") from e

    def close(self):
        self._client.close()


class SqlStore(CacheStore):
    """
    Cache table in a SQL database (SQLite locally, Postgres on Render).
    Expired rows are treated as absent; they are overwritten on the next set.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine = make_engine(database_url)
        self._sessions = make_sessionmaker(self._engine)

    def set(self, key, value, ttl=None):
        expires_at = int(time.time() + ttl.total_seconds()) if ttl is not None else None
        db = self._sessions()
        try:
            cache_set(db, key, value, expires_at=expires_at)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise CacheStoreError(f"failed to set {key}: {e}") from e
        finally:
            db.close()

    def get(self, key):
        db = self._sessions()
        try:
            row = cache_get(db, key)
            return row.value if row else None
        except SQLAlchemyError as e:
            raise CacheStoreError(f"failed to get {key}: {e}") from e
        finally:
            db.close()

    def exists(self, key):
        return self.get(key) is not None

    def delete(self, key):
        db = self._sessions()
        try:
            cache_delete(db, key)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise CacheStoreError(f"failed to delete {key}: {e}") from e
        finally:
            db.close()

    def ping(self):
        try:
            init_db(self._engine)
        except SQLAlchemyError as e:
            raise CacheStoreError(f"failed to connect to {self.database_url}: {e}") from e

    def close(self):
        self._engine.dispose()


def build_store(settings: Settings) -> CacheStore | None:
    backend = settings.cache_backend
    if backend == "redis":
        return RedisStore(settings.redis_addr)
    if backend == "sql":
        return SqlStore(settings.database_url)
    if backend in ("none", "off", ""):
        return None
    raise ValueError(f"unknown CACHE_BACKEND: {backend!r}")


def open_store(settings: Settings, store: CacheStore | None = None) -> CacheStore | None:
    """
    Build the configured store and check connectivity once.
    Returns None when the store is unreachable; callers then run uncached
    for the lifetime of the process (no reconnect attempts).
    """
    if store is None:
        store = build_store(settings)
    if store is None:
        logger.info("Cache backend disabled by configuration")
        return None

    try:
        store.ping()
    except CacheStoreError as e:
        logger.warning("Cache store connection failed: %s. Caching will be disabled.", e)
        store.close()
        return None

    logger.info("Cache store connected successfully (%s)", settings.cache_backend)
    return store
