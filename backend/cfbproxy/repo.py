import time
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from .models import CacheEntry

_UPSERTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


def _is_live(row: CacheEntry | None, now: int) -> bool:
    return row is not None and (row.expires_at is None or row.expires_at > now)


def cache_get(db: Session, key: str, now: int | None = None) -> CacheEntry | None:
    now = now if now is not None else int(time.time())
    row = db.get(CacheEntry, key)
    if not _is_live(row, now):
        return None
    return row

def cache_set(db: Session, key: str, value: str, expires_at: int | None = None):
    # single statement upsert: concurrent writers of a new key don't collide, last one wins
    insert = _UPSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        db.merge(CacheEntry(key=key, value=value, expires_at=expires_at))
        return

    stmt = insert(CacheEntry).values(key=key, value=value, expires_at=expires_at)
    db.execute(stmt.on_conflict_do_update(
        index_elements=[CacheEntry.key],
        set_={"value": stmt.excluded.value, "expires_at": stmt.excluded.expires_at},
    ))

def cache_delete(db: Session, key: str) -> int:
    return db.query(CacheEntry).filter(CacheEntry.key == key).delete()
