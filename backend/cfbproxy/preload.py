from __future__ import annotations

from datetime import date
import logging
import time

from .cfbd import PRELOAD_TIMEOUT, UpstreamUnreachable
from .context import AppContext
from .proxy import CacheProxy
from .resources import RANKINGS, TEAMS, TEAMS_KEY, rankings_cache_key
from .store import CacheStoreError

logger = logging.getLogger(__name__)

FIRST_RANKINGS_YEAR = 1900
RANKINGS_DELAY_SECONDS = 0.1


class PreloadError(Exception):
    pass


def preload_teams(ctx: AppContext, year: int | None = None) -> bool:
    """
    Fetch teams for the current year and cache them under CFB_TEAMS,
    unless the key already exists. Returns True when the key was written.
    """
    if ctx.store is None:
        return False

    if ctx.store.exists(TEAMS_KEY):
        logger.info("%s cache already exists", TEAMS_KEY)
        return False

    logger.info("Preloading teams into cache...")
    year = year or date.today().year
    try:
        resp = ctx.client.fetch(TEAMS.kind, year, timeout=PRELOAD_TIMEOUT)
    except UpstreamUnreachable as e:
        raise PreloadError(f"failed to fetch teams: {e}") from e

    rendered = TEAMS.render(resp)
    if rendered is None:
        raise PreloadError(f"unusable teams payload (HTTP {resp.status_code})")

    if not CacheProxy(ctx).write(TEAMS_KEY, rendered.cache_value):
        raise PreloadError(f"failed to cache {TEAMS_KEY}")
    return True


def preload_rankings(
    ctx: AppContext,
    current_year: int | None = None,
    start_year: int = FIRST_RANKINGS_YEAR,
    delay: float = RANKINGS_DELAY_SECONDS,
    sleep=None,
) -> dict:
    """
    Ensure RANKINGS:<year> exists for start_year..current_year inclusive.
    A failure for one year is logged and the loop moves on.
    """
    current_year = current_year or date.today().year
    sleep = sleep or time.sleep
    written = 0
    skipped = 0
    failed = []

    if ctx.store is None:
        return {"ok": False, "error": "caching disabled"}

    proxy = CacheProxy(ctx)
    for y in range(start_year, current_year + 1):
        key = rankings_cache_key(y)

        try:
            exists = ctx.store.exists(key)
        except CacheStoreError as e:
            logger.warning("failed to check %s: %s", key, e)
            exists = False
        if exists:
            logger.debug("Cache key found: %s", key)
            skipped += 1
            continue

        try:
            resp = ctx.client.fetch(RANKINGS.kind, y, timeout=PRELOAD_TIMEOUT)
        except UpstreamUnreachable as e:
            logger.warning("failed to fetch rankings for %d: %s", y, e)
            failed.append(y)
            sleep(delay)
            continue

        rendered = RANKINGS.render(resp)
        if rendered is None:
            logger.warning("rankings for %d returned HTTP %d, not cached", y, resp.status_code)
            failed.append(y)
        elif proxy.write(key, rendered.cache_value):
            written += 1
        else:
            failed.append(y)

        # Small sleep to avoid hammering API
        sleep(delay)

    return {
        "ok": True,
        "start": start_year,
        "end": current_year,
        "years_checked": current_year - start_year + 1,
        "keys_written": written,
        "keys_skipped": skipped,
        "failed_years": failed,
    }


def run_startup_preload(ctx: AppContext) -> dict | None:
    if ctx.store is None:
        logger.info("Caching disabled, skipping preload")
        return None

    try:
        preload_teams(ctx)
    except (PreloadError, CacheStoreError) as e:
        logger.warning("Failed to preload teams cache: %s", e)

    result = preload_rankings(ctx)
    logger.info(
        "Rankings preload done: %d written, %d already cached, %d failed",
        result["keys_written"], result["keys_skipped"], len(result["failed_years"]),
    )
    return result
