import sys

from cfbproxy.config import Settings
from cfbproxy.context import build_context
from cfbproxy.logs import setup_logging
from cfbproxy.preload import PreloadError, preload_rankings, preload_teams
from cfbproxy.store import CacheStoreError


def main():
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    ctx = build_context(settings)
    if not ctx.caching_enabled:
        print("[preload][ERROR] Cache store unreachable, nothing to preload")
        sys.exit(1)

    try:
        try:
            wrote = preload_teams(ctx)
            print(f"[preload] Teams: {'written' if wrote else 'already cached'}")
        except (PreloadError, CacheStoreError) as e:
            print(f"[preload][WARN] Teams preload failed: {e}")

        result = preload_rankings(ctx)
        print(f"[preload] Rankings preload complete: {result}")
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
