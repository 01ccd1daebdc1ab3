from dataclasses import dataclass

from .cfbd import CFBDClient
from .config import Settings
from .store import CacheStore, open_store


@dataclass
class AppContext:
    """
    Everything a request handler or the preloader needs, built once at startup.
    store is None when caching is disabled (unreachable or turned off).
    """
    settings: Settings
    client: CFBDClient
    store: CacheStore | None = None

    @property
    def caching_enabled(self) -> bool:
        return self.store is not None

    def close(self):
        if self.store is not None:
            self.store.close()
        self.client.close()


def build_context(settings: Settings, client: CFBDClient | None = None,
                  store: CacheStore | None = None) -> AppContext:
    if client is None:
        client = CFBDClient(api_key=settings.api_key, base_url=settings.base_url)
    return AppContext(settings=settings, client=client, store=open_store(settings, store))
