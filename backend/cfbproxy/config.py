import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.collegefootballdata.com"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _normalize_db_url(url: str) -> str:
    # Render gives postgres URLs like postgres://..., SQLAlchemy expects postgresql://...
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    cache_backend: str = "redis"
    redis_addr: str = "localhost:6379"
    database_url: str = "sqlite:///./cfb_cache.sqlite3"
    http_port: int = 8080
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    preload_on_startup: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Read settings from the process environment.
        A local .env file (if present) is loaded first; real env vars win.
        """
        if dotenv:
            load_dotenv()

        # Set CORS_ORIGINS to comma-separated list, e.g.:
        # https://your-site.netlify.app,http://localhost:5173
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

        return cls(
            api_key=os.getenv("CFBD_API_KEY", ""),
            base_url=os.getenv("CFBD_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            cache_backend=os.getenv("CACHE_BACKEND", "redis").strip().lower(),
            redis_addr=os.getenv("REDIS_ADDR") or "localhost:6379",
            database_url=_normalize_db_url(os.getenv("DATABASE_URL", "sqlite:///./cfb_cache.sqlite3")),
            http_port=int(os.getenv("HTTP_PORT") or 8080),
            cors_origins=origins,
            preload_on_startup=_env_bool("PRELOAD_ON_STARTUP", True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
