from cfbproxy.config import Settings


def test_defaults(monkeypatch):
    for name in ("CFBD_API_KEY", "REDIS_ADDR", "HTTP_PORT", "CACHE_BACKEND", "DATABASE_URL",
                 "CORS_ORIGINS", "PRELOAD_ON_STARTUP", "CFBD_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env(dotenv=False)
    assert s.api_key == ""
    assert s.redis_addr == "localhost:6379"
    assert s.http_port == 8080
    assert s.cache_backend == "redis"
    assert s.preload_on_startup is True
    assert s.base_url == "https://api.collegefootballdata.com"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CFBD_API_KEY", "abc123")
    monkeypatch.setenv("REDIS_ADDR", "redis:6379")
    monkeypatch.setenv("HTTP_PORT", "9000")
    monkeypatch.setenv("CACHE_BACKEND", "SQL")
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/cfb")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("PRELOAD_ON_STARTUP", "false")

    s = Settings.from_env(dotenv=False)
    assert s.api_key == "abc123"
    assert s.redis_addr == "redis:6379"
    assert s.http_port == 9000
    assert s.cache_backend == "sql"
    assert s.database_url == "postgresql://u:p@db/cfb"
    assert s.cors_origins == ["https://a.example", "https://b.example"]
    assert s.preload_on_startup is False
