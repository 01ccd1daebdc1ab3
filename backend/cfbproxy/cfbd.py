import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

KINDS = ("teams", "games", "rankings")

ON_DEMAND_TIMEOUT = 10
PRELOAD_TIMEOUT = 30


class UpstreamUnreachable(Exception):
    """Network error or timeout talking to the College Football Data API."""

    def __init__(self, url: str, reason: Exception):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class UpstreamResponse:
    body: bytes
    status_code: int
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CFBDClient:
    """
    Thin client for api.collegefootballdata.com.
    One GET per call, no retries. Non-2xx responses are returned as-is;
    only transport failures raise.
    """

    def __init__(self, api_key: str = "", base_url: str = "https://api.collegefootballdata.com",
                 session: requests.Session | None = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch(self, kind: str, year: int, team: str | None = None,
              timeout: float = ON_DEMAND_TIMEOUT) -> UpstreamResponse:
        if kind not in KINDS:
            raise ValueError(f"unknown resource kind: {kind!r}")

        url = f"{self.base_url}/{kind}"
        params = {"year": str(year)}
        if kind == "games" and team:
            params["team"] = team

        logger.info("GET %s %s", url, params)
        try:
            r = self._session.get(url, params=params, headers=self._headers(), timeout=timeout)
        except requests.RequestException as e:
            raise UpstreamUnreachable(url, e) from e

        return UpstreamResponse(
            body=r.content,
            status_code=r.status_code,
            content_type=r.headers.get("Content-Type", ""),
        )

    def close(self):
        self._session.close()
