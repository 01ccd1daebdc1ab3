"""
Resource descriptors for the three proxied endpoints.

Each descriptor owns its cache key scheme and the rules for turning an
upstream response into (response body, value to cache), so the proxy can run
one pipeline for teams, games and rankings.

Key schema (shared with existing caches, do not change):
  teams     CFB_TEAMS
  games     <TEAM_UPPER_UNDERSCORE>:<YEAR>   (only with a team filter)
  rankings  RANKINGS:<YEAR>
"""
import json
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from .cfbd import UpstreamResponse

TEAMS_KEY = "CFB_TEAMS"
CACHE_TTL = timedelta(days=365)

# raw (non-JSON) bodies are cached as strings; keep undecodable bytes intact
_RAW_ERRORS = "surrogateescape"


class CacheDecodeError(ValueError):
    """Cached value does not have the shape this resource expects."""


def games_cache_key(team: str, year: int | str) -> str:
    """
    'Ohio State', 2023 -> 'OHIO_STATE:2023'
    """
    return f"{team.replace(' ', '_').upper()}:{year}"


def rankings_cache_key(year: int | str) -> str:
    return f"RANKINGS:{year}"


def dump_json(value: Any) -> bytes:
    return json.dumps(value, indent=2).encode("utf-8")


def simplify_team(t: dict) -> dict:
    """
    Keep only id and school/name where available.
    {"id": 57, "school": "Ohio State"} -> {"id": 57, "name": "Ohio State", "alias": "Ohio State"}
    """
    out = {"id": t.get("id"), "name": ""}
    school = t.get("school")
    if isinstance(school, str):
        out["name"] = school
        if school:
            out["alias"] = school
    if not out["name"]:
        name = t.get("name")
        if isinstance(name, str):
            out["name"] = name
    return out


def simplify_teams(raw: Any) -> list[dict] | None:
    if not isinstance(raw, list) or not all(isinstance(t, dict) for t in raw):
        return None
    return [simplify_team(t) for t in raw]


@dataclass(frozen=True)
class Rendered:
    body: bytes
    cache_value: Any
    # None keeps the upstream content type
    content_type: str | None = None


def _render_teams(resp: UpstreamResponse) -> Rendered | None:
    if not resp.ok:
        return None
    try:
        teams = simplify_teams(json.loads(resp.body))
    except ValueError:
        return None
    if teams is None:
        return None
    return Rendered(body=dump_json(teams), cache_value=teams, content_type="application/json")


def _decode_teams(value: Any) -> bytes:
    if not isinstance(value, list) or not all(isinstance(t, dict) for t in value):
        raise CacheDecodeError(f"expected a list of team objects, got {type(value).__name__}")
    return dump_json(value)


def _render_passthrough(resp: UpstreamResponse) -> Rendered | None:
    if not resp.ok:
        return None
    try:
        value = json.loads(resp.body)
    except ValueError:
        # As a fallback, store raw body string
        value = resp.body.decode("utf-8", errors=_RAW_ERRORS)
    else:
        # cached strings are served back verbatim, so keep a JSON string quoted
        if isinstance(value, str):
            value = resp.body.decode("utf-8", errors=_RAW_ERRORS)
    return Rendered(body=resp.body, cache_value=value)


def _decode_passthrough(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8", errors=_RAW_ERRORS)
    return dump_json(value)


@dataclass(frozen=True)
class Resource:
    kind: str
    cache_key: Callable[[int, str | None], str | None]
    render: Callable[[UpstreamResponse], Rendered | None]
    decode_cached: Callable[[Any], bytes]


TEAMS = Resource(
    kind="teams",
    cache_key=lambda year, team: TEAMS_KEY,
    render=_render_teams,
    decode_cached=_decode_teams,
)

GAMES = Resource(
    kind="games",
    cache_key=lambda year, team: games_cache_key(team, year) if team else None,
    render=_render_passthrough,
    decode_cached=_decode_passthrough,
)

RANKINGS = Resource(
    kind="rankings",
    cache_key=lambda year, team: rankings_cache_key(year),
    render=_render_passthrough,
    decode_cached=_decode_passthrough,
)
