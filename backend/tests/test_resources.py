"""Key schema and payload shaping for teams, games and rankings."""

import json

import pytest

from cfbproxy.cfbd import UpstreamResponse
from cfbproxy.resources import (
    GAMES,
    RANKINGS,
    TEAMS,
    TEAMS_KEY,
    CacheDecodeError,
    games_cache_key,
    rankings_cache_key,
    simplify_team,
    simplify_teams,
)
from fakes import json_response


class TestCacheKeys:
    def test_games_key_uppercases_and_underscores(self):
        assert games_cache_key("Ohio State", 2023) == "OHIO_STATE:2023"

    def test_games_key_replaces_every_space(self):
        assert games_cache_key("texas a&m  aggies", "2019") == "TEXAS_A&M__AGGIES:2019"

    def test_games_without_team_has_no_key(self):
        assert GAMES.cache_key(2023, None) is None
        assert GAMES.cache_key(2023, "") is None

    def test_rankings_key_is_year_only(self):
        assert rankings_cache_key(1900) == "RANKINGS:1900"
        assert RANKINGS.cache_key(2023, None) == "RANKINGS:2023"

    def test_teams_key_ignores_year(self):
        assert TEAMS.cache_key(2001, None) == TEAMS_KEY
        assert TEAMS.cache_key(2023, None) == "CFB_TEAMS"


class TestSimplifyTeam:
    def test_school_sets_name_and_alias(self):
        assert simplify_team({"id": 57, "school": "Ohio State"}) == {
            "id": 57,
            "name": "Ohio State",
            "alias": "Ohio State",
        }

    def test_name_fallback_omits_alias(self):
        out = simplify_team({"id": 12, "name": "Fallback U"})
        assert out == {"id": 12, "name": "Fallback U"}
        assert "alias" not in out

    def test_extra_fields_dropped(self):
        out = simplify_team({"id": 1, "school": "Army", "mascot": "Black Knights", "conference": "Independent"})
        assert set(out) == {"id", "name", "alias"}

    def test_non_string_school_ignored(self):
        assert simplify_team({"id": 3, "school": 42, "name": "Numbers"}) == {"id": 3, "name": "Numbers"}

    def test_missing_everything(self):
        assert simplify_team({}) == {"id": None, "name": ""}

    def test_simplify_teams_rejects_non_list(self):
        assert simplify_teams({"message": "Unauthorized"}) is None
        assert simplify_teams([1, 2]) is None


class TestRender:
    def test_teams_render_simplifies(self):
        rendered = TEAMS.render(json_response([{"id": 57, "school": "Ohio State", "color": "#bb0000"}]))
        assert rendered.cache_value == [{"id": 57, "name": "Ohio State", "alias": "Ohio State"}]
        assert json.loads(rendered.body) == rendered.cache_value

    def test_teams_render_rejects_object_payload(self):
        assert TEAMS.render(json_response({"error": "nope"})) is None

    def test_teams_render_rejects_error_status(self):
        assert TEAMS.render(json_response([{"id": 1, "school": "Army"}], status_code=500)) is None

    def test_passthrough_keeps_raw_body(self):
        resp = UpstreamResponse(b'[{"season": 2023}]', 200, "application/json; charset=utf-8")
        rendered = RANKINGS.render(resp)
        assert rendered.body is resp.body
        assert rendered.cache_value == [{"season": 2023}]

    def test_passthrough_caches_raw_string_when_not_json(self):
        rendered = GAMES.render(UpstreamResponse(b"not json at all", 200, "text/plain"))
        assert rendered.cache_value == "not json at all"

    def test_passthrough_skips_error_status(self):
        assert RANKINGS.render(json_response({"message": "rate limited"}, status_code=429)) is None


class TestDecodeCached:
    def test_json_string_payload_round_trips(self):
        rendered = GAMES.render(UpstreamResponse(b'"bye week"', 200, "application/json"))
        stored = json.dumps(rendered.cache_value)
        assert json.loads(GAMES.decode_cached(json.loads(stored))) == "bye week"

    def test_teams_rejects_wrong_shape(self):
        with pytest.raises(CacheDecodeError):
            TEAMS.decode_cached({"id": 1})

    def test_raw_string_returns_original_bytes(self):
        raw = b"legacy feed \xff\x00 <xml/>"
        rendered = RANKINGS.render(UpstreamResponse(raw, 200, ""))
        stored = json.dumps(rendered.cache_value)
        assert RANKINGS.decode_cached(json.loads(stored)) == raw
