"""
Module: test_params.py
Description: Unit tests for launch URL parsing.
"""

from roastsim.session.params import params_from_query, parse_launch_url

LAUNCH_URL = (
    "https://sim.example/roaster?session_id=sess-001&learner_id=learner-42"
    "&resource_id=roast-101&api_key=key123"
    "&callback_url=https%3A%2F%2Fcb.example%2Fx%3Fa%3D1&mode=exam"
)


class TestLaunchUrl:
    """Test cases for launch URL parsing."""

    def test_full_launch_url(self):
        params = parse_launch_url(LAUNCH_URL)

        assert params.session_id == "sess-001"
        assert params.learner_id == "learner-42"
        assert params.resource_id == "roast-101"
        assert params.plain_api_key == "key123"
        assert params.callback_url == "https://cb.example/x?a=1"
        assert params.mode == "exam"

    def test_mode_defaults_to_learning(self):
        params = parse_launch_url("https://sim.example/?session_id=s1")

        assert params.mode == "learning"
        assert params.learner_id is None
        assert params.missing_launch_fields() == ["api_key", "callback_url"]

    def test_bare_query_string(self):
        assert parse_launch_url("session_id=s1&mode=demo").session_id == "s1"
        assert parse_launch_url("?session_id=s2").session_id == "s2"

    def test_blank_values_are_absent(self):
        params = parse_launch_url("https://sim.example/?session_id=&mode=")

        assert params.session_id is None
        assert params.mode == "learning"

    def test_first_value_wins_and_unknown_keys_ignored(self):
        params = parse_launch_url("session_id=a&session_id=b&colour=red")

        assert params.session_id == "a"

    def test_params_from_query_mapping(self):
        params = params_from_query({"session_id": "s1", "api_key": ["k1", "k2"], "mode": []})

        assert params.session_id == "s1"
        assert params.plain_api_key == "k1"
        assert params.mode == "learning"

    def test_bare_query_with_unencoded_callback_url(self):
        params = parse_launch_url("session_id=s1&api_key=k&callback_url=https://cb.example/x?a=1")

        assert params.session_id == "s1"
        assert params.plain_api_key == "k"
        assert params.callback_url == "https://cb.example/x?a=1"
        assert params.missing_launch_fields() == []

    def test_leading_question_mark_with_unencoded_callback_url(self):
        params = parse_launch_url("?session_id=s1&callback_url=https://cb.example/x")

        assert params.session_id == "s1"
        assert params.callback_url == "https://cb.example/x"
