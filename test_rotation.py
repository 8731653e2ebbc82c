# type: ignore
"""
Tests for the pure rotation primitives, the slash-command parser and log lines.
"""

import json
import logging
import random

from rotation_service.core.logging import JSONFormatter
from rotation_service.services.command_parser import CommandArgs, parse_command
from rotation_service.services.rotation import (
    build_mentions,
    difference,
    render_template,
    shuffled,
)


class TestDifference:
    def test_removes_taken_members_preserving_pool_order(self):
        assert difference(["a", "b", "c", "d"], ["c", "a"]) == ["b", "d"]

    def test_empty_taken_returns_pool(self):
        assert difference(["a", "b"], []) == ["a", "b"]

    def test_superset_taken_returns_empty(self):
        assert difference(["a", "b"], ["b", "a", "z"]) == []

    def test_duplicates_in_pool_kept_when_not_taken(self):
        assert difference(["a", "b", "a"], ["b"]) == ["a", "a"]

    def test_names_unknown_to_pool_are_ignored(self):
        assert difference(["a"], ["ghost"]) == ["a"]

    def test_empty_pool(self):
        assert difference([], ["a"]) == []


class TestShuffled:
    def test_is_a_permutation(self):
        members = ["a", "b", "c", "d", "e"]
        result = shuffled(members, random.Random(7))
        assert sorted(result) == members

    def test_input_left_untouched(self):
        members = ["a", "b", "c", "d", "e"]
        shuffled(members, random.Random(7))
        assert members == ["a", "b", "c", "d", "e"]

    def test_default_rng(self):
        assert sorted(shuffled(["x", "y"])) == ["x", "y"]

    def test_every_order_reachable(self):
        rng = random.Random(1)
        seen = {tuple(shuffled(["a", "b", "c"], rng)) for _ in range(300)}
        assert len(seen) == 6


class TestTemplates:
    def test_render_replaces_every_placeholder(self):
        assert render_template("{{name}} and {{name}}", "bob") == "bob and bob"

    def test_render_without_placeholder(self):
        assert render_template("Standup time!", "bob") == "Standup time!"

    def test_mentions_single_member(self):
        assert build_mentions({"a": ["a1"]}) == "and <@a1>"

    def test_mentions_two_teams(self):
        assert build_mentions({"a": ["a1"], "b": ["b1"]}) == "<@a1>, and <@b1>"

    def test_mentions_every_member_of_last_team(self):
        mentions = build_mentions({"a": ["a1", "a2"], "b": ["b1", "b2"]})
        assert mentions == "<@a1>, <@a2>, <@b1>, and <@b2>"

    def test_mentions_empty(self):
        assert build_mentions({}) == ""


class TestParseCommand:
    def test_show_command(self):
        args = parse_command("available teams payments-zeus daily")
        assert args == CommandArgs("available", "teams", "payments-zeus", "daily")

    def test_replace_command_with_username(self):
        args = parse_command("pedro groups support payments-zeus")
        assert args.subject == "pedro"
        assert args.kind == "groups"
        assert args.scope == "support"
        assert args.sub_scope == "payments-zeus"

    def test_username_with_at_sign_and_dots(self):
        args = parse_command("@pedro.silva teams payments daily")
        assert args.subject == "pedro.silva"

    def test_unicode_identifiers(self):
        args = parse_command("selected teams équipe réunion2")
        assert args.scope == "équipe"
        assert args.sub_scope == "réunion2"

    def test_unknown_kind_rejected(self):
        assert parse_command("selected squads payments daily") is None

    def test_incomplete_command_rejected(self):
        assert parse_command("selected teams payments") is None

    def test_empty_text(self):
        assert parse_command("") is None
        assert parse_command(None) is None


# ============================================
# JSON log lines
# ============================================
class TestJSONFormatter:
    def _record(self, **extra):
        record = logging.LogRecord(
            "rotation_service.test", logging.INFO, __file__, 1, "picked %s", ("alice",), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        line = json.loads(JSONFormatter().format(self._record()))
        assert line["level"] == "INFO"
        assert line["message"] == "picked alice"
        assert line["logger"] == "rotation_service.test"
        assert "team" not in line

    def test_rotation_context_copied(self):
        line = json.loads(JSONFormatter().format(self._record(team="payments", task="daily")))
        assert line["team"] == "payments"
        assert line["task"] == "daily"
