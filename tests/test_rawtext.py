"""Unit tests for structured message flattening."""

import json

import pytest

from tellraw_rawtext import RawtextError, parse_tellraw, rawtext_to_text, translate_tellraw


MESSAGE = {
    "rawtext": [
        {"text": "Hi "},
        {"selector": "@p"},
        {"text": ", kills: "},
        {"score": {"name": "@s", "objective": "kills"}},
    ]
}


class TestTranslate:
    """Tests for translate_tellraw."""

    def test_substitutions(self):
        out = translate_tellraw(MESSAGE, {"@p": "Steve"}, {"kills": {"@s": 5}})
        assert out["rawtext"][1] == {"text": "Steve"}
        assert out["rawtext"][3] == {"text": "5"}

    def test_unknown_become_empty(self):
        out = translate_tellraw(MESSAGE)
        assert out["rawtext"][1] == {"text": ""}
        assert out["rawtext"][3] == {"text": ""}

    def test_input_not_mutated(self):
        before = json.dumps(MESSAGE)
        translate_tellraw(MESSAGE, {"@p": "Steve"})
        assert json.dumps(MESSAGE) == before

    def test_malformed_score_kept(self):
        message = {"rawtext": [{"score": {"name": "@s"}}, {"selector": 3}]}
        assert translate_tellraw(message) == message

    def test_non_rawtext_passthrough(self):
        assert translate_tellraw({"text": "x"}) == {"text": "x"}
        assert translate_tellraw("plain") == "plain"


class TestFlatten:
    """Tests for rawtext_to_text and parse_tellraw."""

    def test_string_passthrough(self):
        assert rawtext_to_text("§lHi") == "§lHi"

    def test_concatenates_text(self):
        message = {"rawtext": [{"text": "a"}, {"translate": "x"}, {"text": "b"}]}
        assert rawtext_to_text(message) == "ab"

    def test_other_values_dumped(self):
        assert rawtext_to_text({"text": "x"}) == '{"text":"x"}'
        assert rawtext_to_text(42) == "42"

    def test_parse(self):
        source = json.dumps(MESSAGE)
        assert parse_tellraw(source, {"@p": "Alex"}, {"kills": {"@s": 12}}) == "Hi Alex, kills: 12"

    def test_parse_string(self):
        assert parse_tellraw('"§cred"') == "§cred"

    def test_invalid_json(self):
        with pytest.raises(RawtextError):
            parse_tellraw("{not json")

    def test_error_is_value_error(self):
        assert issubclass(RawtextError, ValueError)
