import json
from unittest.mock import MagicMock

import pytest

from themegen import generator, llm_prompts
from themegen.errors import CompletionError, GenerationError, ParseError, ValidationError


def _reply(theme):
    return "Here you go:\n```json\n" + json.dumps(theme) + "\n```"


class FakeCompletion:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def __call__(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        return self.text


def test_generate_theme_parses_and_infers_mode():
    fake = FakeCompletion(_reply({"themeName": "Abyss", "advice": "deep", "colors": {"canvasBackground": "#050510"}}))
    theme = generator.generate_theme("deep ocean at night", complete=fake)
    assert theme["themeName"] == "Abyss"
    assert theme["isDark"] is True
    assert len(fake.calls) == 1
    system_prompt, user_prompt = fake.calls[0]
    assert system_prompt == llm_prompts.build_generation_prompt()
    assert user_prompt == "deep ocean at night"


def test_generate_theme_bad_text_wraps_parse_error():
    raw = "I cannot help with that." * 50
    with pytest.raises(GenerationError) as ei:
        generator.generate_theme("anything", complete=FakeCompletion(raw))
    err = ei.value
    assert isinstance(err.__cause__, ParseError)
    assert err.snippet == raw[:500]
    assert err.to_dict()["code"] == "GENERATION_FAILED"
    assert err.to_dict()["detail"] == "no JSON object found"


def test_generate_theme_missing_background_wraps_validation_error():
    fake = FakeCompletion(json.dumps({"themeName": "Half", "colors": {"accent": "#FF0000"}}))
    with pytest.raises(GenerationError) as ei:
        generator.generate_theme("half a theme", complete=fake)
    assert isinstance(ei.value.__cause__, ValidationError)


def test_invert_forces_mode_and_group_regardless_of_reply():
    existing = {
        "id": "a" * 32,
        "themeName": "Meadow",
        "isDark": False,
        "groupId": "g1",
        "colors": {"canvasBackground": "#F5FFF0"},
    }
    # the model claims a light theme with a different group
    reply = {"themeName": "Meadow Night", "isDark": False, "groupId": "other", "id": "zzz",
             "colors": {"canvasBackground": "#FAFAFA"}}
    fake = FakeCompletion(_reply(reply))
    inverted = generator.invert_theme(existing, complete=fake)
    assert inverted["isDark"] is True
    assert inverted["groupId"] == "g1"
    assert "id" not in inverted

    system_prompt, user_prompt = fake.calls[0]
    assert "Dark (Night)" in system_prompt
    assert user_prompt.startswith("Here is the theme to invert: ")
    assert '"id"' not in user_prompt


def test_invert_dark_to_light_without_group():
    existing = {"themeName": "Coal", "isDark": True, "colors": {"canvasBackground": "#111111"}}
    reply = {"themeName": "Chalk", "groupId": "made-up", "colors": {"canvasBackground": "#000000"}}
    fake = FakeCompletion(_reply(reply))
    inverted = generator.invert_theme(existing, complete=fake)
    assert inverted["isDark"] is False
    assert "groupId" not in inverted
    assert "Light (Day)" in fake.calls[0][0]


def test_invert_bad_reply_is_generation_error():
    existing = {"themeName": "Coal", "isDark": True, "colors": {"canvasBackground": "#111111"}}
    with pytest.raises(GenerationError):
        generator.invert_theme(existing, complete=FakeCompletion('{"themeName": "broken",'))


def test_revise_keeps_group_and_embeds_instruction():
    existing = {"themeName": "Dune", "isDark": False, "groupId": "g7", "colors": {"canvasBackground": "#F4E1C1"}}
    reply = {"themeName": "Dune Dusk", "colors": {"canvasBackground": "#2B1D0E"}}
    fake = FakeCompletion(json.dumps(reply))
    revised = generator.revise_theme(existing, "make it evening", complete=fake)
    assert revised["groupId"] == "g7"
    assert revised["isDark"] is True
    assert "make it evening" in fake.calls[0][1]
    assert '"Dune"' in fake.calls[0][1]


def test_default_completion_is_llm_client(monkeypatch):
    from themegen import llm_client

    monkeypatch.setattr(llm_client, "complete", FakeCompletion('{"colors": {"canvasBackground": "#FFFFFF"}}'))
    theme = generator.generate_theme("snow")
    assert theme["isDark"] is False


def test_invert_rederives_non_boolean_flag_from_background():
    # "false" is a string, and the background is dark, so the input counts as dark
    existing = {"themeName": "Ink", "isDark": "false", "colors": {"canvasBackground": "#0A0A0A"}}
    fake = FakeCompletion(_reply({"themeName": "Paper", "colors": {"canvasBackground": "#FAFAFA"}}))
    inverted = generator.invert_theme(existing, complete=fake)
    assert inverted["isDark"] is False
    assert "Light (Day)" in fake.calls[0][0]
    assert existing["isDark"] == "false"


def test_invert_rejects_theme_without_background():
    fake = FakeCompletion("{}")
    with pytest.raises(ValidationError):
        generator.invert_theme({"themeName": "Blank", "isDark": True}, complete=fake)
    assert fake.calls == []


def test_generate_theme_makes_exactly_one_request(monkeypatch):
    from themegen import llm_client

    monkeypatch.setattr(llm_client, "GEMINI_API_KEY", "fake_gemini")
    monkeypatch.setattr(llm_client, "OPENROUTER_API_KEY", "fake_openrouter")
    replies = [
        MagicMock(status_code=503, text="unavailable"),
        MagicMock(status_code=400, text="response_format unsupported"),
        MagicMock(status_code=200, text=""),
    ]
    post = MagicMock(side_effect=replies)
    monkeypatch.setattr(llm_client.requests, "post", post)
    with pytest.raises(CompletionError):
        generator.generate_theme("night")
    assert post.call_count == 1


def test_contrast_shortfalls():
    colors = {
        "primaryHeader": "#FFFFFF",
        "headerText": "#EEEEEE",
        "surfaceBackground": "#FFFFFF",
        "primaryText": "#000000",
        "secondaryInteractive": "rgba(0, 0, 0, 0.5)",
        "secondaryInteractiveText": "#FFFFFF",
    }
    misses = generator.contrast_shortfalls({"colors": colors})
    assert [(fg, bg) for fg, bg, _ in misses] == [("headerText", "primaryHeader")]
    assert misses[0][2] < 4.5


def test_low_contrast_is_logged_but_kept(caplog):
    theme = {
        "themeName": "Fog",
        "colors": {"canvasBackground": "#FFFFFF", "primaryHeader": "#FFFFFF", "headerText": "#F8F8F8"},
    }
    with caplog.at_level("INFO", logger="themegen.generator"):
        out = generator.generate_theme("fog", complete=FakeCompletion(json.dumps(theme)))
    assert out["colors"]["headerText"] == "#F8F8F8"
    assert any("headerText on primaryHeader" in r.getMessage() for r in caplog.records)
