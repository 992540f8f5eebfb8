"""Tests for dealersdojo.ai: prompt framing, reply parsing and providers."""

from __future__ import annotations

import json

import pytest

from dealersdojo.ai.prompts import PRIMING_ACK, build_conversation, to_gemini_contents
from dealersdojo.ai.provider_base import extract_json, parse_reply
from dealersdojo.ai.provider_gemini import GeminiProvider, SAFETY_CATEGORIES
from dealersdojo.ai.provider_mock import MockProvider
from dealersdojo.core.errors import ConfigError, ExternalModelError
from dealersdojo.core.models import ChatTurn, RelayReply


# ---------------------------------------------------------------------------
# Prompt framing
# ---------------------------------------------------------------------------

class TestBuildConversation:
    def test_priming_then_history_then_message(self):
        history = [
            ChatTurn(role="user", content="Hi"),
            ChatTurn(role="model", content='{"response": "Hello", "score_change": 0}'),
        ]
        turns = build_conversation("You are Vince.", history, "Lower the price?")
        assert [t.role for t in turns] == ["user", "model", "user", "model", "user"]
        assert turns[0].content == "You are Vince."
        assert turns[1].content == PRIMING_ACK
        assert turns[2:4] == history
        assert turns[-1].content == "Lower the price?"

    def test_priming_ack_is_valid_reply(self):
        assert json.loads(PRIMING_ACK) == {
            "response": "Understood. I am ready to begin the simulation.",
            "score_change": 0,
        }

    def test_gemini_contents_shape(self):
        contents = to_gemini_contents([ChatTurn(role="user", content="x")])
        assert contents == [{"role": "user", "parts": ["x"]}]


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

class TestParseReply:
    def test_plain_json(self):
        assert parse_reply('{"response": "No.", "score_change": -1}') == RelayReply(response="No.", score_change=-1)

    def test_code_fenced_json(self):
        text = '```json\n{"response": "Fine.", "score_change": 2}\n```'
        assert parse_reply(text).score_change == 2

    def test_extract_json_from_chatter(self):
        assert extract_json('Sure! {"a": 1} done') == '{"a": 1}'

    def test_not_json(self):
        with pytest.raises(ExternalModelError) as info:
            parse_reply("I refuse to answer in JSON")
        assert info.value.details

    def test_missing_score(self):
        with pytest.raises(ExternalModelError):
            parse_reply('{"response": "ok"}')


# ---------------------------------------------------------------------------
# Gemini provider
# ---------------------------------------------------------------------------

class FakeChat:
    def __init__(self, model, history):
        self.model = model
        self.history = history

    def send_message(self, parts):
        self.model.sent.append((self.history, parts))
        if self.model.error is not None:
            raise self.model.error
        return type("Res", (), {"text": self.model.text})()


class FakeGenerativeModel:
    def __init__(self, text: str = '{"response": "Maybe.", "score_change": 1}', error: Exception = None):
        self.text = text
        self.error = error
        self.sent = []

    def start_chat(self, history):
        return FakeChat(self, history)


@pytest.fixture()
def unconfigured(monkeypatch: pytest.MonkeyPatch) -> GeminiProvider:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    return GeminiProvider()


class TestGeminiProvider:
    def test_no_key_raises_config_error(self, unconfigured: GeminiProvider):
        assert not unconfigured.configured
        with pytest.raises(ConfigError):
            unconfigured.reply("p", [], "m")

    def test_sends_primed_history(self, unconfigured: GeminiProvider):
        fake = FakeGenerativeModel()
        unconfigured._client = fake
        reply = unconfigured.reply("You are Dana.", [], "I'd like $110k.")
        assert reply == RelayReply(response="Maybe.", score_change=1)
        history, parts = fake.sent[0]
        assert history == [
            {"role": "user", "parts": ["You are Dana."]},
            {"role": "model", "parts": [PRIMING_ACK]},
        ]
        assert parts == ["I'd like $110k."]

    def test_api_failure_wrapped(self, unconfigured: GeminiProvider):
        unconfigured._client = FakeGenerativeModel(error=RuntimeError("quota exceeded"))
        with pytest.raises(ExternalModelError) as info:
            unconfigured.reply("p", [], "m")
        assert info.value.details == "quota exceeded"

    def test_unparseable_output(self, unconfigured: GeminiProvider):
        unconfigured._client = FakeGenerativeModel(text="<html>")
        with pytest.raises(ExternalModelError):
            unconfigured.reply("p", [], "m")

    def test_four_safety_categories(self):
        assert len(SAFETY_CATEGORIES) == 4


# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------

class TestMockProvider:
    def test_rewards_reasoned_message(self):
        reply = MockProvider().reply("p", [], "Based on market research, would you consider $8,000?")
        assert reply.score_change > 0

    def test_punishes_hostility(self):
        reply = MockProvider().reply("p", [], "This is ridiculous, take it or leave it")
        assert reply.score_change < 0

    def test_score_is_clamped(self):
        text = "because research market data compare understand appreciate together commit long-term flexible alternative?"
        assert MockProvider().reply("p", [], text).score_change == 5

    def test_reply_varies_with_history(self):
        provider = MockProvider()
        first = provider.reply("p", [], "hello").response
        history = [ChatTurn(role="user", content="hello"), ChatTurn(role="model", content="{}")]
        assert provider.reply("p", history, "hello").response != first
