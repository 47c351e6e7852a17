import json
from types import SimpleNamespace

import pytest

from failseed.conversation.ai_providers.base import PromptPolicy, truncate_lines
from failseed.conversation.ai_providers.openai import OpenAIConversationAI, _parse_json_object
from failseed.core.errors import GenerationFailed


class _FakeCompletions:
    def __init__(self, contents):
        self.contents = list(contents)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        content = self.contents.pop(0)
        if isinstance(content, Exception):
            raise content
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client(*contents):
    completions = _FakeCompletions(contents)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_continuation_parses_message_and_advisory_flag():
    client, completions = _client(json.dumps({"message": "That sounds hard.", "shouldFinalize": False}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    result = ai.continue_conversation("", "missed a deadline at work", 1)

    assert result.message == "That sounds hard."
    assert result.should_finalize is False
    request = completions.requests[0]
    assert request["model"] == "gpt-test"
    assert request["response_format"] == {"type": "json_object"}
    assert request["messages"][0]["role"] == "system"
    assert "missed a deadline at work" in request["messages"][1]["content"]


def test_continuation_prompt_carries_history_and_turn_guidance():
    client, completions = _client(json.dumps({"message": "I hear you.", "shouldFinalize": True}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    result = ai.continue_conversation("user: missed a deadline\nassistant: ouch", "I felt overwhelmed", 5)

    assert result.should_finalize is True
    prompt = completions.requests[0]["messages"][1]["content"]
    assert "user: missed a deadline" in prompt
    assert "I felt overwhelmed" in prompt
    assert "turn 5" in prompt


def test_injected_policy_replaces_system_prompt():
    client, completions = _client(json.dumps({"message": "ok", "shouldFinalize": False}))
    policy = PromptPolicy(conversation_system_prompt="Be brief.", conversation_temperature=0.2)
    ai = OpenAIConversationAI(policy=policy, client=client, model="gpt-test")

    ai.continue_conversation("", "hello", 1)

    request = completions.requests[0]
    assert request["messages"][0]["content"] == "Be brief."
    assert request["temperature"] == 0.2


def test_finalization_truncates_growth_to_three_lines():
    growth = "line one\nline two\nline three\nline four\nline five"
    client, _ = _client(json.dumps({"growth": growth, "hint": "Take a short walk."}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    result = ai.finalize_conversation("user: hi\nassistant: hello")

    assert result.growth.split("\n") == ["line one", "line two", "line three"]
    assert result.hint == "Take a short walk."


def test_finalization_blank_hint_becomes_none():
    client, _ = _client(json.dumps({"growth": "Learned to pause.", "hint": "  "}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    assert ai.finalize_conversation("user: hi").hint is None


def test_fenced_json_is_accepted():
    fenced = "```json\n" + json.dumps({"message": "fine", "shouldFinalize": False}) + "\n```"
    client, _ = _client(fenced)
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    assert ai.continue_conversation("", "hi", 1).message == "fine"


@pytest.mark.parametrize(
    "content",
    [
        "",
        None,
        "not json at all",
        json.dumps(["a", "list"]),
        json.dumps({"shouldFinalize": True}),
        json.dumps({"message": "", "shouldFinalize": False}),
        json.dumps({"message": "   ", "shouldFinalize": False}),
    ],
)
def test_bad_continuation_output_raises_generation_failed(content):
    client, _ = _client(content)
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    with pytest.raises(GenerationFailed):
        ai.continue_conversation("", "hi", 1)


def test_finalization_schema_mismatch_raises_generation_failed():
    client, _ = _client(json.dumps({"hint": "no growth here"}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    with pytest.raises(GenerationFailed):
        ai.finalize_conversation("user: hi")


def test_blank_growth_raises_generation_failed():
    client, _ = _client(json.dumps({"growth": "   \n  ", "hint": None}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    with pytest.raises(GenerationFailed):
        ai.finalize_conversation("user: hi")


def test_transport_error_is_not_retried():
    client, completions = _client(ConnectionError("network down"), json.dumps({"message": "late", "shouldFinalize": False}))
    ai = OpenAIConversationAI(client=client, model="gpt-test")

    with pytest.raises(GenerationFailed):
        ai.continue_conversation("", "hi", 1)
    assert len(completions.requests) == 1


def test_parse_json_object_recovers_object_wrapped_in_prose():
    assert _parse_json_object('Sure! {"message": "hi"} Hope this helps.') == {"message": "hi"}


def test_truncate_lines_keeps_short_text():
    assert truncate_lines("only one line\n", 3) == "only one line"
