from __future__ import annotations

from datetime import datetime, timezone

import pytest

from chat_providers.base.models import FinishReason
from chat_providers.openai_compat import map_finish_reason, map_response, map_usage, split_content
from chat_providers.tests.helpers import completion


def test_basic_response_mapping():
    payload = completion("hi there", usage={"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5})
    resp = map_response(payload, raw=b"{}")
    assert resp.id == "chatcmpl-1"
    assert resp.model == "test-model"
    assert resp.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert resp.first_text() == "hi there"
    assert resp.choices[0].finish_reason is FinishReason.STOP
    assert resp.usage.total_tokens == 5
    assert resp.raw == b"{}"
    assert "raw" not in resp.to_dict()


@pytest.mark.parametrize("field", ["reasoning_content", "thinking"])
def test_message_level_reasoning_fields(field):
    resp = map_response(completion("answer", **{field: "because"}))
    assert resp.first_reasoning() == "because"
    assert resp.first_text() == "answer"


def test_typed_content_parts_split_into_channels():
    content = [
        {"type": "thinking", "thinking": "hmm "},
        {"type": "text", "text": "A"},
        {"type": "reasoning", "text": "ok"},
        {"type": "image_url", "image_url": {"url": "https://img", "detail": "high"}},
        {"type": "text", "text": "B"},
    ]
    text, reasoning, images = split_content(content)
    assert (text, reasoning) == ("AB", "hmm ok")
    assert images[0].url == "https://img" and images[0].detail == "high"


def test_message_reasoning_prepended_to_inline_reasoning():
    payload = completion(None, reasoning_content="first ")
    payload["choices"][0]["message"]["content"] = [{"type": "reasoning", "text": "second"}, {"type": "text", "text": "x"}]
    resp = map_response(payload)
    assert resp.first_reasoning() == "first second"


def test_tool_calls_with_string_and_object_arguments():
    payload = completion(
        None,
        finish_reason="tool_calls",
        tool_calls=[
            {"id": "a", "type": "function", "function": {"name": "f", "arguments": '{"x": 1}'}},
            {"id": "b", "type": "function", "function": {"name": "g", "arguments": {"y": 2}}},
        ],
    )
    calls = map_response(payload).tool_calls()
    assert calls[0].arguments == {"x": 1}
    assert calls[1].arguments == {"y": 2}
    assert map_response(payload).choices[0].finish_reason is FinishReason.TOOL_CALLS


@pytest.mark.parametrize(
    "wire,expected",
    [
        ("stop", FinishReason.STOP),
        ("length", FinishReason.LENGTH),
        ("tool_calls", FinishReason.TOOL_CALLS),
        ("function_call", FinishReason.TOOL_CALLS),
        ("content_filter", FinishReason.CONTENT_FILTER),
        ("something_new", FinishReason.UNKNOWN),
        ("", None),
        (None, None),
    ],
)
def test_finish_reason_mapping(wire, expected):
    assert map_finish_reason(wire) is expected


def test_usage_numeric_strings_and_derived_total():
    usage = map_usage({"prompt_tokens": "10", "completion_tokens": 4})
    assert (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens) == (10, 4, 14)


def test_usage_flat_keys_win_over_nested_details():
    usage = map_usage(
        {
            "prompt_tokens": 10,
            "completion_tokens": 20,
            "total_tokens": 30,
            "prompt_cache_hit_tokens": 6,
            "prompt_cache_miss_tokens": 4,
            "prompt_tokens_details": {"cached_tokens": 9},
            "completion_tokens_details": {"reasoning_tokens": 12},
        }
    )
    assert usage.cached_tokens == 6
    assert usage.cache_miss_tokens == 4
    assert usage.reasoning_tokens == 12


def test_usage_nested_details_used_when_flat_absent_or_zero():
    usage = map_usage(
        {
            "prompt_tokens": 10,
            "prompt_cache_hit_tokens": 0,
            "prompt_tokens_details": {"cached_tokens": 8},
        }
    )
    assert usage.cached_tokens == 8


def test_usage_absent_or_malformed():
    assert map_usage(None) is None
    assert map_usage("nope") is None
    assert map_usage({}).total_tokens == 0


def test_missing_created_and_choices_do_not_raise():
    resp = map_response({"id": "x"})
    assert resp.created_at is None
    assert resp.choices == []
    assert resp.first_text() == ""
