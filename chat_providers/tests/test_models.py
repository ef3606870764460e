from __future__ import annotations

import json

from chat_providers.base.models import (
    ChatRequest,
    ContentPart,
    Message,
    ResponseFormat,
    StreamOptions,
    ToolCall,
    ToolChoice,
    ToolSpec,
)


def test_tool_call_arguments_are_derived_from_text():
    call = ToolCall(id="c", name="f", arguments_text='{"a": [1, 2]}')
    assert call.arguments == {"a": [1, 2]}
    call.arguments_text = '{"a": '
    assert call.arguments is None
    assert ToolCall(name="f").arguments is None
    assert ToolCall.from_arguments("c", "f", {"ü": 1}).arguments_text == '{"ü": 1}'


def test_message_string_content_becomes_text_part():
    msg = Message.user("hello")
    assert msg.is_single_text()
    assert msg.content[0].type == "text"
    assert Message.assistant().content == []


def test_binary_part_data_url_and_dict():
    part = ContentPart.binary_part("image/png", b"\x00\x01")
    assert part.data_url() == "data:image/png;base64,AAE="
    assert part.to_dict()["data"] == "AAE="


def test_clone_and_with_extra_do_not_share_state():
    original = ChatRequest(model="m", messages=[Message.user("hi")], extra={"k": {"nested": 1}})
    copy = original.with_extra(other=True)
    copy.extra["k"]["nested"] = 2
    copy.messages.append(Message.user("more"))
    assert original.extra == {"k": {"nested": 1}}
    assert len(original.messages) == 1
    assert copy.extra["other"] is True


def test_request_to_dict_is_json_ready():
    req = ChatRequest(model="m", messages=[Message.system("s")], temperature=0.0)
    data = req.to_dict()
    assert data["model"] == "m"
    assert data["messages"][0]["content"] == [{"type": "text", "text": "s"}]
    assert data["temperature"] == 0.0


def test_request_to_dict_keeps_every_field():
    req = ChatRequest(
        model="m",
        messages=[Message.user("hi")],
        logprobs=True,
        top_logprobs=3,
        tools=[ToolSpec(name="f", parameters={"type": "object"}, strict=True)],
        tool_choice=ToolChoice.function("f"),
        response_format=ResponseFormat(type="json_object"),
        stream_options=StreamOptions(include_usage=True),
        extra={"k": {"nested": 1}},
        allow_extra_override=True,
    )
    data = req.to_dict()
    assert data["tools"] == [{"name": "f", "description": None, "parameters": {"type": "object"}, "strict": True}]
    assert data["tool_choice"] == {"mode": "function", "function_name": "f"}
    assert data["response_format"] == {"type": "json_object", "json_schema": None}
    assert data["stream_options"] == {"include_usage": True}
    assert (data["logprobs"], data["top_logprobs"], data["allow_extra_override"]) == (True, 3, True)
    data["extra"]["k"]["nested"] = 2
    assert req.extra == {"k": {"nested": 1}}
    assert json.loads(json.dumps(data)) == data
    assert set(data) == set(ChatRequest.__dataclass_fields__)
