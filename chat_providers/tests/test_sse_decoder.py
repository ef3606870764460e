"""SSE frame decoder tests.

Covers field handling, line terminators, end-of-input flushing, and the
determinism property: any split of the input bytes yields the same payloads.
"""
from __future__ import annotations

import time
from typing import List

from hypothesis import given, settings
from hypothesis import strategies as st

from chat_providers.base.streaming import SSEDecoder


def _decode(*chunks: bytes) -> List[str]:
    return list(SSEDecoder(chunks))


def _split(data: bytes, cuts: List[int]) -> List[bytes]:
    points = sorted({c for c in cuts if 0 < c < len(data)})
    pieces, start = [], 0
    for p in points:
        pieces.append(data[start:p])
        start = p
    pieces.append(data[start:])
    return pieces


def test_data_lines_joined_and_one_leading_space_removed():
    body = b"data: first\ndata:  second\n\n"
    assert _decode(body) == ["first\n second"]


def test_comments_and_other_fields_are_ignored():
    body = b": keep-alive\nevent: message\nid: 7\nretry: 1000\ndata: {\"a\":1}\n\n"
    assert _decode(body) == ['{"a":1}']


def test_blank_lines_without_data_do_not_dispatch():
    assert _decode(b"\n\n: ping\n\ndata: x\n\n") == ["x"]


def test_crlf_and_cr_terminators():
    assert _decode(b"data: a\r\n\r\ndata: b\r\rdata: c\n\n") == ["a", "b", "c"]


def test_crlf_split_across_chunks_is_one_terminator():
    assert _decode(b"data: a\r", b"\n\r", b"\ndata: b\n\n") == ["a", "b"]


def test_pending_event_flushed_at_end_of_input():
    assert _decode(b"data: tail") == ["tail"]


def test_end_of_input_with_nothing_pending():
    decoder = SSEDecoder([b"data: x\n\n"])
    assert decoder.next_payload() == "x"
    assert decoder.next_payload() is None
    assert decoder.next_payload() is None


def test_empty_data_line_dispatches_empty_payload():
    assert _decode(b"data:\n\n") == [""]


def test_utf8_split_inside_multibyte_character():
    data = "data: héllo ✓\n\n".encode("utf-8")
    cut = data.index("✓".encode("utf-8")) + 1
    assert _decode(data[:cut], data[cut:]) == ["héllo ✓"]


def test_leading_bom_is_stripped():
    assert _decode(b"\xef\xbb\xbfdata: x\n\n") == ["x"]


def test_done_sentinel_is_an_ordinary_payload():
    assert _decode(b"data: {}\n\ndata: [DONE]\n\n") == ["{}", "[DONE]"]


def test_large_frame_in_small_chunks_decodes_in_linear_time():
    payload = "x" * (1 << 20)
    data = b"data: " + payload.encode() + b"\r\n\r\ndata: tail\n\n"
    chunks = [data[i : i + 4096] for i in range(0, len(data), 4096)]
    started = time.perf_counter()
    out = _decode(*chunks)
    elapsed = time.perf_counter() - started
    assert out == [payload, "tail"]
    assert elapsed < 1.0


_line = st.one_of(
    st.text(alphabet="abc {}:\"é", max_size=12).map(lambda s: "data: " + s),
    st.text(alphabet="abc", max_size=5).map(lambda s: ": " + s),
    st.sampled_from(["event: delta", "id: 1", "retry: 5", "data:", ""]),
)


@st.composite
def _sse_streams(draw):
    lines = draw(st.lists(_line, max_size=12))
    terminator = draw(st.sampled_from(["\n", "\r\n", "\r"]))
    body = terminator.join(lines) + draw(st.sampled_from(["", terminator, terminator * 2]))
    data = body.encode("utf-8")
    cuts = draw(st.lists(st.integers(min_value=0, max_value=max(len(data), 1)), max_size=8))
    return data, cuts


@settings(max_examples=200, deadline=None, derandomize=True)
@given(_sse_streams())
def test_any_partition_yields_same_payloads(stream):
    data, cuts = stream
    assert _decode(*_split(data, cuts)) == _decode(data)


@settings(max_examples=100, deadline=None, derandomize=True)
@given(st.binary(max_size=64), st.lists(st.integers(min_value=0, max_value=64), max_size=6))
def test_arbitrary_bytes_never_depend_on_chunking(data, cuts):
    assert _decode(*_split(data, cuts)) == _decode(data)
