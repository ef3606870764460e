"""Streaming package: SSE decoding, event accumulation and the chat stream."""

from .accumulator import StreamAccumulator
from .sse import SSEDecoder
from .stream import DONE_SENTINEL, ChatStream, ChunkDecoder, DecodedChunk

__all__ = [
    "SSEDecoder",
    "StreamAccumulator",
    "ChatStream",
    "ChunkDecoder",
    "DecodedChunk",
    "DONE_SENTINEL",
]
