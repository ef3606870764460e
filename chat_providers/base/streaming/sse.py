"""Server-Sent Events frame decoder.

Turns an iterable of arbitrarily split byte chunks into the sequence of event
``data`` payloads. Only ``data:`` lines matter to chat streams; comments and
the ``event``/``id``/``retry`` fields are skipped. Any partition of the same
bytes produces the same payloads.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

_BOM = "\ufeff"


class SSEDecoder:
    """Pull-based decoder over byte chunks.

    ``next_payload()`` returns the next payload, or ``None`` once the input is
    exhausted. Iterating the decoder yields the same payloads.
    """

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks: Iterator[bytes] = iter(chunks)
        self._buf = bytearray()
        self._scanned = 0  # prefix of _buf known to hold no terminator
        self._data: List[str] = []
        self._has_data = False
        self._eof = False
        self._first_line = True

    def __iter__(self) -> "SSEDecoder":
        return self

    def __next__(self) -> str:
        payload = self.next_payload()
        if payload is None:
            raise StopIteration
        return payload

    def next_payload(self) -> Optional[str]:
        while True:
            line = self._next_line()
            if line is None:
                # End of input: flush a pending event without a trailing blank line.
                return self._dispatch() if self._has_data else None
            if line == "":
                if self._has_data:
                    return self._dispatch()
                continue
            self._handle_line(line)

    # ----- internals -----
    def _dispatch(self) -> str:
        payload = "\n".join(self._data)
        self._data = []
        self._has_data = False
        return payload

    def _handle_line(self, line: str) -> None:
        if line.startswith(":"):
            return
        name, sep, value = line.partition(":")
        if not sep:
            value = ""
        elif value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
            self._has_data = True

    def _next_line(self) -> Optional[str]:
        """Return the next complete line without its terminator, or ``None`` at EOF."""
        while True:
            line = self._take_line()
            if line is not None:
                return self._decode(line)
            if self._eof:
                if not self._buf:
                    return None
                rest = bytes(self._buf)
                self._buf.clear()
                self._scanned = 0
                return self._decode(rest)
            self._fill()

    def _take_line(self) -> Optional[bytes]:
        buf = self._buf
        start = self._scanned
        lf = buf.find(b"\n", start)
        cr = buf.find(b"\r", start, lf if lf >= 0 else len(buf))
        if cr >= 0:
            if cr + 1 < len(buf):
                return self._cut(cr, cr + (2 if buf[cr + 1] == 0x0A else 1))
            if self._eof:
                return self._cut(cr, cr + 1)
            # trailing \r may be the first half of \r\n
            self._scanned = cr
            return None
        if lf >= 0:
            return self._cut(lf, lf + 1)
        self._scanned = len(buf)
        return None

    def _cut(self, end: int, consumed: int) -> bytes:
        """Remove ``buf[:consumed]`` and return the line ``buf[:end]``."""
        line = bytes(self._buf[:end])
        del self._buf[:consumed]
        self._scanned = 0
        return line

    def _fill(self) -> None:
        for chunk in self._chunks:
            if chunk:
                self._buf.extend(chunk)
                return
        self._eof = True

    def _decode(self, raw: bytes) -> str:
        line = raw.decode("utf-8", errors="replace")
        if self._first_line:
            self._first_line = False
            if line.startswith(_BOM):
                line = line[1:]
        return line


__all__ = ["SSEDecoder"]
