"""Newline-delimited JSON decoding for streamed Ollama replies."""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator, Awaitable
from typing import Any, TypeVar

from ollama_content.errors import GenerationCancelledError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class NDJSONDecoder:
    """Incremental decoder that turns byte chunks into JSON objects.

    Only newline-terminated lines are decoded. Whatever follows the last
    newline stays buffered until more data arrives; at end of stream it is
    discarded, since a well-formed NDJSON body ends with a newline.
    """

    def __init__(self) -> None:
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Buffered text that has not been terminated by a newline yet."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        """Append a chunk and return the records completed by it."""
        self._buffer += chunk if isinstance(chunk, str) else self._text.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        records: list[dict[str, Any]] = []
        for line in lines:
            record = self._parse(line)
            if record is not None:
                records.append(record)
        return records

    def _parse(self, line: str) -> dict[str, Any] | None:
        if not line.strip():
            return None
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            _logger.debug("Skipping non-JSON streaming line: %s", line)
            return None
        if not isinstance(record, dict):
            _logger.debug("Skipping non-object streaming line: %s", line)
            return None
        return record


class RecordStream(AsyncIterator):
    """Pull-based sequence of records decoded from a byte-chunk source.

    The next chunk is only read once every record decoded from the previous
    one has been consumed. Setting the cancel event closes the stream and
    raises ``GenerationCancelledError``, including while a chunk read is
    still waiting on the server.
    A closed stream stays closed.
    """

    def __init__(
        self,
        chunks: AsyncIterable[bytes],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self._chunks = chunks.__aiter__()
        self._cancel_event = cancel_event
        self._decoder = NDJSONDecoder()
        self._ready: deque[dict[str, Any]] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> RecordStream:
        return self

    async def __anext__(self) -> dict[str, Any]:
        while True:
            if self._closed:
                raise StopAsyncIteration
            if self._cancel_event is not None and self._cancel_event.is_set():
                self._closed = True
                raise GenerationCancelledError()
            if self._ready:
                return self._ready.popleft()
            try:
                chunk = await race_cancel(self._chunks.__anext__(), self._cancel_event)
            except StopAsyncIteration:
                self._close_at_eof()
                raise
            except GenerationCancelledError:
                self._closed = True
                raise
            self._ready.extend(self._decoder.feed(chunk))

    def _close_at_eof(self) -> None:
        self._closed = True
        if self._decoder.pending.strip():
            _logger.debug("Discarding unterminated trailing data: %s", self._decoder.pending)


async def race_cancel(awaitable: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """Await ``awaitable`` unless ``cancel_event`` fires first.

    The losing side is cancelled and settled before returning.
    """
    if cancel_event is None:
        return await awaitable
    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise GenerationCancelledError()

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not work.done():
            work.cancel()
            await asyncio.wait({work})

    if not work.cancelled():
        return work.result()
    raise GenerationCancelledError()
