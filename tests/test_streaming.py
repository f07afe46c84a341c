import asyncio
import unittest
from collections.abc import AsyncIterator

from ollama_content.errors import GenerationCancelledError
from ollama_content.streaming import NDJSONDecoder, RecordStream

_BODY = b'{"a":1}\n{"b":2}\n'


async def _chunks(*chunks: bytes) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


async def _drain(stream: RecordStream) -> list[dict]:
    return [record async for record in stream]


class NDJSONDecoderTests(unittest.TestCase):
    def test_same_records_for_any_split(self) -> None:
        expected = [{"a": 1}, {"b": 2}]
        for cut in range(len(_BODY) + 1):
            decoder = NDJSONDecoder()
            records = decoder.feed(_BODY[:cut]) + decoder.feed(_BODY[cut:])
            self.assertEqual(records, expected, f"split at {cut}")
            self.assertEqual(decoder.pending, "")

    def test_partial_line_is_buffered(self) -> None:
        decoder = NDJSONDecoder()
        self.assertEqual(decoder.feed(b'{"a":'), [])
        self.assertEqual(decoder.pending, '{"a":')
        self.assertEqual(decoder.feed(b"1}\n"), [{"a": 1}])

    def test_multibyte_character_split_across_chunks(self) -> None:
        body = '{"t":"é"}\n'.encode()
        split = body.index(b"\xa9")
        decoder = NDJSONDecoder()
        records = decoder.feed(body[:split]) + decoder.feed(body[split:])
        self.assertEqual(records, [{"t": "é"}])

    def test_malformed_and_blank_lines_are_skipped(self) -> None:
        decoder = NDJSONDecoder()
        with self.assertLogs("ollama_content.streaming", level="DEBUG"):
            records = decoder.feed(b'{"a":1}\n\n{broken\n[1, 2]\n   \n{"b":2}\n')
        self.assertEqual(records, [{"a": 1}, {"b": 2}])


class RecordStreamTests(unittest.TestCase):
    def test_yields_records_across_chunks(self) -> None:
        stream = RecordStream(_chunks(b'{"a":', b'1}\n{"b"', b":2}\n"))
        self.assertEqual(asyncio.run(_drain(stream)), [{"a": 1}, {"b": 2}])
        self.assertTrue(stream.closed)

    def test_unterminated_trailing_data_is_discarded(self) -> None:
        stream = RecordStream(_chunks(b'{"a":1}\n{"b":2}'))
        self.assertEqual(asyncio.run(_drain(stream)), [{"a": 1}])

    def test_closed_stream_stays_exhausted(self) -> None:
        async def scenario() -> list[dict]:
            stream = RecordStream(_chunks(b'{"a":1}\n'))
            await _drain(stream)
            return await _drain(stream)

        self.assertEqual(asyncio.run(scenario()), [])

    def test_cancel_event_stops_stream(self) -> None:
        async def scenario() -> tuple[dict, RecordStream]:
            cancel = asyncio.Event()
            stream = RecordStream(_chunks(_BODY), cancel_event=cancel)
            first = await stream.__anext__()
            cancel.set()
            with self.assertRaises(GenerationCancelledError):
                await stream.__anext__()
            return first, stream

        first, stream = asyncio.run(scenario())
        self.assertEqual(first, {"a": 1})
        self.assertTrue(stream.closed)

    def test_cancel_interrupts_pending_read(self) -> None:
        async def stalled() -> AsyncIterator[bytes]:
            yield b'{"a":1}\n'
            await asyncio.sleep(30)
            yield b'{"b":2}\n'

        async def scenario() -> RecordStream:
            cancel = asyncio.Event()
            stream = RecordStream(stalled(), cancel_event=cancel)
            self.assertEqual(await stream.__anext__(), {"a": 1})
            asyncio.get_running_loop().call_later(0.05, cancel.set)
            with self.assertRaises(GenerationCancelledError):
                await asyncio.wait_for(stream.__anext__(), 2)
            return stream

        self.assertTrue(asyncio.run(scenario()).closed)


if __name__ == "__main__":
    unittest.main()
