"""Map Ollama response records onto ``GenerateContentResponse``."""

from __future__ import annotations

import json
import logging
from typing import Any

from ollama_content.errors import BackendResponseError, ToolArgumentsDecodeError
from ollama_content.types import (
    Candidate,
    Content,
    FinishReason,
    FunctionCallPart,
    GenerateContentResponse,
    Part,
    TextPart,
    UsageMetadata,
)
from ollama_content.wire import ChatChunk, GenerateChunk, ToolCall

_logger = logging.getLogger(__name__)


def from_generate_chunk(record: GenerateChunk, *, streaming: bool) -> GenerateContentResponse:
    """Translate one ``/api/generate`` record.

    A streamed record that is not ``done`` has no finish reason yet. A
    non-streaming reply should always be ``done``; if it is not, the reply
    is reported as ``MAX_TOKENS``.
    """
    _raise_for_error(record.error)

    if record.done:
        finish_reason: FinishReason | None = FinishReason.STOP
    elif streaming:
        finish_reason = None
    else:
        _logger.warning("Non-streaming reply from model %r is not marked done", record.model)
        finish_reason = FinishReason.MAX_TOKENS

    response = _single_candidate([TextPart(text=record.response)], finish_reason)
    # The non-streaming reply always carries usage, streamed records only on the last one.
    if record.done or not streaming:
        response.usage_metadata = _usage(record.prompt_eval_count, record.eval_count)
    return response


def from_chat_chunk(record: ChatChunk) -> GenerateContentResponse:
    """Translate one ``/api/chat`` record; streaming and non-streaming share this."""
    _raise_for_error(record.error)

    parts: list[Part] = []
    if record.message.content:
        parts.append(TextPart(text=record.message.content))
    for call in record.message.tool_calls or ():
        parts.append(FunctionCallPart(name=call.function.name, args=decode_arguments(call)))

    response = _single_candidate(parts, FinishReason.STOP if record.done else None)
    if record.done:
        response.usage_metadata = _usage(record.prompt_eval_count, record.eval_count)
    return response


def decode_arguments(call: ToolCall) -> dict[str, Any]:
    """Return tool-call arguments as a mapping, decoding JSON strings."""
    arguments = call.function.arguments
    if not isinstance(arguments, str):
        return arguments
    try:
        decoded = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise ToolArgumentsDecodeError(call.function.name, arguments) from exc
    if not isinstance(decoded, dict):
        raise ToolArgumentsDecodeError(call.function.name, arguments)
    return decoded


def _single_candidate(parts: list[Part], finish_reason: FinishReason | None) -> GenerateContentResponse:
    return GenerateContentResponse(
        candidates=[
            Candidate(
                content=Content(role="model", parts=parts),
                finish_reason=finish_reason,
                index=0,
            )
        ]
    )


def _usage(prompt_tokens: int | None, output_tokens: int | None) -> UsageMetadata:
    return UsageMetadata(
        prompt_token_count=prompt_tokens,
        candidates_token_count=output_tokens,
        total_token_count=(prompt_tokens or 0) + (output_tokens or 0),
    )


def _raise_for_error(error: str | None) -> None:
    if error:
        raise BackendResponseError(error)
