"""Helpers that pull payloads out of content parts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

from ollama_content.types import Content, FunctionResponsePart, Part, TextPart


class FunctionResult(NamedTuple):
    name: str
    value: Any


def extract_text(parts: Sequence[Part]) -> str:
    """Concatenate the text of every text part, in order."""
    return "".join(part.text for part in parts if isinstance(part, TextPart))


def extract_function_responses(parts: Sequence[Part]) -> list[FunctionResult]:
    """Return the payload of every function response part.

    A mapping payload with an ``output`` key is unwrapped to that value.
    Missing payloads become an empty dict.
    """
    results: list[FunctionResult] = []
    for part in parts:
        if not isinstance(part, FunctionResponsePart):
            continue
        payload = part.response
        if isinstance(payload, dict) and payload.get("output") is not None:
            value = payload["output"]
        elif payload is not None:
            value = payload
        else:
            value = {}
        results.append(FunctionResult(part.name, value))
    return results


def system_text(instruction: str | Content | Sequence[Part] | None) -> str | None:
    """Resolve a system instruction to plain text."""
    if instruction is None:
        return None
    if isinstance(instruction, str):
        return instruction
    if isinstance(instruction, Content):
        return extract_text(instruction.parts)
    return extract_text(instruction)
