"""Completion-path request building: flatten a conversation into one prompt."""

from __future__ import annotations

from collections.abc import Sequence

from ollama_content.config import PromptStyle
from ollama_content.translate.parts import extract_text, system_text
from ollama_content.types import GenerateContentRequest, Turn
from ollama_content.wire import GenerateRequest, Options

_DEFAULT_STYLE = PromptStyle()


def flatten_turns(contents: Sequence[Turn], style: PromptStyle = _DEFAULT_STYLE) -> str:
    """Render turns as a single transcript.

    Plain strings and ``user`` turns are appended line by line; ``model`` and
    ``assistant`` turns use ``style.model_template``. System and tool turns
    have no place in a flat transcript and are skipped.
    """
    prompt = ""
    for turn in contents:
        if isinstance(turn, str):
            prompt += turn + "\n"
            continue
        text = extract_text(turn.parts)
        if turn.role == "user":
            prompt += style.user_template.format(text=text)
        elif turn.role in ("model", "assistant"):
            prompt += style.model_template.format(text=text)
    return prompt.strip()


def build_prompt(
    request: GenerateContentRequest, style: PromptStyle = _DEFAULT_STYLE
) -> tuple[str, str | None]:
    """Return ``(prompt, system_instruction)`` for the completion endpoint."""
    return flatten_turns(request.contents, style), system_text(request.system_instruction)


def request_options(request: GenerateContentRequest) -> Options:
    return Options(
        temperature=request.temperature,
        top_p=request.top_p,
        num_predict=request.max_output_tokens,
    )


def build_generate_request(
    request: GenerateContentRequest,
    *,
    model: str,
    stream: bool,
    style: PromptStyle = _DEFAULT_STYLE,
) -> GenerateRequest:
    prompt, system = build_prompt(request, style)
    return GenerateRequest(
        model=model,
        prompt=prompt,
        system=system,
        stream=stream,
        options=request_options(request),
    )
