"""Chat-path request building: messages plus the tool schema."""

from __future__ import annotations

import json
from collections.abc import Sequence

from ollama_content.translate.parts import extract_function_responses, extract_text, system_text
from ollama_content.translate.prompt import request_options
from ollama_content.types import FunctionDeclaration, GenerateContentRequest
from ollama_content.wire import ChatMessage, ChatRequest, Tool, ToolFunction


def build_messages(request: GenerateContentRequest) -> tuple[list[ChatMessage], list[Tool] | None]:
    """Convert the conversation into chat messages and tool definitions.

    Function responses in a turn become one ``tool`` message each and take
    priority over any plain text in the same turn. Turns that yield neither
    are dropped.
    """
    messages: list[ChatMessage] = []

    system = system_text(request.system_instruction)
    if system:
        messages.append(ChatMessage(role="system", content=system))

    for turn in request.contents:
        if isinstance(turn, str):
            messages.append(ChatMessage(role="user", content=turn))
            continue

        role = "assistant" if turn.role == "model" else turn.role
        function_responses = extract_function_responses(turn.parts)
        if function_responses:
            for result in function_responses:
                content = result.value if isinstance(result.value, str) else json.dumps(result.value)
                messages.append(ChatMessage(role="tool", content=content))
            continue

        text = extract_text(turn.parts)
        if text:
            messages.append(ChatMessage(role=role, content=text))

    tools = convert_tools(request.tools) if request.tools else None
    return messages, tools


def convert_tools(declarations: Sequence[FunctionDeclaration]) -> list[Tool]:
    return [
        Tool(
            function=ToolFunction(
                name=decl.name,
                description=decl.description or "",
                parameters=decl.parameters or {},
            )
        )
        for decl in declarations
        if decl.name
    ]


def build_chat_request(request: GenerateContentRequest, *, model: str, stream: bool) -> ChatRequest:
    messages, tools = build_messages(request)
    return ChatRequest(
        model=model,
        messages=messages,
        tools=tools,
        stream=stream,
        options=request_options(request),
    )
