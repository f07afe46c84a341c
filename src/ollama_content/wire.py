"""Request and response bodies of the Ollama HTTP API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

GENERATE_PATH = "/api/generate"
CHAT_PATH = "/api/chat"
EMBEDDINGS_PATH = "/api/embeddings"
TAGS_PATH = "/api/tags"


class Options(BaseModel):
    temperature: float | None = None
    top_p: float | None = None
    num_predict: int | None = None


class GenerateRequest(BaseModel):
    model: str
    prompt: str
    system: str | None = None
    stream: bool = False
    options: Options = Field(default_factory=Options)


class ToolFunction(BaseModel):
    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class Tool(BaseModel):
    type: Literal["function"] = "function"
    function: ToolFunction


class ToolCallFunction(BaseModel):
    name: str
    # Some models emit a JSON string, others an already decoded object.
    arguments: str | dict[str, Any] = Field(default_factory=dict)


class ToolCall(BaseModel):
    id: str | None = None
    type: Literal["function"] | None = None
    function: ToolCallFunction


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: list[ToolCall] | None = None


class ChatRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    tools: list[Tool] | None = None
    stream: bool = False
    options: Options = Field(default_factory=Options)


class _Record(BaseModel):
    model: str = ""
    created_at: str = ""
    done: bool = False
    done_reason: str | None = None
    prompt_eval_count: int | None = None
    eval_count: int | None = None
    error: str | None = None


class GenerateChunk(_Record):
    """One record of an ``/api/generate`` reply (the whole reply when not streaming)."""

    response: str = ""


class ChatChunk(_Record):
    """One record of an ``/api/chat`` reply."""

    message: ChatMessage = Field(default_factory=lambda: ChatMessage(role="assistant"))


class EmbedRequest(BaseModel):
    model: str
    prompt: str | list[str]


class EmbedResponse(BaseModel):
    embedding: list[float] | None = None
    embeddings: list[list[float]] | None = None


class ModelInfo(BaseModel):
    name: str
    modified_at: str = ""
    size: int = 0
    digest: str = ""


class TagsResponse(BaseModel):
    models: list[ModelInfo] = Field(default_factory=list)


def dump(body: BaseModel) -> dict[str, Any]:
    """Serialize a request body, dropping unset optional fields."""
    return body.model_dump(exclude_none=True)
