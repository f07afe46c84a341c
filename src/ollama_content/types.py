"""Provider-agnostic request/response models for content generation."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "model", "assistant", "system", "tool"]


class TextPart(BaseModel):
    """Plain text."""

    type: Literal["text"] = "text"
    text: str


class FunctionCallPart(BaseModel):
    """A function call requested by the model."""

    type: Literal["function_call"] = "function_call"
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponsePart(BaseModel):
    """The result of a function call, fed back to the model."""

    type: Literal["function_response"] = "function_response"
    name: str = ""
    response: Any = None


Part = Annotated[TextPart | FunctionCallPart | FunctionResponsePart, Field(discriminator="type")]


class Content(BaseModel):
    """One conversation turn: a role and its ordered parts."""

    role: Role = "user"
    parts: list[Part] = Field(default_factory=list)


# A bare string is a user turn given as plain text.
Turn = str | Content


class FunctionDeclaration(BaseModel):
    """JSON-schema tool declaration."""

    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class GenerateContentRequest(BaseModel):
    """Normalized generation request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    model: str | None = None
    contents: list[Turn] = Field(default_factory=list)
    system_instruction: str | Content | list[Part] | None = None
    tools: list[FunctionDeclaration] = Field(default_factory=list)
    temperature: float | None = None
    top_p: float | None = None
    max_output_tokens: int | None = None
    # Setting the event aborts the in-flight HTTP call or stream.
    cancel_event: asyncio.Event | None = Field(default=None, exclude=True, repr=False)


class FinishReason(str, Enum):
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"


class Candidate(BaseModel):
    content: Content
    finish_reason: FinishReason | None = None
    index: int = 0


class UsageMetadata(BaseModel):
    prompt_token_count: int | None = None
    candidates_token_count: int | None = None
    total_token_count: int = 0


class GenerateContentResponse(BaseModel):
    """Normalized generation response (always a single candidate)."""

    candidates: list[Candidate] = Field(default_factory=list)
    usage_metadata: UsageMetadata | None = None

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate."""
        if not self.candidates:
            return ""
        return "".join(p.text for p in self.candidates[0].content.parts if isinstance(p, TextPart))

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        if not self.candidates:
            return []
        return [p for p in self.candidates[0].content.parts if isinstance(p, FunctionCallPart)]


class CountTokensRequest(BaseModel):
    model: str | None = None
    contents: list[Turn] = Field(default_factory=list)


class CountTokensResponse(BaseModel):
    total_tokens: int


class EmbedContentRequest(BaseModel):
    """Embedding request; ``contents`` may be one text or a list of turns."""

    model: str | None = None
    contents: str | list[Turn] = ""


class ContentEmbedding(BaseModel):
    values: list[float]


class EmbedContentResponse(BaseModel):
    embeddings: list[ContentEmbedding] = Field(default_factory=list)
