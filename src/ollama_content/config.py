"""Static model tables and connection settings for the Ollama adapter."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "qwen3:1.7b"
DEFAULT_OLLAMA_EMBEDDING_MODEL = "nomic-embed-text"
PROBE_TIMEOUT_S = 2.0

# Ordered by preference.
RECOMMENDED_OLLAMA_MODELS: tuple[str, ...] = (
    "qwen3:1.7b",
    "gemma2:2b",
    "codellama:7b",
)


class PromptStyle(BaseModel):
    """Templates used to flatten a conversation into a completion prompt.

    ``{text}`` is replaced with the extracted text of the turn. The default
    model template closes each assistant turn with an open ``Human:`` marker,
    which nudges completion models towards answering as the next speaker.
    """

    model_config = ConfigDict(frozen=True)

    user_template: str = "{text}\n"
    model_template: str = "Assistant: {text}\nHuman: "


class OllamaConfig(BaseModel):
    """Connection and model selection settings."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_OLLAMA_HOST
    model: str = DEFAULT_OLLAMA_MODEL
    embedding_model: str = DEFAULT_OLLAMA_EMBEDDING_MODEL
    recommended_models: tuple[str, ...] = RECOMMENDED_OLLAMA_MODELS
    # None means no client-side timeout; the caller's cancel event bounds the call instead.
    timeout_s: float | None = None
    probe_timeout_s: float = PROBE_TIMEOUT_S
    prompt_style: PromptStyle = Field(default_factory=PromptStyle)

    @field_validator("host")
    @classmethod
    def _strip_host(cls, value: str) -> str:
        host = value.strip().rstrip("/")
        if not host:
            return DEFAULT_OLLAMA_HOST
        # The ollama CLI accepts bare "host:port" in OLLAMA_HOST.
        if "://" not in host:
            host = f"http://{host}"
        return host

    @classmethod
    def from_env(cls, **overrides: object) -> OllamaConfig:
        """Build a config from ``OLLAMA_*`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, object] = {}
        for field, env_name in (
            ("host", "OLLAMA_HOST"),
            ("model", "OLLAMA_MODEL"),
            ("embedding_model", "OLLAMA_EMBEDDING_MODEL"),
        ):
            env_value = os.getenv(env_name)
            if env_value:
                values[field] = env_value
        values.update(overrides)
        return cls(**values)
