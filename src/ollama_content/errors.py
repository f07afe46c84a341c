"""Package specific exception hierarchy."""


class OllamaContentError(Exception):
    """Base exception for ollama_content package."""


class BackendUnavailableError(OllamaContentError):
    """Raised when the Ollama server cannot be reached."""

    def __init__(self, host: str) -> None:
        super().__init__(
            f"Ollama is not available at {host}. Please ensure Ollama is running and accessible."
        )
        self.host = host


class BackendHTTPError(OllamaContentError):
    """Represents a non-2xx reply from the Ollama HTTP API."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"Ollama API error: {status_code} {reason}".rstrip())
        self.status_code = status_code
        self.reason = reason


class BackendResponseError(OllamaContentError):
    """Raised when a response record carries an ``error`` field."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Ollama reported an error: {message}")


class ToolArgumentsDecodeError(OllamaContentError):
    """Raised when tool-call arguments arrive as a string that is not a JSON object."""

    def __init__(self, name: str, raw: str) -> None:
        super().__init__(f"Invalid arguments for tool call '{name}': {raw!r}")
        self.name = name
        self.raw = raw


class GenerationCancelledError(OllamaContentError):
    """Raised when the caller's cancellation event fires mid-request."""

    def __init__(self) -> None:
        super().__init__("Request was cancelled.")


class _WrappedError(OllamaContentError):
    prefix = ""

    def __init__(self, cause: BaseException, prefix: str | None = None) -> None:
        super().__init__(f"{prefix or self.prefix}: {cause}")
        self.cause = cause


class GenerationError(_WrappedError):
    """Top-level failure of a non-streaming generation."""

    prefix = "Failed to generate content with Ollama"


class StreamingError(_WrappedError):
    """Top-level failure of a streaming generation."""

    prefix = "Failed to stream content with Ollama"


class EmbeddingError(_WrappedError):
    """Top-level failure of an embedding request."""

    prefix = "Failed to generate embeddings with Ollama"
