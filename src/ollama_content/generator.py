"""Content generator backed by a local Ollama server."""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from ollama_content.config import OllamaConfig
from ollama_content.directory import ModelDirectory
from ollama_content.errors import (
    BackendHTTPError,
    BackendUnavailableError,
    EmbeddingError,
    GenerationCancelledError,
    GenerationError,
    StreamingError,
)
from ollama_content.reporting import ErrorReporter, log_error_report
from ollama_content.streaming import RecordStream, race_cancel
from ollama_content.translate import (
    build_chat_request,
    build_generate_request,
    extract_text,
    from_chat_chunk,
    from_generate_chunk,
)
from ollama_content.translate.prompt import flatten_turns
from ollama_content.types import (
    ContentEmbedding,
    CountTokensRequest,
    CountTokensResponse,
    EmbedContentRequest,
    EmbedContentResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    Turn,
)
from ollama_content.wire import (
    CHAT_PATH,
    EMBEDDINGS_PATH,
    GENERATE_PATH,
    ChatChunk,
    EmbedRequest,
    EmbedResponse,
    GenerateChunk,
    dump,
)

# Rough average for English text; Ollama exposes no tokenizer endpoint.
_CHARS_PER_TOKEN = 4


class OllamaContentGenerator:
    """Generate, stream, count and embed content through the Ollama HTTP API.

    Requests that declare tools go to ``/api/chat``; everything else goes to
    ``/api/generate``, which has no tool support.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        config: OllamaConfig | None = None,
        *,
        reporter: ErrorReporter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or OllamaConfig()
        self._client = httpx.AsyncClient(
            base_url=self.config.host,
            timeout=self.config.timeout_s,
            transport=transport,
        )
        self._reporter: ErrorReporter = reporter or log_error_report
        self.directory = ModelDirectory(
            self._client,
            default_model=self.config.model,
            recommended_models=self.config.recommended_models,
            probe_timeout_s=self.config.probe_timeout_s,
        )

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def model(self) -> str:
        return self.config.model

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> OllamaContentGenerator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def generate_content(self, request: GenerateContentRequest) -> GenerateContentResponse:
        """Run a non-streaming generation and return the final response."""
        try:
            if request.tools:
                body = build_chat_request(request, model=self._model_for(request), stream=False)
                data = await self._post_json(CHAT_PATH, body, request.cancel_event)
                return from_chat_chunk(ChatChunk.model_validate(data))

            body = build_generate_request(
                request,
                model=self._model_for(request),
                stream=False,
                style=self.config.prompt_style,
            )
            data = await self._post_json(GENERATE_PATH, body, request.cancel_event)
            return from_generate_chunk(GenerateChunk.model_validate(data), streaming=False)
        except GenerationCancelledError:
            raise
        except Exception as exc:
            await self._report(exc, "Error generating content with Ollama", request.contents, "ollama-generate")
            raise GenerationError(exc) from exc

    def generate_content_stream(
        self, request: GenerateContentRequest
    ) -> AsyncIterator[GenerateContentResponse]:
        """Return an async iterator yielding one response per streamed record."""
        use_chat = bool(request.tools)

        async def _gen() -> AsyncIterator[GenerateContentResponse]:
            cancel_event = request.cancel_event
            try:
                if use_chat:
                    body: BaseModel = build_chat_request(
                        request, model=self._model_for(request), stream=True
                    )
                else:
                    body = build_generate_request(
                        request,
                        model=self._model_for(request),
                        stream=True,
                        style=self.config.prompt_style,
                    )
                path = CHAT_PATH if use_chat else GENERATE_PATH
                response = await self._send(path, body, cancel_event, stream=True)
                try:
                    if not response.is_success:
                        await response.aread()
                        raise BackendHTTPError(response.status_code, response.reason_phrase)

                    records = RecordStream(response.aiter_bytes(), cancel_event=cancel_event)
                    async for record in records:
                        try:
                            chunk = (ChatChunk if use_chat else GenerateChunk).model_validate(record)
                        except ValidationError as exc:
                            self._logger.debug("Skipping malformed streaming record %s: %s", record, exc)
                            continue
                        if use_chat:
                            yield from_chat_chunk(chunk)
                        else:
                            yield from_generate_chunk(chunk, streaming=True)
                finally:
                    await response.aclose()
            except GenerationCancelledError:
                raise
            except Exception as exc:
                if use_chat:
                    context, operation = "Error streaming chat content with Ollama", "ollama-chat-stream"
                    prefix = "Failed to stream chat content with Ollama"
                else:
                    context, operation = "Error streaming content with Ollama", "ollama-stream"
                    prefix = StreamingError.prefix
                await self._report(exc, context, request.contents, operation)
                raise StreamingError(exc, prefix) from exc

        return _gen()

    async def count_tokens(
        self, request: CountTokensRequest | GenerateContentRequest
    ) -> CountTokensResponse:
        """Estimate the prompt size at four characters per token."""
        prompt = flatten_turns(request.contents, self.config.prompt_style)
        return CountTokensResponse(total_tokens=math.ceil(len(prompt) / _CHARS_PER_TOKEN))

    async def embed_content(self, request: EmbedContentRequest) -> EmbedContentResponse:
        """Embed one text or a list of texts via ``/api/embeddings``."""
        contents: list[Turn] = (
            [request.contents] if isinstance(request.contents, str) else list(request.contents)
        )
        try:
            texts = [turn if isinstance(turn, str) else extract_text(turn.parts) for turn in contents]
            body = EmbedRequest(
                model=request.model or self.config.embedding_model,
                prompt=texts[0] if len(texts) == 1 else texts,
            )
            reply = EmbedResponse.model_validate(await self._post_json(EMBEDDINGS_PATH, body))
        except Exception as exc:
            await self._report(exc, "Error generating embeddings with Ollama", contents, "ollama-embed")
            raise EmbeddingError(exc) from exc

        if reply.embeddings is not None:
            vectors = reply.embeddings
        else:
            vectors = [reply.embedding] if reply.embedding is not None else []
        return EmbedContentResponse(embeddings=[ContentEmbedding(values=v) for v in vectors])

    async def list_models(self) -> list[str]:
        return await self.directory.list_installed_models()

    async def get_available_models(self) -> list[str]:
        return await self.directory.resolve_available_models()

    async def get_best_available_model(self) -> str:
        return await self.directory.resolve_best_model()

    async def is_available(self) -> bool:
        return await self.directory.probe_availability()

    def _model_for(self, request: GenerateContentRequest) -> str:
        return request.model or self.config.model

    async def _post_json(
        self, path: str, body: BaseModel, cancel_event: asyncio.Event | None = None
    ) -> Any:
        response = await self._send(path, body, cancel_event)
        if not response.is_success:
            raise BackendHTTPError(response.status_code, response.reason_phrase)
        return response.json()

    async def _send(
        self,
        path: str,
        body: BaseModel,
        cancel_event: asyncio.Event | None,
        *,
        stream: bool = False,
    ) -> httpx.Response:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError()
        request = self._client.build_request("POST", path, json=dump(body))
        try:
            return await race_cancel(self._client.send(request, stream=stream), cancel_event)
        except httpx.TransportError as exc:
            raise BackendUnavailableError(self.host) from exc

    async def _report(
        self, error: BaseException, context: str, contents: Sequence[Turn], operation: str
    ) -> None:
        try:
            result = self._reporter(error, context, list(contents), operation)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._logger.exception("Error reporter failed for %s", operation)


async def create_content_generator(
    config: OllamaConfig | None = None, **kwargs: Any
) -> OllamaContentGenerator:
    """Build a generator, failing fast if the server does not answer the probe."""
    generator = OllamaContentGenerator(config, **kwargs)
    if not await generator.is_available():
        await generator.aclose()
        raise BackendUnavailableError(generator.host)
    return generator
