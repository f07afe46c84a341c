"""Model inventory queries and best-model resolution."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from ollama_content.config import PROBE_TIMEOUT_S
from ollama_content.errors import BackendHTTPError
from ollama_content.wire import TAGS_PATH, TagsResponse


class ModelDirectory:
    """Looks up installed models on an Ollama server.

    ``default_model`` and ``recommended_models`` are static configuration;
    the recommended list is walked in order when picking a model.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        default_model: str,
        recommended_models: Sequence[str],
        probe_timeout_s: float = PROBE_TIMEOUT_S,
    ) -> None:
        self._client = client
        self.default_model = default_model
        self.recommended_models: tuple[str, ...] = tuple(recommended_models)
        self._probe_timeout_s = probe_timeout_s

    async def list_installed_models(self) -> list[str]:
        """Return installed model names, or ``[]`` if the server cannot say."""
        try:
            response = await self._client.get(TAGS_PATH)
            if not response.is_success:
                raise BackendHTTPError(response.status_code, response.reason_phrase)
            tags = TagsResponse.model_validate(response.json())
        except (httpx.HTTPError, BackendHTTPError, ValueError) as exc:
            self._logger.warning("Failed to list Ollama models: %s", exc)
            return []
        return [m.name for m in tags.models]

    async def resolve_available_models(self) -> list[str]:
        """Installed models, falling back to the recommended list."""
        installed = await self.list_installed_models()
        if installed:
            return installed
        return list(self.recommended_models)

    async def resolve_best_model(self) -> str:
        """Pick a model; never fails and never returns an empty name."""
        available = await self.resolve_available_models()
        if self.default_model in available:
            return self.default_model
        for model in self.recommended_models:
            if model in available:
                return model
        return available[0] if available else self.default_model

    async def probe_availability(self) -> bool:
        """True if the inventory endpoint answers with 2xx within the probe timeout."""
        try:
            response = await self._client.get(TAGS_PATH, timeout=self._probe_timeout_s)
        except httpx.HTTPError:
            return False
        return response.is_success
