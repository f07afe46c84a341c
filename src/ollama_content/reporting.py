"""Error reporting hook invoked before top-level failures are re-raised."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Sequence
from typing import Protocol

from ollama_content.types import Turn

_logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    """Receives failures for observability. Must not be relied on to raise."""

    def __call__(
        self,
        error: BaseException,
        context: str,
        contents: Sequence[Turn],
        operation: str,
    ) -> Awaitable[None] | None: ...


def log_error_report(
    error: BaseException,
    context: str,
    contents: Sequence[Turn],
    operation: str,
) -> None:
    """Default reporter: log the failure with its operation tag."""
    _logger.error(
        "[%s] %s: %s (%d turn(s) in request)",
        operation,
        context,
        error,
        len(contents),
        exc_info=error,
    )
