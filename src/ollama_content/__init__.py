"""Content-generation adapter for a local Ollama server."""

from .config import OllamaConfig
from .generator import OllamaContentGenerator, create_content_generator

__all__ = [
    "OllamaConfig",
    "OllamaContentGenerator",
    "create_content_generator",
]
