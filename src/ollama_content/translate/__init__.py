"""Translation between generation requests/responses and the Ollama wire format."""

from .chat import build_chat_request, build_messages, convert_tools
from .parts import extract_function_responses, extract_text
from .prompt import build_generate_request, build_prompt
from .responses import from_chat_chunk, from_generate_chunk

__all__ = [
    "build_chat_request",
    "build_generate_request",
    "build_messages",
    "build_prompt",
    "convert_tools",
    "extract_function_responses",
    "extract_text",
    "from_chat_chunk",
    "from_generate_chunk",
]
