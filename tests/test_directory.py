import asyncio
import unittest

import httpx

from ollama_content.directory import ModelDirectory

_HOST = "http://localhost:11434"
_TAGS = {
    "models": [
        {"name": "llama3:8b", "modified_at": "2023-01-01T00:00:00Z", "size": 1000, "digest": "abc123"},
        {"name": "codellama:7b", "modified_at": "2023-01-01T00:00:00Z", "size": 2000, "digest": "def456"},
        {"name": "qwen3:1.7b", "modified_at": "2023-01-01T00:00:00Z", "size": 3000, "digest": "789abc"},
    ]
}


def _directory(handler, *, default_model="qwen3:1.7b", recommended=("qwen3:1.7b", "gemma2:2b", "codellama:7b")):
    client = httpx.AsyncClient(base_url=_HOST, transport=httpx.MockTransport(handler))
    return ModelDirectory(client, default_model=default_model, recommended_models=recommended)


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


class ModelDirectoryTests(unittest.TestCase):
    def test_list_installed_models(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_TAGS)

        names = asyncio.run(_directory(handler).list_installed_models())
        self.assertEqual(names, ["llama3:8b", "codellama:7b", "qwen3:1.7b"])
        self.assertEqual(seen[0].method, "GET")
        self.assertEqual(seen[0].url.path, "/api/tags")

    def test_list_returns_empty_on_failure(self) -> None:
        with self.assertLogs("ollama_content.directory", level="WARNING"):
            self.assertEqual(asyncio.run(_directory(_refuse).list_installed_models()), [])
        with self.assertLogs("ollama_content.directory", level="WARNING"):
            broken = _directory(lambda r: httpx.Response(500))
            self.assertEqual(asyncio.run(broken.list_installed_models()), [])
        with self.assertLogs("ollama_content.directory", level="WARNING"):
            garbage = _directory(lambda r: httpx.Response(200, content=b"not json"))
            self.assertEqual(asyncio.run(garbage.list_installed_models()), [])

    def test_available_models_fall_back_to_recommended(self) -> None:
        with self.assertLogs("ollama_content.directory", level="WARNING"):
            models = asyncio.run(_directory(_refuse).resolve_available_models())
        self.assertEqual(models, ["qwen3:1.7b", "gemma2:2b", "codellama:7b"])

    def test_best_model_prefers_default_wherever_it_is_listed(self) -> None:
        directory = _directory(lambda r: httpx.Response(200, json=_TAGS))
        self.assertEqual(asyncio.run(directory.resolve_best_model()), "qwen3:1.7b")

    def test_best_model_walks_recommended_order(self) -> None:
        directory = _directory(
            lambda r: httpx.Response(200, json=_TAGS),
            default_model="mistral:7b",
            recommended=("gemma2:2b", "codellama:7b", "qwen3:1.7b"),
        )
        self.assertEqual(asyncio.run(directory.resolve_best_model()), "codellama:7b")

    def test_best_model_uses_first_available(self) -> None:
        directory = _directory(
            lambda r: httpx.Response(200, json=_TAGS),
            default_model="mistral:7b",
            recommended=("gemma2:2b",),
        )
        self.assertEqual(asyncio.run(directory.resolve_best_model()), "llama3:8b")

    def test_best_model_never_empty(self) -> None:
        directory = _directory(_refuse, default_model="mistral:7b", recommended=())
        with self.assertLogs("ollama_content.directory", level="WARNING"):
            self.assertEqual(asyncio.run(directory.resolve_best_model()), "mistral:7b")

    def test_probe_availability(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"models": []})

        self.assertTrue(asyncio.run(_directory(handler).probe_availability()))
        self.assertEqual(seen[0].url.path, "/api/tags")
        self.assertEqual(seen[0].extensions["timeout"]["read"], 2.0)

        self.assertFalse(asyncio.run(_directory(_refuse).probe_availability()))
        self.assertFalse(asyncio.run(_directory(lambda r: httpx.Response(503)).probe_availability()))

    def test_probe_timeout_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        self.assertFalse(asyncio.run(_directory(handler).probe_availability()))


if __name__ == "__main__":
    unittest.main()
