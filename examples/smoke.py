import asyncio
import logging

from ollama_content.config import OllamaConfig
from ollama_content.errors import BackendUnavailableError
from ollama_content.generator import create_content_generator
from ollama_content.types import Content, FunctionDeclaration, GenerateContentRequest, TextPart


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    try:
        generator = await create_content_generator(OllamaConfig.from_env())
    except BackendUnavailableError as e:
        print("Expected error:", type(e).__name__, e)
        return

    async with generator:
        model = await generator.get_best_available_model()
        print("Installed:", await generator.list_models())
        print("Using:", model)

        req = GenerateContentRequest(
            model=model,
            contents=[Content(role="user", parts=[TextPart(text="Say hi in five words.")])],
        )
        async for chunk in generator.generate_content_stream(req):
            print(chunk.text, end="", flush=True)
        print()

        # Declaring a tool switches the request to the chat endpoint.
        req = req.model_copy(update={
            "contents": [Content(role="user", parts=[TextPart(text="What's the weather in Oslo?")])],
            "tools": [
                FunctionDeclaration(
                    name="get_weather",
                    parameters={"type": "object", "properties": {"city": {"type": "string"}}},
                )
            ],
        })
        resp = await generator.generate_content(req)
        print("Text:", resp.text)
        print("Calls:", [(c.name, c.args) for c in resp.function_calls])


if __name__ == "__main__":
    asyncio.run(main())
