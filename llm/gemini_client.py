import logging
from typing import Iterator

from google import genai
from google.genai import types

from core.exceptions import ProviderError
from llm.base import ChatTurns, GenerativeProvider

logger = logging.getLogger("GeminiClient")


class GeminiClient(GenerativeProvider):
    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash-lite", timeout: float = 30.0):
        self.model = model
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def _config(self, system_prompt: str, temperature: float, max_tokens: int) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            max_output_tokens=max_tokens,
            temperature=temperature,
            thinking_config=types.ThinkingConfig(
                thinking_budget=0,
            ),
            system_instruction=[
                types.Part.from_text(text=system_prompt),
            ],
        )

    @staticmethod
    def _contents(messages: ChatTurns) -> list[types.Content]:
        return [
            types.Content(
                role="model" if m["role"] == "assistant" else "user",
                parts=[types.Part.from_text(text=m["content"])],
            )
            for m in messages
        ]

    def _generate(self, system_prompt: str, messages: ChatTurns, temperature: float, max_tokens: int) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=self._contents(messages),
                config=self._config(system_prompt, temperature, max_tokens),
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise ProviderError(self.name, str(e)) from e

        text = response.text
        if not text:
            raise ProviderError(self.name, "empty response")
        return text

    def complete(self, system_prompt, prompt, temperature=0.7, max_tokens=1500):
        return self._generate(system_prompt, [{"role": "user", "content": prompt}], temperature, max_tokens)

    def chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        return self._generate(system_prompt, messages, temperature, max_tokens)

    def stream_chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200) -> Iterator[str]:
        try:
            stream = self.client.models.generate_content_stream(
                model=self.model,
                contents=self._contents(messages),
                config=self._config(system_prompt, temperature, max_tokens),
            )
            for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            logger.error(f"Gemini stream failed: {e}")
            raise ProviderError(self.name, str(e)) from e
