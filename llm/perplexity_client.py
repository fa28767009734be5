import logging
from typing import Iterator

from openai import OpenAI, OpenAIError

from core.exceptions import ProviderError
from llm.base import ChatTurns, GenerativeProvider

logger = logging.getLogger("PerplexityClient")


class PerplexityClient(GenerativeProvider):
    """Perplexity speaks the OpenAI chat-completions protocol."""

    name = "perplexity"

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-sonar-small-128k-online",
        base_url: str = "https://api.perplexity.ai",
        timeout: float = 30.0,
    ):
        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    @staticmethod
    def _messages(system_prompt: str, messages: ChatTurns) -> list[dict]:
        return [{"role": "system", "content": system_prompt}] + [
            {"role": m["role"], "content": m["content"]} for m in messages
        ]

    def _create(self, system_prompt: str, messages: ChatTurns, temperature: float, max_tokens: int) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(system_prompt, messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"Perplexity request failed: {e}")
            raise ProviderError(self.name, str(e)) from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise ProviderError(self.name, "empty response")
        return content.strip()

    def complete(self, system_prompt, prompt, temperature=0.7, max_tokens=1500):
        return self._create(system_prompt, [{"role": "user", "content": prompt}], temperature, max_tokens)

    def chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        return self._create(system_prompt, messages, temperature, max_tokens)

    def stream_chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200) -> Iterator[str]:
        try:
            stream = self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(system_prompt, messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            for chunk in stream:
                delta = chunk.choices[0].delta.content if chunk.choices else None
                if delta:
                    yield delta
        except OpenAIError as e:
            logger.error(f"Perplexity stream failed: {e}")
            raise ProviderError(self.name, str(e)) from e
