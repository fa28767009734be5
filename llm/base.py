"""Provider interfaces shared by the generative model clients."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests

from core.exceptions import ProviderError

logger = logging.getLogger("LLMProviders")

ChatTurns = List[Dict[str, str]]


class GenerativeProvider(ABC):
    """A text-generation backend.

    ``messages`` are already sanitized: alternating user/assistant turns that
    start and end with a user turn. The system prompt is passed separately.
    """

    name = "generative"

    @abstractmethod
    def complete(self, system_prompt: str, prompt: str, temperature: float = 0.7, max_tokens: int = 1500) -> str:
        ...

    @abstractmethod
    def chat(self, system_prompt: str, messages: ChatTurns, temperature: float = 0.7, max_tokens: int = 1200) -> str:
        ...

    def stream_chat(
        self, system_prompt: str, messages: ChatTurns, temperature: float = 0.7, max_tokens: int = 1200
    ) -> Iterator[str]:
        # Providers without a streaming API deliver the whole reply as one chunk.
        yield self.chat(system_prompt, messages, temperature, max_tokens)


class ProviderChain(GenerativeProvider):
    """Try each configured provider in order, one attempt each."""

    def __init__(self, providers: Sequence[GenerativeProvider]):
        if not providers:
            raise ValueError("ProviderChain needs at least one provider")
        self.providers = list(providers)
        self.name = " > ".join(p.name for p in self.providers)

    def _run(self, method: str, *args) -> str:
        failures = []
        for provider in self.providers:
            try:
                return getattr(provider, method)(*args)
            except ProviderError as e:
                logger.warning(f"{provider.name} failed ({method}): {e.message}")
                failures.append(str(e))
        raise ProviderError(self.name, "; ".join(failures))

    def complete(self, system_prompt, prompt, temperature=0.7, max_tokens=1500):
        return self._run("complete", system_prompt, prompt, temperature, max_tokens)

    def chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        return self._run("chat", system_prompt, messages, temperature, max_tokens)

    def stream_chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        failures = []
        for provider in self.providers:
            started = False
            try:
                for chunk in provider.stream_chat(system_prompt, messages, temperature, max_tokens):
                    started = True
                    yield chunk
                return
            except ProviderError as e:
                # Once text has reached the client, switching providers would garble the reply.
                if started:
                    raise
                logger.warning(f"{provider.name} failed (stream_chat): {e.message}")
                failures.append(str(e))
        raise ProviderError(self.name, "; ".join(failures))


def post_json(provider: str, url: str, timeout: float, **kwargs: Any) -> Dict[str, Any]:
    """POST with ``requests`` and return the decoded JSON body.

    Transport errors, non-2xx statuses and non-JSON bodies become ``ProviderError``.
    """
    try:
        r = requests.post(url, timeout=timeout, **kwargs)
        r.raise_for_status()
    except requests.HTTPError as e:
        body = e.response.text[:300] if e.response is not None else ""
        raise ProviderError(provider, f"HTTP {e.response.status_code if e.response is not None else '?'}: {body}") from e
    except requests.RequestException as e:
        raise ProviderError(provider, f"request failed: {e}") from e

    try:
        data = r.json()
    except ValueError as e:
        raise ProviderError(provider, "response was not valid JSON") from e
    if not isinstance(data, dict):
        raise ProviderError(provider, "unexpected response body")
    return data


def first_text(*values: Optional[Any]) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None
