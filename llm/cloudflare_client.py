import logging

from core.exceptions import ProviderError
from llm.base import GenerativeProvider, first_text, post_json

logger = logging.getLogger("CloudflareClient")

CLOUDFLARE_API = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"


class CloudflareLlamaClient(GenerativeProvider):
    """Llama hosted on Cloudflare Workers AI."""

    name = "cloudflare"

    def __init__(self, account_id: str, api_token: str, model: str = "@cf/meta/llama-3-8b-instruct", timeout: float = 30.0):
        self.url = CLOUDFLARE_API.format(account_id=account_id, model=model)
        self.headers = {"Authorization": f"Bearer {api_token}", "Content-Type": "application/json"}
        self.timeout = timeout

    def _run(self, system_prompt, messages, temperature, max_tokens) -> str:
        payload = {
            "messages": [{"role": "system", "content": system_prompt}] + list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        data = post_json(self.name, self.url, self.timeout, headers=self.headers, json=payload)

        if data.get("success") is False:
            errors = data.get("errors") or []
            raise ProviderError(self.name, f"API error: {errors}")

        result = data.get("result")
        text = first_text(
            result,
            result.get("response") if isinstance(result, dict) else None,
            data.get("response"),
            data.get("output"),
        )
        if text is None:
            logger.warning(f"Unexpected Cloudflare response keys: {list(data)}")
            raise ProviderError(self.name, "no text in response")
        return text.strip()

    def complete(self, system_prompt, prompt, temperature=0.7, max_tokens=1500):
        return self._run(system_prompt, [{"role": "user", "content": prompt}], temperature, max_tokens)

    def chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        return self._run(system_prompt, messages, temperature, max_tokens)
