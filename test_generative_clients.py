from types import SimpleNamespace

import pytest
from openai import OpenAIError

from core.exceptions import ProviderError
from llm.gemini_client import GeminiClient
from llm.perplexity_client import PerplexityClient

TURNS = [
    {"role": "user", "content": "Fix my intro"},
    {"role": "assistant", "content": "Paste it here"},
    {"role": "user", "content": "Here it is"},
]


class FakeGeminiModels:
    def __init__(self, text="ok", chunks=(), fail_after=None):
        self.text = text
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        return SimpleNamespace(text=self.text)

    def generate_content_stream(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise RuntimeError("connection reset")
            yield SimpleNamespace(text=chunk)


def gemini_with(models):
    client = GeminiClient("g-key", model="gemini-test", timeout=5)
    client.client = SimpleNamespace(models=models)
    return client


def test_gemini_chat_payload():
    models = FakeGeminiModels("Sounds good.")
    reply = gemini_with(models).chat("Be helpful.", TURNS, temperature=0.3, max_tokens=200)

    assert reply == "Sounds good."
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert [c.role for c in call["contents"]] == ["user", "model", "user"]
    assert call["contents"][1].parts[0].text == "Paste it here"
    config = call["config"]
    assert config.system_instruction[0].text == "Be helpful."
    assert config.temperature == 0.3
    assert config.max_output_tokens == 200
    assert config.thinking_config.thinking_budget == 0


def test_gemini_complete_wraps_prompt_as_user_turn():
    models = FakeGeminiModels("{}")
    gemini_with(models).complete("System", "He go home.")
    contents = models.calls[0]["contents"]
    assert len(contents) == 1
    assert contents[0].role == "user"
    assert contents[0].parts[0].text == "He go home."


def test_gemini_empty_reply_is_provider_error():
    with pytest.raises(ProviderError) as exc_info:
        gemini_with(FakeGeminiModels(text=None)).complete("System", "prompt")
    assert exc_info.value.message == "empty response"


def test_gemini_sdk_error_is_provider_error():
    models = FakeGeminiModels()

    def explode(**kwargs):
        raise RuntimeError("quota exhausted")

    models.generate_content = explode
    with pytest.raises(ProviderError) as exc_info:
        gemini_with(models).chat("System", TURNS)
    assert exc_info.value.provider == "gemini"
    assert "quota exhausted" in exc_info.value.message


def test_gemini_stream_skips_empty_chunks():
    models = FakeGeminiModels(chunks=["Hel", "", None, "lo"])
    assert list(gemini_with(models).stream_chat("System", TURNS)) == ["Hel", "lo"]


def test_gemini_stream_failure_midway():
    stream = gemini_with(FakeGeminiModels(chunks=["Hel", "lo"], fail_after=1)).stream_chat("System", TURNS)
    assert next(stream) == "Hel"
    with pytest.raises(ProviderError):
        next(stream)


class FakeCompletions:
    def __init__(self, content="ok", deltas=(), fail_after=None, error=None):
        self.content = content
        self.deltas = list(deltas)
        self.fail_after = fail_after
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if kwargs.get("stream"):
            return self._stream()
        choices = [SimpleNamespace(message=SimpleNamespace(content=self.content))] if self.content is not None else []
        return SimpleNamespace(choices=choices)

    def _stream(self):
        for i, delta in enumerate(self.deltas):
            if self.fail_after is not None and i == self.fail_after:
                raise OpenAIError("stream interrupted")
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=delta))])


def perplexity_with(completions):
    client = PerplexityClient("p-key", model="sonar-test", timeout=5)
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client


def test_perplexity_chat_payload():
    completions = FakeCompletions("  A clearer intro.  ")
    reply = perplexity_with(completions).chat("Be helpful.", TURNS, temperature=0.4, max_tokens=300)

    assert reply == "A clearer intro."
    sent = completions.calls[0]
    assert sent["model"] == "sonar-test"
    assert sent["messages"][0] == {"role": "system", "content": "Be helpful."}
    assert [m["role"] for m in sent["messages"][1:]] == ["user", "assistant", "user"]
    assert sent["temperature"] == 0.4
    assert sent["max_tokens"] == 300


@pytest.mark.parametrize("content", [None, ""])
def test_perplexity_empty_reply_is_provider_error(content):
    with pytest.raises(ProviderError):
        perplexity_with(FakeCompletions(content)).complete("System", "prompt")


def test_perplexity_sdk_error_is_provider_error():
    with pytest.raises(ProviderError) as exc_info:
        perplexity_with(FakeCompletions(error=OpenAIError("invalid api key"))).chat("System", TURNS)
    assert exc_info.value.provider == "perplexity"


def test_perplexity_stream():
    completions = FakeCompletions(deltas=["A ", None, "reply"])
    assert list(perplexity_with(completions).stream_chat("System", TURNS)) == ["A ", "reply"]
    assert completions.calls[0]["stream"] is True


def test_perplexity_stream_failure_midway():
    stream = perplexity_with(FakeCompletions(deltas=["A ", "reply"], fail_after=1)).stream_chat("System", TURNS)
    assert next(stream) == "A "
    with pytest.raises(ProviderError):
        next(stream)
