import pytest
import requests

from conftest import FakeResponse
from core.exceptions import ProviderError
from llm.cloudflare_client import CloudflareLlamaClient
from llm.languagetool_client import LanguageToolClient
from llm.zerogpt_client import ZeroGPTClient

TEXT = "He go to school. It is very very good."


def lt_match(offset, length, replacement, category="GRAMMAR", issue_type="grammar", rule_id="RULE"):
    return {
        "offset": offset,
        "length": length,
        "message": "Possible mistake",
        "replacements": [{"value": replacement}],
        "rule": {"id": rule_id, "issueType": issue_type, "category": {"id": category, "name": category.title()}},
    }


def queue_responses(monkeypatch, *responses):
    calls = []
    pending = list(responses)

    def fake_post(url, timeout=None, **kwargs):
        calls.append({"url": url, "timeout": timeout, **kwargs})
        item = pending.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


def test_languagetool_splits_errors_and_suggestions(monkeypatch):
    calls = queue_responses(
        monkeypatch,
        FakeResponse({"matches": [
            lt_match(3, 2, "goes", rule_id="HE_VERB_AGR"),
            lt_match(23, 9, "very", category="STYLE", issue_type="style", rule_id="EN_REPEATED"),
            {"offset": 0, "length": 2, "replacements": []},
        ]}),
        FakeResponse({"matches": []}),
    )
    result = LanguageToolClient("https://lt.example/v2/check", timeout=5).grammar_check(TEXT)

    assert [e.id for e in result.errors] == ["lt-HE_VERB_AGR-3"]
    assert result.errors[0].errorText == "go"
    assert [s.text for s in result.suggestions] == ["very very"]
    assert result.corrected == "He goes to school. It is very very good."
    assert calls[0]["data"]["enabledOnly"] == "false"
    assert calls[0]["timeout"] == 5
    # second call checks the corrected text
    assert calls[1]["data"]["text"] == result.corrected


def test_languagetool_recheck_failure_keeps_first_pass(monkeypatch):
    queue_responses(
        monkeypatch,
        FakeResponse({"matches": [lt_match(3, 2, "goes", issue_type="misspelling")]}),
        requests.ConnectionError("gone"),
    )
    result = LanguageToolClient("https://lt.example/v2/check").grammar_check(TEXT)
    assert result.errors[0].type == "spelling"
    assert result.corrected.startswith("He goes")


def test_languagetool_http_error(monkeypatch):
    queue_responses(monkeypatch, FakeResponse("rate limited", status_code=429))
    with pytest.raises(ProviderError) as exc_info:
        LanguageToolClient("https://lt.example/v2/check").grammar_check(TEXT)
    assert "429" in exc_info.value.message


@pytest.mark.parametrize("payload", [
    {"ai_percent": 82},
    {"data": {"fakePercentage": 82.2}},
    {"ai_percentage": "82"},
    {"ai_probability": 0.82},
])
def test_zerogpt_reads_percentage_variants(monkeypatch, payload):
    calls = queue_responses(monkeypatch, FakeResponse(payload))
    result = ZeroGPTClient("z-key").detect_ai(TEXT)

    assert result.aiPercentage == 82
    assert result.verdict == "AI-generated"
    assert len(result.highlights) == 2
    assert result.metrics.correctness == 50
    assert calls[0]["json"] == {"input_text": TEXT}
    assert calls[0]["headers"]["ApiKey"] == "z-key"


def test_zerogpt_low_score_has_no_highlights(monkeypatch):
    queue_responses(monkeypatch, FakeResponse({"ai_percent": 10}))
    result = ZeroGPTClient("z-key").detect_ai(TEXT)
    assert result.verdict == "Human-written"
    assert result.highlights == []
    assert result.metrics.correctness == 90


@pytest.mark.parametrize("response", [
    FakeResponse({"success": True, "data": {}}),
    FakeResponse({"ai_percent": "lots"}),
    FakeResponse(None, bad_json=True),
    FakeResponse(["not", "a", "dict"]),
])
def test_zerogpt_bad_responses_raise(monkeypatch, response):
    queue_responses(monkeypatch, response)
    with pytest.raises(ProviderError):
        ZeroGPTClient("z-key").detect_ai(TEXT)


@pytest.mark.parametrize("payload", [
    {"success": True, "result": {"response": " Hello! "}},
    {"result": "Hello!"},
    {"response": "Hello!"},
    {"output": "Hello!"},
])
def test_cloudflare_response_shapes(monkeypatch, payload):
    calls = queue_responses(monkeypatch, FakeResponse(payload))
    client = CloudflareLlamaClient("acct", "token", timeout=7)
    assert client.chat("Be brief.", [{"role": "user", "content": "hi"}]) == "Hello!"

    sent = calls[0]
    assert sent["url"].endswith("/accounts/acct/ai/run/@cf/meta/llama-3-8b-instruct")
    assert sent["json"]["messages"][0] == {"role": "system", "content": "Be brief."}
    assert sent["headers"]["Authorization"] == "Bearer token"


def test_cloudflare_errors(monkeypatch):
    queue_responses(monkeypatch, FakeResponse({"success": False, "errors": [{"message": "bad model"}]}))
    with pytest.raises(ProviderError):
        CloudflareLlamaClient("acct", "token").complete("sys", "prompt")

    queue_responses(monkeypatch, requests.Timeout("slow"))
    with pytest.raises(ProviderError) as exc_info:
        CloudflareLlamaClient("acct", "token").complete("sys", "prompt")
    assert exc_info.value.provider == "cloudflare"


@pytest.mark.parametrize("match", [
    {"offset": 3, "length": 2, "replacements": ["goes"], "rule": {}},
    {"offset": 3, "length": 2, "replacements": [{"value": None}], "rule": {}},
    {"offset": 3, "length": 2, "replacements": [{"value": "goes"}], "rule": "GRAMMAR"},
    "not a match",
])
def test_languagetool_skips_malformed_matches(monkeypatch, match):
    queue_responses(monkeypatch, FakeResponse({"matches": [match]}), FakeResponse({"matches": []}))
    result = LanguageToolClient("https://lt.example/v2/check").grammar_check(TEXT)
    assert result.corrected == TEXT or result.corrected.startswith("He goes")
    for error in result.errors:
        assert isinstance(error.replacementText, str)


def test_languagetool_unreadable_matches_become_provider_error(monkeypatch):
    queue_responses(monkeypatch, FakeResponse({"matches": [lt_match(3, 2, "goes")]}))

    def broken_split(text, matches):
        raise TypeError("unexpected match layout")

    monkeypatch.setattr(LanguageToolClient, "_split", staticmethod(broken_split))
    with pytest.raises(ProviderError) as exc_info:
        LanguageToolClient("https://lt.example/v2/check").grammar_check(TEXT)
    assert exc_info.value.message.startswith("malformed response")
