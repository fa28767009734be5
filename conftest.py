import os

# Settings are cached on first use, so the environment must be set before any app import.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LANGUAGETOOL_URL"] = ""
for _key in (
    "GEMINI_API_KEY",
    "PERPLEXITY_API_KEY",
    "ZEROGPT_API_KEY",
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_API_TOKEN",
):
    os.environ[_key] = ""

import random  # noqa: E402
from typing import List  # noqa: E402

import pytest  # noqa: E402
import requests  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.exceptions import ProviderError  # noqa: E402
from llm.base import GenerativeProvider  # noqa: E402
from schemas.results import GrammarResult, build_grammar_result  # noqa: E402


class FakeGenerator(GenerativeProvider):
    """Returns canned replies and records every call."""

    def __init__(self, reply: str = "ok", fail: bool = False, name: str = "fake"):
        self.reply = reply
        self.fail = fail
        self.name = name
        self.calls: List[tuple] = []

    def complete(self, system_prompt, prompt, temperature=0.7, max_tokens=1500):
        self.calls.append(("complete", system_prompt, prompt, temperature))
        if self.fail:
            raise ProviderError(self.name, "upstream exploded")
        return self.reply

    def chat(self, system_prompt, messages, temperature=0.7, max_tokens=1200):
        self.calls.append(("chat", system_prompt, messages, temperature))
        if self.fail:
            raise ProviderError(self.name, "upstream exploded")
        return self.reply


class FakeGrammarChecker:
    def __init__(self, result: GrammarResult = None, fail: bool = False):
        self.name = "fake-grammar"
        self.result = result
        self.fail = fail
        self.calls = 0

    def grammar_check(self, text, language="en-US"):
        self.calls += 1
        if self.fail:
            raise ProviderError(self.name, "grammar service down")
        return self.result or build_grammar_result(text, [], [])


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, bad_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json
        self.text = str(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self.bad_json:
            raise ValueError("not json")
        return self.payload


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def app():
    from db.database import Base, engine
    from main import app as fastapi_app

    Base.metadata.drop_all(bind=engine)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    from db.database import SessionLocal

    with SessionLocal() as session:
        yield session
