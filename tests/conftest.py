import asyncio
import json
import re

import pytest
from fastapi.testclient import TestClient

from cbt_api.llm_providers import LLMProvider
from cbt_api.main import app, get_provider

_SUBJECT_RE = re.compile(r'on the subject "(.*?)"')
_COUNT_RE = re.compile(r"Generate EXACTLY (\d+) ")


def make_question(n: int = 0, answer=1, subject: str = "Physics") -> dict:
    return {
        "question": f"{subject} question {n}?",
        "options": ["first", "second", "third", "fourth"],
        "answer": answer,
        "explanation": f"Explanation {n}",
    }


def make_reply(count: int = 3, answer=1, subject: str = "Physics") -> str:
    return json.dumps({"questions": [make_question(i, answer, subject) for i in range(count)]})


def echo_reply(prompt: str) -> str:
    """Builds a well-formed reply from the subject and count found in the prompt"""
    subject = _SUBJECT_RE.search(prompt).group(1)
    count = int(_COUNT_RE.search(prompt).group(1))
    return make_reply(count, subject=subject)


class FakeProvider(LLMProvider):
    def __init__(self, reply=None, error=None, delay: float = 0):
        self.reply = reply if reply is not None else make_reply()
        self.error = error
        self.delay = delay
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply(prompt) if callable(self.reply) else self.reply


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(provider):
    app.dependency_overrides[get_provider] = lambda: provider
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
