import os

# the app module reads configuration at import time
os.environ["USE_DB"] = "0"
for _key in ("OPENAI_API_KEY", "GEMINI_API_KEY", "API_KEY", "DEEPSEEK_API_KEY", "DEFAULT_PROVIDER"):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient

from care.generator import ResponseGenerator
from care.retriever import KnowledgeRetriever
from care.services import CareService
from care.storage_memory import InMemoryConversationStore


class FakeLLM:
    def __init__(self, script=None, error=None):
        self.script = list(script or [])
        self.error = error
        self.calls = []

    def complete(self, messages, max_tokens=300, temperature=0.4):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if self.script:
            return self.script.pop(0)
        return "I hear you. Tell me a little more about how you're feeling."


class SpyRetriever:
    def __init__(self, chunks=None):
        self.chunks = list(chunks or [])
        self.searches = []
        self.packs = []
        self._real = KnowledgeRetriever()

    def search(self, query, language, topic=None, k=None):
        self.searches.append((query, language, topic))
        return list(self.chunks)

    def from_pack(self, topic, language):
        self.packs.append((topic, language))
        return self._real.from_pack(topic, language)


class RecordingSink:
    def __init__(self):
        self.signals = []

    def emit(self, signal):
        self.signals.append(signal)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def retriever():
    return SpyRetriever()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def service(store, llm, retriever, sink):
    return CareService(store=store, generator=ResponseGenerator(llm, timeout=5), retriever=retriever, sink=sink)


@pytest.fixture
def client(service, monkeypatch):
    import fastapi_app
    monkeypatch.setattr(fastapi_app, "_service", service)
    return TestClient(fastapi_app.app)
