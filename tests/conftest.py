import httpx
import pytest

from testgen.ollama_client import OllamaClient
from testgen.templates import TemplateRegistry

OLLAMA_TEST_URL = "http://ollama.test"


class FakeOllamaClient:
    """In-memory stand-in for OllamaClient that records completion calls."""

    def __init__(self, completion: str = "", error: Exception | None = None):
        self.base_url = OLLAMA_TEST_URL
        self.completion = completion
        self.error = error
        self.healthy = True
        self.models = []
        self.calls = []

    async def complete(self, prompt, config):
        self.calls.append((prompt, config))
        if self.error is not None:
            raise self.error
        return self.completion

    async def is_healthy(self):
        return self.healthy

    async def list_models(self):
        if self.error is not None:
            raise self.error
        return self.models


@pytest.fixture
def registry():
    """Provide a registry holding the built-in templates.

    Returns:
        TemplateRegistry preloaded with built-ins.
    """
    return TemplateRegistry.with_builtin_templates()


@pytest.fixture
def make_client():
    """Provide a factory for OllamaClients backed by a mock transport.

    Returns:
        Callable taking an httpx request handler and returning a client.
    """

    def _make(handler) -> OllamaClient:
        return OllamaClient(
            base_url=OLLAMA_TEST_URL,
            timeout=5.0,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def fake_client():
    """Provide a FakeOllamaClient with an empty completion.

    Returns:
        FakeOllamaClient instance.
    """
    return FakeOllamaClient()
