import asyncio
from datetime import timezone

import pytest

from conftest import FakeOllamaClient
from testgen.config import Config
from testgen.errors import ModelNotFound, UpstreamUnavailable
from testgen.generator import TestGenerationService, create_service, resolve_model_config
from testgen.models import ModelConfiguration, TestGenerationRequest

JEST_COMPLETION = (
    "Here you go:\n"
    "```javascript\n"
    "describe('add', () => {\n"
    "  test('adds', () => { expect(add(1,2)).toBe(3); });\n"
    "});\n"
    "```\n"
    "Hope that helps!"
)


def _request(**overrides) -> TestGenerationRequest:
    """Build a generation request with sensible defaults.

    Args:
        **overrides: Field values to override.

    Returns:
        TestGenerationRequest instance.
    """
    data = {
        "code": "function add(a, b) { return a + b; }",
        "language": "javascript",
        "framework": "jest",
    }
    data.update(overrides)
    return TestGenerationRequest(**data)


class TestResolveModelConfig:
    """Tests for resolve_model_config."""

    def test_missing_config_uses_defaults(self):
        """Test that no config resolves to the documented defaults."""
        config = resolve_model_config(None, "codellama")
        assert config.model_dump() == {
            "model": "codellama",
            "temperature": 0.7,
            "max_tokens": 2048,
            "top_p": 0.9,
            "stream": False,
        }

    def test_missing_config_uses_configured_default_model(self):
        """Test that the service default model applies when none is given."""
        assert resolve_model_config(None, "deepseek-coder").model == "deepseek-coder"

    def test_partial_config_gets_default_model(self):
        """Test that a config without a model keeps its options and gains the default."""
        config = resolve_model_config(ModelConfiguration(temperature=0), "llama3")
        assert config.model == "llama3"
        assert config.temperature == 0

    def test_explicit_model_wins(self):
        """Test that an explicit model name is kept."""
        config = resolve_model_config(ModelConfiguration(model="phi3"), "llama3")
        assert config.model == "phi3"


class TestGenerateTests:
    """Tests for TestGenerationService.generate_tests."""

    def test_normalizes_and_counts(self, registry):
        """Test the full pipeline on a jest completion wrapped in prose.

        Args:
            registry: Registry fixture with built-in templates.
        """
        client = FakeOllamaClient(completion=JEST_COMPLETION)
        service = TestGenerationService(client, registry)
        result = asyncio.run(service.generate_tests(_request()))

        assert result.test_code == (
            "describe('add', () => {\n"
            "  test('adds', () => { expect(add(1,2)).toBe(3); });\n"
            "});"
        )
        assert result.test_count == 1
        assert result.language.value == "javascript"
        assert result.framework.value == "jest"
        assert result.model_name == "codellama"
        assert result.execution_time_ms >= 0
        assert result.generated_at.tzinfo is timezone.utc

    def test_sends_compiled_prompt(self, registry):
        """Test that the client receives the compiled prompt with the user code.

        Args:
            registry: Registry fixture with built-in templates.
        """
        client = FakeOllamaClient(completion="def test_a():\n    pass")
        service = TestGenerationService(client, registry)
        code = "def add(a, b):\n    return a + b"
        asyncio.run(service.generate_tests(_request(code=code, language="python", framework="pytest")))

        prompt, config = client.calls[0]
        assert code in prompt
        assert prompt.startswith("Generate comprehensive pytest unit tests")
        assert config.model_dump() == ModelConfiguration().model_dump()

    def test_python_pytest_defaults(self, registry):
        """Test that a python/pytest request without config uses the defaults.

        Args:
            registry: Registry fixture with built-in templates.
        """
        client = FakeOllamaClient(completion="def test_a():\n    pass")
        service = TestGenerationService(client, registry)
        asyncio.run(service.generate_tests(_request(language="python", framework="pytest")))

        _, config = client.calls[0]
        assert (config.model, config.temperature, config.max_tokens, config.top_p, config.stream) == (
            "codellama", 0.7, 2048, 0.9, False,
        )

    def test_request_model_config_is_forwarded(self, registry):
        """Test that request options reach the client.

        Args:
            registry: Registry fixture with built-in templates.
        """
        client = FakeOllamaClient(completion="")
        service = TestGenerationService(client, registry, default_model="llama3")
        request = _request(modelConfig={"temperature": 0.2, "maxTokens": 100})
        result = asyncio.run(service.generate_tests(request))

        _, config = client.calls[0]
        assert config.model == "llama3"
        assert config.temperature == 0.2
        assert config.max_tokens == 100
        assert result.model_name == "llama3"

    def test_empty_completion_gives_zero_tests(self, registry):
        """Test that an empty completion degrades to empty code and zero tests.

        Args:
            registry: Registry fixture with built-in templates.
        """
        service = TestGenerationService(FakeOllamaClient(completion=""), registry)
        result = asyncio.run(service.generate_tests(_request()))
        assert result.test_code == ""
        assert result.test_count == 0

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamUnavailable("Unable to connect to Ollama. Please ensure Ollama is running."),
            ModelNotFound("codellama"),
        ],
    )
    def test_client_errors_propagate_unchanged(self, registry, error):
        """Test that client failures reach the caller as the same exception.

        Args:
            registry: Registry fixture with built-in templates.
            error: Exception raised by the fake client.
        """
        service = TestGenerationService(FakeOllamaClient(error=error), registry)
        with pytest.raises(type(error)) as exc_info:
            asyncio.run(service.generate_tests(_request()))
        assert exc_info.value is error


class TestCreateService:
    """Tests for create_service."""

    def test_wires_config(self):
        """Test that config values reach the client and service."""
        config = Config(
            _env_file=None,  # type: ignore[call-arg]
            ollama_base_url="http://gpu-box:11434",
            ollama_default_model="phi3",
            ollama_timeout_seconds=30,
        )
        service = create_service(config)
        assert service.client.base_url == "http://gpu-box:11434"
        assert service.client.timeout == 30
        assert service.default_model == "phi3"
        assert ("python", "pytest") in [(k[0].value, k[1].value) for k in service.registry.keys()]

    def test_loads_templates_file(self, tmp_path):
        """Test that templates_path adds templates to the registry.

        Args:
            tmp_path: Pytest temporary directory fixture.
        """
        path = tmp_path / "templates.yaml"
        path.write_text(
            "templates:\n"
            "  - language: go\n"
            "    framework: go-test\n"
            "    instruction: Write table-driven tests.\n"
        )
        config = Config(_env_file=None, templates_path=str(path))  # type: ignore[call-arg]
        service = create_service(config)
        assert service.registry.resolve("go", "go-test").instruction == "Write table-driven tests."
