"""Test generation pipeline: prompt, completion, normalization, count."""

import time
from datetime import datetime, timezone
from pathlib import Path

import structlog

from testgen.config import Config
from testgen.counter import count_tests
from testgen.models import (
    GenerationResult,
    ModelConfiguration,
    OllamaModel,
    TestGenerationRequest,
)
from testgen.normalizer import normalize_response
from testgen.ollama_client import OllamaClient
from testgen.prompts import build_prompt
from testgen.templates import TemplateRegistry

logger = structlog.get_logger(__name__)


def resolve_model_config(
    requested: ModelConfiguration | None, default_model: str
) -> ModelConfiguration:
    """Fill in the model name for a request's model configuration.

    Args:
        requested: Model configuration from the request, if any.
        default_model: Model used when the request does not name one.

    Returns:
        Configuration with every field set; explicit request values win.
    """
    if requested is None:
        return ModelConfiguration(model=default_model)
    if "model" not in requested.model_fields_set:
        return requested.model_copy(update={"model": default_model})
    return requested


class TestGenerationService:
    """Runs one generation request through the pipeline.

    Holds no per-request state; one instance serves concurrent requests.
    """

    __test__ = False

    def __init__(
        self,
        client: OllamaClient,
        registry: TemplateRegistry,
        default_model: str = "codellama",
    ):
        self.client = client
        self.registry = registry
        self.default_model = default_model

    async def generate_tests(self, request: TestGenerationRequest) -> GenerationResult:
        """Generate, normalize, and count tests for a request.

        Args:
            request: Validated generation request.

        Returns:
            Generation result with the cleaned test code.

        Raises:
            UpstreamUnavailable: The Ollama host cannot be reached.
            ModelNotFound: The requested model is not installed.
            UpstreamError: Any other failure reported by Ollama.
        """
        started = time.monotonic()
        prompt = build_prompt(
            request.code, request.language, request.framework, self.registry
        )
        model_config = resolve_model_config(request.model_options, self.default_model)
        log = logger.bind(
            language=request.language.value,
            framework=request.framework.value,
            model=model_config.model,
        )
        log.info("generating_tests", code_length=len(request.code))

        try:
            completion = await self.client.complete(prompt, model_config)
        except Exception:
            log.exception("test_generation_failed")
            raise

        test_code = normalize_response(completion, request.framework)
        test_count = count_tests(test_code, request.framework)
        execution_time_ms = int((time.monotonic() - started) * 1000)

        log.info(
            "tests_generated",
            execution_time_ms=execution_time_ms,
            test_count=test_count,
        )
        return GenerationResult(
            test_code=test_code,
            language=request.language,
            framework=request.framework,
            model_name=model_config.model,
            generated_at=datetime.now(timezone.utc),
            test_count=test_count,
            execution_time_ms=execution_time_ms,
        )

    async def check_health(self) -> bool:
        """Return whether the Ollama host answers."""
        return await self.client.is_healthy()

    async def list_models(self) -> list[OllamaModel]:
        """Return the models installed on the Ollama host."""
        return await self.client.list_models()


def create_service(config: Config | None = None) -> TestGenerationService:
    """Build a service wired from configuration.

    Args:
        config: Application configuration; read from the environment if None.

    Returns:
        Service with an Ollama client and a registry holding the built-in
        templates plus any templates from ``config.templates_path``.
    """
    config = config or Config()
    registry = TemplateRegistry.with_builtin_templates()
    if config.templates_path:
        registry.register_from_file(Path(config.templates_path))
    client = OllamaClient(config.ollama_base_url, config.ollama_timeout_seconds)
    return TestGenerationService(client, registry, config.ollama_default_model)
