"""Pydantic v2 models for requests, templates, and generation results."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_CODE_LENGTH = 10_000


class ProgrammingLanguage(str, Enum):
    """Languages accepted for the code under test."""

    javascript = "javascript"
    typescript = "typescript"
    python = "python"
    java = "java"
    csharp = "csharp"
    cpp = "cpp"
    go = "go"
    rust = "rust"


class TestingFramework(str, Enum):
    """Test frameworks the model can be asked to target."""

    __test__ = False

    jest = "jest"
    mocha = "mocha"
    vitest = "vitest"
    pytest = "pytest"
    junit = "junit"
    nunit = "nunit"
    gtest = "gtest"
    go_test = "go-test"
    rust_test = "rust-test"


class _CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class PromptTemplate(BaseModel):
    """Recipe for phrasing a prompt for one language/framework pair."""

    model_config = ConfigDict(frozen=True)

    instruction: str
    examples: str | None = None
    requirements: tuple[str, ...] = ()


class ModelConfiguration(_CamelModel):
    """Sampling options forwarded to Ollama for a single completion."""

    model: str = Field(default="codellama", min_length=1)
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=2048, ge=1, le=4096)
    top_p: float = Field(default=0.9, ge=0, le=1)
    stream: bool = False


class TestGenerationRequest(_CamelModel):
    """Inbound request: code to test, its language, and the target framework."""

    __test__ = False

    code: str = Field(min_length=1, max_length=MAX_CODE_LENGTH)
    language: ProgrammingLanguage
    framework: TestingFramework
    model_options: ModelConfiguration | None = Field(default=None, alias="modelConfig")


class GenerationResult(_CamelModel):
    """Normalized test code plus metadata for one successful generation."""

    model_config = ConfigDict(frozen=True)

    test_code: str
    language: ProgrammingLanguage
    framework: TestingFramework
    model_name: str
    generated_at: datetime
    test_count: int = Field(ge=0)
    execution_time_ms: int = Field(ge=0)


class OllamaModel(BaseModel):
    """A model installed on the Ollama host, as listed by ``/api/tags``."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    name: str
    size: int = 0
    digest: str = ""
    modified_at: str = ""


class ApiResponse(BaseModel):
    """Generic success/data/message envelope returned by the HTTP API."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
