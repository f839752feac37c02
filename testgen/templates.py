"""Prompt template registry keyed by language and framework."""

import threading
from pathlib import Path

import structlog
import yaml

from testgen.errors import InvalidTemplate
from testgen.models import ProgrammingLanguage, PromptTemplate, TestingFramework

logger = structlog.get_logger(__name__)

TemplateKey = tuple[ProgrammingLanguage, TestingFramework]

_JEST_EXAMPLE = """
Example:
Input: function add(a, b) { return a + b; }
Output:
```javascript
describe('add', () => {
  test('should add two positive numbers', () => {
    expect(add(2, 3)).toBe(5);
  });

  test('should add negative numbers', () => {
    expect(add(-1, -2)).toBe(-3);
  });

  test('should handle zero', () => {
    expect(add(0, 5)).toBe(5);
    expect(add(5, 0)).toBe(5);
  });
});
```"""

_PYTEST_EXAMPLE = """
Example:
Input: def divide(a, b): return a / b
Output:
```python
import pytest

def test_divide_positive_numbers():
    assert divide(10, 2) == 5

def test_divide_negative_numbers():
    assert divide(-10, 2) == -5

def test_divide_by_zero_raises_error():
    with pytest.raises(ZeroDivisionError):
        divide(10, 0)
```"""

BUILTIN_TEMPLATES: dict[TemplateKey, PromptTemplate] = {
    (ProgrammingLanguage.javascript, TestingFramework.jest): PromptTemplate(
        instruction=(
            "Generate comprehensive Jest unit tests for the following "
            "JavaScript function."
        ),
        examples=_JEST_EXAMPLE,
        requirements=(
            "Use Jest syntax (describe, test, expect)",
            "Test happy path scenarios",
            "Test edge cases and boundary conditions",
            "Test error scenarios where applicable",
            "Use descriptive test names",
            "Include setup/teardown if needed",
        ),
    ),
    (ProgrammingLanguage.python, TestingFramework.pytest): PromptTemplate(
        instruction=(
            "Generate comprehensive pytest unit tests for the following "
            "Python function."
        ),
        examples=_PYTEST_EXAMPLE,
        requirements=(
            "Use pytest syntax and conventions",
            "Test normal functionality",
            "Test edge cases and error conditions",
            "Use pytest.raises for exception testing",
            "Use fixtures when appropriate",
            "Follow Python naming conventions",
        ),
    ),
    (ProgrammingLanguage.typescript, TestingFramework.jest): PromptTemplate(
        instruction=(
            "Generate comprehensive Jest unit tests for the following "
            "TypeScript function."
        ),
        requirements=(
            "Use TypeScript and Jest syntax",
            "Include proper type annotations",
            "Test all code paths",
            "Mock dependencies when needed",
            "Use describe and test blocks",
            "Test error conditions",
        ),
    ),
    (ProgrammingLanguage.java, TestingFramework.junit): PromptTemplate(
        instruction="Generate comprehensive JUnit 5 tests for the following Java method.",
        requirements=(
            "Use JUnit 5 annotations (@Test, @BeforeEach, etc.)",
            "Use Assertions class for assertions",
            "Test normal and exceptional cases",
            "Use @DisplayName for readable test names",
            "Mock dependencies with Mockito if needed",
            "Follow Java naming conventions",
        ),
    ),
}

GENERIC_REQUIREMENTS = (
    "Write comprehensive test cases",
    "Cover normal execution paths",
    "Test edge cases and boundary conditions",
    "Test error scenarios where applicable",
    "Use appropriate assertions",
    "Follow testing best practices",
)


def default_template(language: str, framework: str) -> PromptTemplate:
    """Build the generic template used when no pair-specific one exists.

    Args:
        language: Programming language of the code under test.
        framework: Target test framework.

    Returns:
        Template naming both the language and the framework.
    """
    language = ProgrammingLanguage(language).value
    framework = TestingFramework(framework).value
    return PromptTemplate(
        instruction=(
            f"Generate comprehensive unit tests for the following {language} "
            f"code using {framework}."
        ),
        requirements=GENERIC_REQUIREMENTS,
    )


class TemplateRegistry:
    """Holds one prompt template per (language, framework) pair.

    Registration replaces the whole table under a lock, so concurrent
    readers always see either the old or the new mapping.
    """

    def __init__(self, templates: dict[TemplateKey, PromptTemplate] | None = None):
        self._lock = threading.Lock()
        self._templates: dict[TemplateKey, PromptTemplate] = {}
        for (language, framework), template in (templates or {}).items():
            self.register(language, framework, template)

    @classmethod
    def with_builtin_templates(cls) -> "TemplateRegistry":
        """Create a registry preloaded with the built-in templates.

        Returns:
            New registry instance.
        """
        return cls(BUILTIN_TEMPLATES)

    def register(
        self, language: str, framework: str, template: PromptTemplate
    ) -> None:
        """Insert or replace the template for a language/framework pair.

        Args:
            language: Programming language key.
            framework: Test framework key.
            template: Template to store.

        Raises:
            InvalidTemplate: If the template instruction is blank.
        """
        if not template.instruction or not template.instruction.strip():
            raise InvalidTemplate(
                f"Template for {language}/{framework} has an empty instruction"
            )
        key = (ProgrammingLanguage(language), TestingFramework(framework))
        with self._lock:
            updated = dict(self._templates)
            updated[key] = template
            self._templates = updated
        logger.debug(
            "template_registered", language=key[0].value, framework=key[1].value
        )

    def register_from_file(self, path: Path) -> int:
        """Register every template defined in a YAML file.

        Args:
            path: Path to a templates YAML file.

        Returns:
            Number of templates registered.
        """
        loaded = load_templates(path)
        for (language, framework), template in loaded.items():
            self.register(language, framework, template)
        logger.info("templates_loaded", path=str(path), count=len(loaded))
        return len(loaded)

    def resolve(self, language: str, framework: str) -> PromptTemplate:
        """Return the template for a pair, falling back to the generic one.

        Args:
            language: Programming language key.
            framework: Test framework key.

        Returns:
            The registered template, or a generic template naming both keys.
        """
        key = (ProgrammingLanguage(language), TestingFramework(framework))
        template = self._templates.get(key)
        if template is None:
            return default_template(*key)
        return template

    def keys(self) -> list[TemplateKey]:
        """Return the registered pairs, sorted by language then framework."""
        return sorted(self._templates, key=lambda k: (k[0].value, k[1].value))


def load_templates(path: Path) -> dict[TemplateKey, PromptTemplate]:
    """Load custom templates from a YAML file.

    The file holds a top-level ``templates`` list whose entries carry
    ``language``, ``framework``, ``instruction``, and optionally
    ``examples`` and ``requirements``.

    Args:
        path: Path to the templates YAML file.

    Returns:
        Mapping from (language, framework) to template.

    Raises:
        ValueError: The file is empty, not valid YAML, or not shaped as above.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid templates file {path}: {exc}") from exc
    if not data:
        raise ValueError("Templates file is empty")
    if not isinstance(data, dict):
        raise ValueError("Templates file must be a mapping with a 'templates' list")

    templates: dict[TemplateKey, PromptTemplate] = {}
    for idx, entry in enumerate(data.get("templates") or []):
        if not isinstance(entry, dict):
            raise ValueError(f"templates[{idx}] must be a mapping")
        entry = dict(entry)
        key = (
            ProgrammingLanguage(entry.pop("language", None)),
            TestingFramework(entry.pop("framework", None)),
        )
        template = PromptTemplate(**entry)
        if not template.instruction.strip():
            raise InvalidTemplate(f"templates[{idx}] has an empty instruction")
        templates[key] = template
    return templates
