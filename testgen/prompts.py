"""Prompt compiler: renders a template and user code into one prompt."""

from testgen.models import ProgrammingLanguage
from testgen.templates import TemplateRegistry

CLOSING_INSTRUCTION = (
    "Generate ONLY the test code without explanations or markdown formatting. "
    "The response should be clean, executable test code."
)


def build_prompt(
    code: str, language: str, framework: str, registry: TemplateRegistry
) -> str:
    """Build the test generation prompt for a snippet of code.

    Args:
        code: Source code to generate tests for.
        language: Programming language of the code.
        framework: Target test framework.
        registry: Registry used to resolve the template.

    Returns:
        Prompt with instruction, optional example, fenced code,
        requirements, and the closing instruction.
    """
    template = registry.resolve(language, framework)
    language_tag = ProgrammingLanguage(language).value
    return (
        f"{template.instruction}\n\n"
        f"{template.examples or ''}\n\n"
        f"```{language_tag}\n{code}\n```\n\n"
        f"Requirements:\n{_format_requirements(template.requirements)}\n\n"
        f"{CLOSING_INSTRUCTION}"
    )


def _format_requirements(requirements: tuple[str, ...]) -> str:
    """Format requirements as a bulleted list.

    Args:
        requirements: Requirement sentences in order.

    Returns:
        One ``- item`` line per requirement.
    """
    return "\n".join(f"- {req}" for req in requirements)
