"""Per-framework conventions used to trim and count generated tests."""

import re
from dataclasses import dataclass, field

from testgen.models import TestingFramework

END_MARKERS = ("}", "});", '"""', "*/")


@dataclass(frozen=True)
class FrameworkConventions:
    """Tokens that locate test code in a completion and count its test cases.

    Attributes:
        start_markers: Substrings that mark the first line of test code.
        count_pattern: Regex matching one test case declaration.
        end_markers: Substrings that mark the last line of test code.
    """

    start_markers: tuple[str, ...]
    count_pattern: re.Pattern
    end_markers: tuple[str, ...] = field(default=END_MARKERS)


_JS_WITH_TEST = ("describe", "test", "it", "import", "const", "function")

CONVENTIONS: dict[TestingFramework, FrameworkConventions] = {
    TestingFramework.jest: FrameworkConventions(
        _JS_WITH_TEST, re.compile(r"\b(?:test|it)\s*\(")
    ),
    TestingFramework.mocha: FrameworkConventions(
        ("describe", "it", "import", "const", "function"),
        re.compile(r"\bit\s*\("),
    ),
    TestingFramework.vitest: FrameworkConventions(
        _JS_WITH_TEST, re.compile(r"\b(?:test|it)\s*\(")
    ),
    TestingFramework.pytest: FrameworkConventions(
        ("def test_", "import", "class Test"), re.compile(r"def test_\w+")
    ),
    TestingFramework.junit: FrameworkConventions(
        ("@Test", "class", "import", "public"), re.compile(r"@Test")
    ),
    TestingFramework.nunit: FrameworkConventions(
        ("[Test]", "class", "using", "public"), re.compile(r"\[Test\]")
    ),
    TestingFramework.gtest: FrameworkConventions(
        ("TEST(", "#include", "class"), re.compile(r"TEST\(")
    ),
    TestingFramework.go_test: FrameworkConventions(
        ("func Test", "package", "import"), re.compile(r"func Test\w+")
    ),
    TestingFramework.rust_test: FrameworkConventions(
        ("#[test]", "fn test_", "use", "mod"), re.compile(r"#\[test\]")
    ),
}


def get_conventions(framework: str) -> FrameworkConventions | None:
    """Look up the conventions for a framework name.

    Args:
        framework: Framework enum member or its string value.

    Returns:
        Matching conventions, or None for an unknown framework.
    """
    try:
        return CONVENTIONS[TestingFramework(framework)]
    except ValueError:
        return None
