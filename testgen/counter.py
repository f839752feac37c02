"""Heuristic count of test cases in normalized test code."""

from testgen.frameworks import get_conventions


def count_tests(code: str, framework: str) -> int:
    """Count test case declarations using the framework's convention.

    The count is a proxy, not a guarantee: it is the number of
    non-overlapping matches of one declaration pattern.

    Args:
        code: Normalized test code.
        framework: Framework enum member or its string value.

    Returns:
        Number of matches, or 0 for an unknown framework.
    """
    conventions = get_conventions(framework)
    if conventions is None or not code:
        return 0
    return len(conventions.count_pattern.findall(code))
