"""Isolate test code from a free-text model completion."""

import re

from testgen.frameworks import END_MARKERS, get_conventions

_FENCE_RE = re.compile(r"```\w*\n?")


def strip_fences(text: str) -> str:
    """Remove markdown fence delimiters, keeping the fenced contents.

    Args:
        text: Raw completion text.

    Returns:
        Text without any triple-backtick markers, stripped of outer whitespace.
    """
    return _FENCE_RE.sub("", text).strip()


def normalize_response(raw: str, framework: str) -> str:
    """Trim prose before and after the test code in a completion.

    Fences are removed first. The retained block starts at the first line
    containing one of the framework's start markers and ends at the last
    line containing an end marker. Without a start marker the block starts
    at the first line; without an end marker it runs to the last line. Only
    one contiguous code region is supported.

    Args:
        raw: Raw completion text from the model.
        framework: Framework enum member or its string value.

    Returns:
        Best-effort test code; never raises.
    """
    lines = strip_fences(raw).split("\n")
    conventions = get_conventions(framework)
    start_markers = conventions.start_markers if conventions else ()
    end_markers = conventions.end_markers if conventions else END_MARKERS

    start = _find_start(lines, start_markers)
    end = _find_end(lines, end_markers)

    return "\n".join(lines[start : end + 1]).strip()


def _find_start(lines: list[str], markers: tuple[str, ...]) -> int:
    """Return the index of the first line containing a start marker.

    Args:
        lines: Completion lines.
        markers: Framework start markers.

    Returns:
        Line index, or 0 when no line matches.
    """
    for index, line in enumerate(lines):
        stripped = line.strip()
        if any(marker in stripped for marker in markers):
            return index
    return 0


def _find_end(lines: list[str], markers: tuple[str, ...]) -> int:
    """Return the index of the last line containing an end marker.

    Args:
        lines: Completion lines.
        markers: End markers; a closing brace always counts.

    Returns:
        Line index, or the last index when no line matches.
    """
    for index in range(len(lines) - 1, -1, -1):
        stripped = lines[index].strip()
        if "}" in stripped or any(marker in stripped for marker in markers):
            return index
    return len(lines) - 1
