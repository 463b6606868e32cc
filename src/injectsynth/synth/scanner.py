"""
Structural scanner.

Brace-depth matching over raw source lines. This is not a parser: braces
inside string or character literals and comments are counted like any other
brace, so such inputs can produce wrong spans. Every scan is bounded by the
number of lines, and a block whose depth never returns to zero is reported
as not found.
"""

import re

from injectsynth.synth.model import ClassSpan, SourceText

_CLASS_KEYWORD = re.compile(r"\bclass\b")


def brace_delta(line: str) -> int:
    """Opening minus closing brace characters on one line."""
    return line.count("{") - line.count("}")


def indentation_of(line: str) -> str:
    """Return the whitespace a line starts with."""
    return line[: len(line) - len(line.lstrip())]


def match_closing_brace(source: SourceText, open_line: int) -> int | None:
    """Find the line holding the brace that closes the block opened on ``open_line``.

    Counting starts at depth 0 on ``open_line`` itself, so a block opened
    and closed on the same line ends on that line.

    Returns:
        Index of the closing line, or None if ``open_line`` opens nothing,
        the depth goes negative, or the end of the text is reached first.
    """
    if not 0 <= open_line < len(source) or "{" not in source[open_line]:
        return None

    depth = 0
    for index in range(open_line, len(source)):
        depth += brace_delta(source[index])
        if depth == 0:
            return index
        if depth < 0:
            return None
    return None


def find_block_start(source: SourceText, from_line: int) -> int | None:
    """Nearest line at or before ``from_line`` that is a lone ``{``."""
    for index in range(min(from_line, len(source) - 1), -1, -1):
        if source[index].strip() == "{":
            return index
    return None


def find_enclosing_block_end(source: SourceText, from_line: int) -> int | None:
    """Find the closing-brace line of the block enclosing ``from_line``.

    The block starts at the nearest preceding line that is exactly ``{``
    (depth 1). Scanning forward, each line adds its opening braces and
    subtracts its closing braces; the block ends where the depth is 0.
    """
    start = find_block_start(source, from_line)
    if start is None:
        return None
    return match_closing_brace(source, start)


def is_class_declaration(line: str, base_type: str) -> bool:
    """Check for ``class X : <base_type>`` on a single line."""
    stripped = line.strip()
    if stripped.startswith("//"):
        return False
    return (
        _CLASS_KEYWORD.search(stripped) is not None
        and ":" in stripped
        and re.search(rf"\b{re.escape(base_type)}\b", stripped) is not None
    )


def find_class_declaration(source: SourceText, from_line: int, base_type: str) -> int | None:
    """Scan backward from ``from_line`` for the nearest eligible class declaration."""
    for index in range(min(from_line, len(source) - 1), -1, -1):
        if is_class_declaration(source[index], base_type):
            return index
    return None


def find_class_opening_brace(source: SourceText, declaration_line: int) -> int | None:
    """Line of the class body's opening brace.

    Either the declaration line itself (``class Foo : Bar {``) or the first
    non-blank line after it, which must be a lone ``{``.
    """
    if "{" in source[declaration_line]:
        return declaration_line
    for index in range(declaration_line + 1, len(source)):
        stripped = source[index].strip()
        if not stripped:
            continue
        return index if stripped == "{" else None
    return None


def find_class_span(source: SourceText, field_line: int, base_type: str) -> ClassSpan | None:
    """Locate the eligible class that contains ``field_line``.

    Returns None when no declaration inheriting from ``base_type`` precedes
    the field, when its braces never balance, or when the field lies outside
    the matched body.
    """
    declaration = find_class_declaration(source, field_line, base_type)
    if declaration is None:
        return None

    start = find_class_opening_brace(source, declaration)
    if start is None:
        return None

    end = match_closing_brace(source, start)
    if end is None or not start <= field_line <= end:
        return None
    return ClassSpan(start_line=start, end_line=end)
