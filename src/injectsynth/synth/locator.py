"""
Text locators for fields and injection methods.

Works line by line over a SourceText snapshot, with brace matching from
``scanner``. Multi-line declarations and signatures are not recognised.
"""

import re

from injectsynth.synth.model import (
    ClassSpan,
    FieldRef,
    InjectionMethod,
    MalformedSourceError,
    SourceText,
)
from injectsynth.synth.scanner import match_closing_brace

# Identifier with optional dotted qualifier, generic arguments, array ranks
# and nullable marker: Foo, Sys.Foo, List<int>, Dictionary<string, Foo>, int[], Foo?
_TYPE = r"[A-Za-z_][\w.]*(?:<[^;=()]*>)?(?:\[[\s,]*\])*\??"


def _token(name: str) -> str:
    return rf"(?<![\w]){re.escape(name)}(?![\w])"


def _field_pattern(visibility: str, field_name: str) -> re.Pattern[str]:
    return re.compile(
        rf"\b{visibility}\s+(?P<type>{_TYPE})\s+{_token(field_name)}\s*(?:;|=(?![=>]))"
    )


def _any_field_pattern(visibility: str) -> re.Pattern[str]:
    return re.compile(
        rf"\b{visibility}\s+(?P<type>{_TYPE})\s+(?P<name>[A-Za-z_]\w*)\s*(?:;|=(?![=>]))"
    )


def _is_comment(stripped: str) -> bool:
    return stripped.startswith(("//", "/*", "*"))


# =========================================================================
# Field Locator
# =========================================================================


def is_field_declaration(line: str, field_name: str, visibility: str = "private") -> bool:
    """Check the cheap line filter: modifier, name token and ``;`` or ``=``."""
    stripped = line.strip()
    if not stripped or _is_comment(stripped):
        return False
    return (
        re.search(rf"\b{visibility}\b", stripped) is not None
        and re.search(_token(field_name), stripped) is not None
        and (";" in stripped or "=" in stripped)
    )


def locate_field(
    source: SourceText, field_name: str, visibility: str = "private"
) -> FieldRef | None:
    """Find the first declaration line of ``field_name``.

    A line qualifies when it passes ``is_field_declaration``, the type
    between the modifier and the name can be extracted, and the name is
    followed by ``;`` or an initializer. Lines carrying extra modifiers
    (``readonly``, ``static``) and properties (``=>``, ``{ get; }``) are skipped.
    """
    if not field_name:
        return None

    pattern = _field_pattern(visibility, field_name)
    for index, line in enumerate(source.lines):
        if not is_field_declaration(line, field_name, visibility):
            continue
        match = pattern.search(line)
        if match:
            return FieldRef(name=field_name, declared_type=match.group("type"), line_index=index)
    return None


def list_fields(source: SourceText, visibility: str = "private") -> list[FieldRef]:
    """Enumerate every single-line private field declaration, top to bottom."""
    pattern = _any_field_pattern(visibility)
    fields: list[FieldRef] = []
    for index, line in enumerate(source.lines):
        stripped = line.strip()
        if _is_comment(stripped):
            continue
        match = pattern.search(stripped)
        if match:
            fields.append(
                FieldRef(name=match.group("name"), declared_type=match.group("type"), line_index=index)
            )
    return fields


# =========================================================================
# Injection Method Locator
# =========================================================================


def split_parameters(parameter_text: str) -> list[str]:
    """Split a parameter list on commas that are not nested in <>, () or []."""
    entries: list[str] = []
    depth = 0
    current: list[str] = []
    for char in parameter_text:
        if char in "<([":
            depth += 1
        elif char in ">)]":
            depth -= 1
        if char == "," and depth == 0:
            entries.append("".join(current))
            current = []
        else:
            current.append(char)
    entries.append("".join(current))
    return [entry.strip() for entry in entries if entry.strip()]


def parameter_bounds(signature: str) -> tuple[int, int] | None:
    """Indices of the first ``(`` and the last ``)`` on a signature line."""
    open_paren = signature.find("(")
    close_paren = signature.rfind(")")
    if open_paren == -1 or close_paren < open_paren:
        return None
    return open_paren, close_paren


def parameter_names(signature: str) -> frozenset[str]:
    """Names declared in a signature: the last token of each entry, defaults dropped."""
    bounds = parameter_bounds(signature)
    if bounds is None:
        return frozenset()

    names = set()
    for entry in split_parameters(signature[bounds[0] + 1 : bounds[1]]):
        declaration = entry.split("=", 1)[0].split()
        if declaration:
            names.add(declaration[-1])
    return frozenset(names)


def _find_body_start(source: SourceText, signature_line: int, last_line: int) -> int | None:
    """Line opening the method body, stopping at a ``;`` line or ``last_line``."""
    if "{" in source[signature_line]:
        return signature_line
    for index in range(signature_line, min(last_line, len(source) - 1) + 1):
        stripped = source[index].strip()
        if stripped == "{":
            return index
        if stripped.endswith(";") or "{" in stripped:
            return None
    return None


def find_injection_method(
    source: SourceText,
    marker: str = "[Inject]",
    method_name: str = "InjectDependencies",
    span: ClassSpan | None = None,
) -> InjectionMethod | None:
    """Find the marker-annotated injection method, optionally inside ``span``.

    Raises:
        MalformedSourceError: The method was found but it has no block body
            or its body never balances.
    """
    first, last = (span.start_line, span.end_line) if span else (0, len(source) - 1)
    name_pattern = re.compile(_token(method_name))

    for index in range(first, min(last, len(source) - 1)):
        if source[index].strip() != marker:
            continue
        signature_line = index + 1
        if not name_pattern.search(source[signature_line]):
            continue

        body_start = _find_body_start(source, signature_line, last)
        if body_start is None:
            raise MalformedSourceError(
                f"{method_name} declared on line {signature_line + 1} has no block body"
            )

        closing = match_closing_brace(source, body_start)
        if closing is None:
            raise MalformedSourceError(
                f"Body of {method_name} opened on line {body_start + 1} never closes"
            )

        return InjectionMethod(
            signature_line=signature_line,
            body_start_line=body_start,
            body_end_line=closing + 1,
            existing_parameter_names=parameter_names(source[signature_line]),
        )
    return None


def assigns_field(line: str, field_name: str) -> bool:
    """Check for ``<field> =`` (or ``this.<field> =``), not ``==``."""
    return re.search(rf"{_token(field_name)}\s*=(?![=>])", line) is not None
