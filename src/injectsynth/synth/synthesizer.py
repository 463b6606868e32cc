"""
Method synthesizer: builds a new injection method and places it as the last
member of the containing class.
"""

from injectsynth.config.models import SynthConfig
from injectsynth.synth.model import ClassSpan, FieldRef, SourceText, SynthesisError
from injectsynth.synth.naming import parameter_name_for
from injectsynth.synth.scanner import indentation_of

VISIBILITY_KEYWORDS = ("private", "public", "protected", "internal")


def infer_indentation(
    source: SourceText,
    field_ref: FieldRef | None,
    indent_unit: str,
    span: ClassSpan | None = None,
) -> str:
    """Member indentation for the new method.

    Uses the field's own declaration line, then the first line (inside
    ``span`` when given) that starts with a visibility keyword, then a
    single indent unit.
    """
    if field_ref is not None and 0 <= field_ref.line_index < len(source):
        return indentation_of(source[field_ref.line_index])

    first, last = (span.start_line, span.end_line + 1) if span else (0, len(source))
    for line in source.lines[first:last]:
        if line.strip().startswith(VISIBILITY_KEYWORDS):
            return indentation_of(line)

    return indent_unit


def synthesize(
    field_ref: FieldRef,
    class_span: ClassSpan,
    source: SourceText,
    config: SynthConfig | None = None,
) -> list[str]:
    """Build the lines of a new single-parameter injection method."""
    config = config or SynthConfig()
    indent = infer_indentation(source, field_ref, config.indent_unit, class_span)
    parameter = parameter_name_for(field_ref.name)

    return [
        "",
        f"{indent}{config.marker_annotation}",
        f"{indent}{config.method_visibility} {config.method_return_type} "
        f"{config.method_name}({field_ref.declared_type} {parameter})",
        f"{indent}{{",
        f"{indent}{config.indent_unit}{field_ref.name} = {parameter};",
        f"{indent}}}",
    ]


def closing_brace_stands_alone(source: SourceText, class_span: ClassSpan) -> bool:
    """Check that nothing but the class body's closing brace starts its line.

    A class that opens and closes on one line, or whose last member shares
    the closing line, has no line a new member can be placed before.
    """
    return (
        class_span.end_line > class_span.start_line
        and source[class_span.end_line].strip().startswith("}")
    )


def insert_method(source: SourceText, class_span: ClassSpan, method_lines: list[str]) -> SourceText:
    """Insert ``method_lines`` right before the class's closing-brace line.

    Raises:
        SynthesisError: The closing brace shares its line with class members.
    """
    if not closing_brace_stands_alone(source, class_span):
        raise SynthesisError(
            f"Closing brace of the class on line {class_span.end_line + 1} is not on its own line"
        )
    lines = list(source.lines)
    lines[class_span.end_line : class_span.end_line] = method_lines
    return source.replace_lines(lines)
