"""
Method merger: extends an existing injection method with one more
parameter and one more assignment.

The two edits are guarded independently, so merging a field that is
already fully injected returns the input SourceText object unchanged.
"""

from injectsynth.synth.locator import assigns_field, parameter_bounds
from injectsynth.synth.model import FieldRef, InjectionMethod, SourceText, SynthesisError
from injectsynth.synth.naming import parameter_name_for
from injectsynth.synth.scanner import indentation_of


def add_parameter(signature: str, declared_type: str, parameter_name: str) -> str:
    """Append ``<type> <name>`` to the parameter list of a one-line signature."""
    bounds = parameter_bounds(signature)
    if bounds is None:
        raise SynthesisError(f"No parameter list on signature line: '{signature.strip()}'")

    open_paren, close_paren = bounds
    current = signature[open_paren + 1 : close_paren].strip()
    new_parameter = f"{declared_type} {parameter_name}"
    updated = f"{current}, {new_parameter}" if current else new_parameter
    return signature[: open_paren + 1] + updated + signature[close_paren:]


def has_assignment(source: SourceText, method: InjectionMethod, field_name: str) -> bool:
    """Check whether the method body already assigns ``field_name``."""
    return any(
        assigns_field(source[index], field_name)
        for index in range(method.body_start_line, method.body_end_line)
        if index != method.signature_line
    )


def statement_indentation(source: SourceText, method: InjectionMethod, indent_unit: str) -> str:
    """Indentation of the body's first statement, or signature plus one unit if empty."""
    for index in range(method.body_start_line + 1, method.closing_brace_line):
        if source[index].strip():
            return indentation_of(source[index])
    return indentation_of(source[method.signature_line]) + indent_unit


def merge(
    method: InjectionMethod,
    field_ref: FieldRef,
    source: SourceText,
    indent_unit: str = "    ",
) -> SourceText:
    """Add the field's parameter and assignment to ``method`` where missing.

    Raises:
        SynthesisError: The signature has no parameter list on its line, or
            the body opens and closes on a single line.
    """
    parameter = parameter_name_for(field_ref.name)
    lines = list(source.lines)
    changed = False

    if parameter not in method.existing_parameter_names:
        lines[method.signature_line] = add_parameter(
            source[method.signature_line], field_ref.declared_type, parameter
        )
        changed = True

    if not has_assignment(source, method, field_ref.name):
        if method.closing_brace_line <= method.body_start_line:
            raise SynthesisError("Cannot add a statement to a single-line method body")
        indent = statement_indentation(source, method, indent_unit)
        lines.insert(method.closing_brace_line, f"{indent}{field_ref.name} = {parameter};")
        changed = True

    return source.replace_lines(lines) if changed else source
