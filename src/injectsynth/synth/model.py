"""
Data model shared by every structure backend.

All values are recomputed from a SourceText snapshot on each call and are
discarded once the new text has been produced.
"""

from dataclasses import dataclass, field

from injectsynth.config.models import SynthesisState


class SynthesisError(Exception):
    """Raised when an edit cannot be applied to the source text."""

    pass


class MalformedSourceError(SynthesisError):
    """Raised when braces never balance while scanning a block."""

    pass


@dataclass(frozen=True)
class SourceText:
    """An immutable, 0-indexed sequence of source lines."""

    lines: tuple[str, ...]
    newline: str = "\n"

    @classmethod
    def from_text(cls, text: str) -> "SourceText":
        newline = "\r\n" if "\r\n" in text else "\n"
        return cls(tuple(text.split(newline)), newline)

    def to_text(self) -> str:
        return self.newline.join(self.lines)

    def replace_lines(self, lines: list[str]) -> "SourceText":
        """Return a new SourceText with the same newline convention."""
        return SourceText(tuple(lines), self.newline)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> str:
        return self.lines[index]


@dataclass(frozen=True)
class FieldRef:
    """A private field declaration picked out of a single line."""

    name: str
    declared_type: str
    line_index: int


@dataclass(frozen=True)
class ClassSpan:
    """Lines holding a class body's opening and matching closing brace."""

    start_line: int
    end_line: int


@dataclass(frozen=True)
class InjectionMethod:
    """An existing marker-annotated injection method.

    ``body_end_line`` is exclusive: it points one past the closing brace.
    """

    signature_line: int
    body_start_line: int
    body_end_line: int
    existing_parameter_names: frozenset[str] = field(default_factory=frozenset)

    @property
    def closing_brace_line(self) -> int:
        return self.body_end_line - 1


@dataclass
class SynthesisPlan:
    """The create-vs-update decision for one field, taken before any mutation."""

    state: SynthesisState
    field_name: str
    reason: str
    field_ref: FieldRef | None = None
    class_span: ClassSpan | None = None
    method: InjectionMethod | None = None
    parameter_name: str | None = None

    @property
    def is_available(self) -> bool:
        return self.state != SynthesisState.UNAVAILABLE


@dataclass
class SynthesisResult:
    """Result of applying the inject action: new text plus a change summary."""

    state: SynthesisState
    source: SourceText
    field_name: str
    reason: str
    declared_type: str | None = None
    parameter_name: str | None = None

    @property
    def changed(self) -> bool:
        return self.state != SynthesisState.UNAVAILABLE

    @property
    def created(self) -> bool:
        return self.state == SynthesisState.WOULD_CREATE

    def summary(self, method_name: str = "InjectDependencies") -> str:
        """Human-readable description of what changed."""
        if not self.changed:
            return f"Cannot inject '{self.field_name}': {self.reason}"
        action = "Created" if self.created else "Updated"
        return (
            f"{action} {method_name} method for '{self.field_name}'\n"
            f"Field: {self.field_name}\n"
            f"Type: {self.declared_type}\n"
            f"Parameter: {self.parameter_name}"
        )
