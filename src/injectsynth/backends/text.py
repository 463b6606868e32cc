"""
Text structure backend.

Line scanning and brace counting; no parser is involved.
"""

from injectsynth.backends.base import StructureBackend
from injectsynth.synth.locator import find_injection_method, list_fields, locate_field
from injectsynth.synth.model import ClassSpan, FieldRef, InjectionMethod, SourceText
from injectsynth.synth.scanner import find_class_span


class TextBackend(StructureBackend):
    """Structure backend over raw lines."""

    @property
    def backend_name(self) -> str:
        return "text"

    def locate_field(self, source: SourceText, field_name: str) -> FieldRef | None:
        return locate_field(source, field_name, self.config.field_visibility)

    def list_fields(self, source: SourceText) -> list[FieldRef]:
        return list_fields(source, self.config.field_visibility)

    def locate_class(self, source: SourceText, field_ref: FieldRef) -> ClassSpan | None:
        return find_class_span(source, field_ref.line_index, self.config.base_type)

    def find_injection_method(
        self, source: SourceText, span: ClassSpan | None = None
    ) -> InjectionMethod | None:
        return find_injection_method(
            source,
            marker=self.config.marker_annotation,
            method_name=self.config.method_name,
            span=span,
        )
