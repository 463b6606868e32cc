"""
Core configuration models for injectsynth.

Defines the lexical constants and runtime options using Pydantic for validation.
"""

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BackendType(str, Enum):
    """Structure backends that can locate fields, classes and methods."""

    TEXT = "text"  # Line scanning and brace counting
    TREE = "tree"  # tree-sitter syntax tree


class SynthesisState(str, Enum):
    """Outcome of evaluating the inject action for one field."""

    UNAVAILABLE = "unavailable"
    WOULD_CREATE = "would_create"
    WOULD_UPDATE = "would_update"


# ============================================================================
# Synthesis Configuration
# ============================================================================


class SynthConfig(BaseModel):
    """Root configuration model for injectsynth."""

    marker_annotation: str = Field(
        default="[Inject]", description="Attribute line that marks the injection method"
    )
    method_name: str = Field(
        default="InjectDependencies", description="Reserved name of the injection method"
    )
    method_visibility: str = Field(
        default="private", description="Access modifier written on a synthesized method"
    )
    method_return_type: str = Field(
        default="void", description="Return type written on a synthesized method"
    )
    field_visibility: str = Field(
        default="private", description="Access modifier that makes a field injectable"
    )
    base_type: str = Field(
        default="MonoBehaviour", description="Base type an eligible class must inherit from"
    )
    indent_unit: str = Field(default="    ", description="One level of indentation")
    file_extensions: list[str] = Field(
        default_factory=lambda: [".cs"], description="File extensions the action applies to"
    )
    backend: BackendType = Field(default=BackendType.TEXT, description="Structure backend")

    @field_validator("method_name", "base_type", "field_visibility", "method_visibility")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Validate that lexical constants are plain identifiers."""
        if not _IDENTIFIER.match(v):
            raise ValueError(f"Not a valid identifier: '{v}'")
        return v

    @field_validator("marker_annotation")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        """Validate the marker is a bracketed attribute such as [Inject]."""
        v = v.strip()
        if not (v.startswith("[") and v.endswith("]") and len(v) > 2):
            raise ValueError(f"Marker annotation must look like '[Name]', got '{v}'")
        return v

    @field_validator("indent_unit")
    @classmethod
    def validate_indent(cls, v: str) -> str:
        """Validate the indent unit is non-empty whitespace."""
        if not v or v.strip():
            raise ValueError("indent_unit must be spaces or tabs")
        return v

    @property
    def marker_name(self) -> str:
        """Attribute name without the surrounding brackets."""
        return self.marker_annotation[1:-1].strip()

    def accepts_file(self, file_name: str) -> bool:
        """Check whether a file name has one of the configured extensions."""
        return any(file_name.endswith(ext) for ext in self.file_extensions)
