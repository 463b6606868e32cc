"""
Base structure backend interface.

Every backend (text scanning, syntax tree) must implement this interface and
return the shared data model, so the synthesizer and merger never care which
input representation located the structure.
"""

from abc import ABC, abstractmethod

from injectsynth.config.models import SynthConfig
from injectsynth.synth.model import ClassSpan, FieldRef, InjectionMethod, SourceText


class StructureBackend(ABC):
    """
    Abstract base class for structure backends.

    Each backend provides:
    - Field location and enumeration
    - Containing class location
    - Injection method location
    """

    def __init__(self, config: SynthConfig | None = None):
        self.config = config or SynthConfig()

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name (e.g., 'text', 'tree')."""
        pass

    # =========================================================================
    # Fields
    # =========================================================================

    @abstractmethod
    def locate_field(self, source: SourceText, field_name: str) -> FieldRef | None:
        """
        Find the declaration of a private field.

        Args:
            source: Snapshot of the file
            field_name: Declared name of the field

        Returns:
            FieldRef for the first matching declaration, or None
        """
        pass

    @abstractmethod
    def list_fields(self, source: SourceText) -> list[FieldRef]:
        """
        Enumerate private field declarations in document order.

        Args:
            source: Snapshot of the file

        Returns:
            List of FieldRef objects
        """
        pass

    # =========================================================================
    # Classes and methods
    # =========================================================================

    @abstractmethod
    def locate_class(self, source: SourceText, field_ref: FieldRef) -> ClassSpan | None:
        """
        Find the body of the eligible class containing a field.

        Args:
            source: Snapshot of the file
            field_ref: The located field

        Returns:
            ClassSpan, or None if there is no eligible class or it is malformed
        """
        pass

    @abstractmethod
    def find_injection_method(
        self, source: SourceText, span: ClassSpan | None = None
    ) -> InjectionMethod | None:
        """
        Find the marker-annotated injection method.

        Args:
            source: Snapshot of the file
            span: Restrict the search to this class body

        Returns:
            InjectionMethod, or None if the class has none

        Raises:
            MalformedSourceError: The method exists but its body is malformed
        """
        pass
