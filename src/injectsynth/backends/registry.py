"""
Maps each BackendType to the StructureBackend class that implements it.
"""

from typing import Type

from injectsynth.backends.base import StructureBackend
from injectsynth.backends.text import TextBackend
from injectsynth.backends.tree import TreeBackend
from injectsynth.config.models import BackendType, SynthConfig


class BackendRegistry:
    """Backend classes keyed by the backend type a configuration selects."""

    _backends: dict[BackendType, Type[StructureBackend]] = {
        BackendType.TEXT: TextBackend,
        BackendType.TREE: TreeBackend,
    }

    @classmethod
    def get_backend(
        cls, backend: BackendType, config: SynthConfig | None = None
    ) -> StructureBackend:
        """
        Build the backend for ``backend``, sharing ``config``'s lexical constants.

        Raises:
            ValueError: If no class is registered for ``backend``
        """
        backend_class = cls._backends.get(backend)
        if backend_class is None:
            known = [b.value for b in cls._backends]
            raise ValueError(f"No structure backend for '{backend}'. Known backends: {known}")
        return backend_class(config=config)

    @classmethod
    def register_backend(cls, backend: BackendType, backend_class: Type[StructureBackend]):
        """Bind ``backend`` to ``backend_class``, replacing any earlier binding."""
        if not issubclass(backend_class, StructureBackend):
            raise TypeError(f"{backend_class} must extend StructureBackend")
        cls._backends[backend] = backend_class


def get_backend(config: SynthConfig | None = None) -> StructureBackend:
    """Backend selected by ``config.backend`` (text when no config is given)."""
    config = config or SynthConfig()
    return BackendRegistry.get_backend(config.backend, config)
