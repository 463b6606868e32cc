"""
Host documents.

A document hands out immutable SourceText snapshots for analysis and accepts
a replacement text as one transaction. Replacements run under a process-wide
write lock so that no reader ever observes a partial edit; analysis may run
on any thread against a snapshot.
"""

import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from injectsynth.synth.model import SourceText

logger = logging.getLogger(__name__)

_WRITE_LOCK = threading.RLock()


@contextmanager
def write_action() -> Iterator[None]:
    """Hold exclusive write access for the duration of the block."""
    with _WRITE_LOCK:
        yield


def field_name_at_line(line: str, visibility: str = "private") -> str | None:
    """Field declared on a caret line, e.g. ``private IFoo _foo;`` -> ``_foo``.

    Returns None when the line is not a field declaration with the given
    visibility modifier.
    """
    stripped = line.strip()
    head = stripped.split("=", 1)[0]
    if not re.search(rf"\b{visibility}\b", head) or "(" in head or "=>" in stripped:
        return None
    match = re.search(r"([A-Za-z_]\w*)\s*(?:;|=(?![=>]))", stripped)
    return match.group(1) if match else None


class HostDocument(ABC):
    """Abstract document the inject action reads from and writes to."""

    @property
    @abstractmethod
    def name(self) -> str:
        """File name, used to check the configured extensions."""
        pass

    @abstractmethod
    def get_source_text(self) -> SourceText:
        """Return a snapshot of the current content."""
        pass

    @abstractmethod
    def get_caret_field_context(self) -> str | None:
        """Return the name of the field under the caret, if any."""
        pass

    @abstractmethod
    def apply_transaction(self, new_text: SourceText) -> None:
        """Replace the whole content in one atomic step."""
        pass


class InMemoryDocument(HostDocument):
    """Document held in memory."""

    def __init__(self, text: str, name: str = "Untitled.cs", field_name: str | None = None):
        self._text = text
        self._name = name
        self._field_name = field_name

    @property
    def name(self) -> str:
        return self._name

    @property
    def text(self) -> str:
        return self._text

    def get_source_text(self) -> SourceText:
        return SourceText.from_text(self._text)

    def get_caret_field_context(self) -> str | None:
        return self._field_name

    def apply_transaction(self, new_text: SourceText) -> None:
        with write_action():
            self._text = new_text.to_text()


class FileDocument(HostDocument):
    """Document backed by a file on disk.

    The caret is given either as an explicit field name or as a 1-based
    line number, which is mapped to the field declared on that line.
    """

    def __init__(
        self,
        path: Path,
        field_name: str | None = None,
        caret_line: int | None = None,
        visibility: str = "private",
        encoding: str = "utf-8",
    ):
        self.path = Path(path)
        self.field_name = field_name
        self.caret_line = caret_line
        self.visibility = visibility
        self.encoding = encoding

    @property
    def name(self) -> str:
        return self.path.name

    def get_source_text(self) -> SourceText:
        # newline="" keeps \r\n so the snapshot round-trips byte for byte
        with open(self.path, encoding=self.encoding, newline="") as f:
            return SourceText.from_text(f.read())

    def get_caret_field_context(self) -> str | None:
        if self.field_name:
            return self.field_name
        if self.caret_line is None:
            return None

        source = self.get_source_text()
        index = self.caret_line - 1
        if not 0 <= index < len(source):
            return None
        return field_name_at_line(source[index], self.visibility)

    def apply_transaction(self, new_text: SourceText) -> None:
        """Write to a temporary file next to the target, then swap it in."""
        with write_action():
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                    f.write(new_text.to_text())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        logger.debug(f"Wrote {len(new_text)} lines to {self.path}")
