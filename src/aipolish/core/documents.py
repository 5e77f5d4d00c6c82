"""Document Protocol and the filesystem-backed implementation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

from aipolish.core.fileutil import atomic_write


@runtime_checkable
class Document(Protocol):
    """Contract for text the processor reads and replaces in full.

    Implementations: FileDocument (local files), in-memory doubles in tests.
    """

    @property
    def name(self) -> str:
        """Display name used in progress and error messages."""
        ...

    def read(self) -> str:
        """Return the full current text."""
        ...

    def write(self, text: str) -> None:
        """Replace the full text."""
        ...


class FileDocument:
    """A UTF-8 text file, replaced atomically on write."""

    def __init__(self, path: Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self._encoding = encoding

    @property
    def name(self) -> str:
        return str(self.path)

    def read(self) -> str:
        # newline="" so CRLF files round-trip unchanged
        with open(self.path, encoding=self._encoding, newline="") as f:
            return f.read()

    def write(self, text: str) -> None:
        # Replace the link target, not the symlink itself
        atomic_write(self.path.resolve(), text, encoding=self._encoding)

    def __repr__(self) -> str:
        return f"FileDocument({str(self.path)!r})"


def open_documents(paths: Iterable[Path]) -> Iterator[FileDocument]:
    """Yield a FileDocument per path, skipping duplicates."""
    seen: set[Path] = set()
    for path in paths:
        resolved = Path(path).resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        yield FileDocument(Path(path))
