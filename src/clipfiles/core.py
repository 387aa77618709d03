"""
Core logic for clipfiles package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Set

from .content import is_text
from .ignore import IgnorePatterns, should_ignore_file
from .walk import WalkEntry, walk

logger = logging.getLogger(__name__)

Walker = Callable[[Path], Iterable[WalkEntry]]
Classifier = Callable[[bytes], bool]


@dataclass(frozen=True)
class AcceptedFile:
    relative_path: str
    content: str


def decode_lossy(data: bytes) -> str:
    """Decode UTF-8, replacing invalid sequences with U+FFFD."""
    return data.decode("utf-8", errors="replace")


def relative_posix(path: Path, root: Path) -> str:
    """Return *path* relative to *root* with forward slashes.

    Undecodable bytes in file names (surrogate escapes from the OS) become
    U+FFFD so the result is always encodable. Raises ValueError if *path* is
    not under *root*.
    """
    rel = Path(path).relative_to(root).as_posix()
    return rel.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def collect_files(
    root: Path,
    patterns: IgnorePatterns,
    walker: Walker = walk,
    classify: Classifier = is_text,
) -> Iterator[AcceptedFile]:
    """Yield every text file under *root* that survives *patterns*.

    Failures are contained per entry: they are logged and the entry skipped.
    Ignored and binary files are skipped without a warning.
    """
    root = Path(root)
    for entry in walker(root):
        if entry.error is not None:
            logger.warning("Error accessing entry: %s", entry.error)
            continue

        if not entry.is_file:
            continue

        if should_ignore_file(entry.path, root, patterns):
            logger.debug("Ignoring %s", entry.path)
            continue

        try:
            raw = Path(entry.path).read_bytes()
        except OSError as e:
            logger.warning("Error reading file %s: %s", entry.path, e)
            continue

        if not classify(raw):
            logger.debug("Skipping non-text file %s", entry.path)
            continue

        text = decode_lossy(raw)

        try:
            rel = relative_posix(entry.path, root)
        except ValueError as e:
            logger.warning("Error getting relative path: %s", e)
            continue

        yield AcceptedFile(rel, text)


# Output assembly
def format_record(file: AcceptedFile) -> str:
    return f"---\nfile: {file.relative_path}\n---\n\n{file.content}\n\n"


@dataclass
class OutputDocument:
    """Formatted records in encounter order, plus the set of paths added."""

    parts: List[str] = field(default_factory=list)
    paths: Set[str] = field(default_factory=set)

    def add(self, file: AcceptedFile) -> None:
        self.parts.append(format_record(file))
        self.paths.add(file.relative_path)

    @property
    def text(self) -> str:
        return "".join(self.parts)

    def __len__(self) -> int:
        return len(self.parts)


def build_document(files: Iterable[AcceptedFile]) -> OutputDocument:
    doc = OutputDocument()
    for f in files:
        doc.add(f)
    return doc
