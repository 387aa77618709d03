"""
Directory walking that honours ``.gitignore`` and ``.ignore`` files.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILES: Tuple[str, ...] = (".gitignore", ".ignore")

# (directory the rules are relative to, compiled rules), outermost first
_Layer = Tuple[Path, "pathspec.GitIgnoreSpec"]


@dataclass(frozen=True)
class WalkEntry:
    """One item produced by :func:`walk`.

    ``error`` is set when the entry could not be listed or stat-ed; such
    entries are never files.
    """

    path: Path
    is_file: bool
    error: Optional[OSError] = None


def _read_spec(path: Path) -> Optional["pathspec.GitIgnoreSpec"]:
    if not path.is_file():
        return None
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            lines = fh.read().splitlines()
    except OSError as e:
        logger.warning("Could not read ignore file %s: %s", path, e)
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def load_gitignore(directory: Path) -> List["pathspec.GitIgnoreSpec"]:
    """Compile the ignore files that live directly in *directory*."""
    specs = []
    for name in IGNORE_FILES:
        spec = _read_spec(directory / name)
        if spec is not None:
            specs.append(spec)
    return specs


def find_repo_top(directory: Path) -> Optional[Path]:
    """Return the closest directory at or above *directory* holding ``.git``."""
    current = Path(os.path.abspath(directory))
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def _parent_layers(root: Path) -> List[_Layer]:
    top = find_repo_top(root)
    if top is None:
        return []

    layers: List[_Layer] = []
    exclude = _read_spec(top / ".git" / "info" / "exclude")
    if exclude is not None:
        layers.append((top, exclude))

    # ignore files between the repo top and root; root's own are read by the walk
    current = Path(os.path.abspath(root))
    parents = [p for p in current.parents if p == top or top in p.parents]
    for directory in reversed(parents):
        layers.extend((directory, spec) for spec in load_gitignore(directory))
    return layers


def _is_ignored(path: Path, is_dir: bool, layers: List[_Layer]) -> bool:
    # deepest ignore file with a matching rule decides, so a nested
    # "!name" can re-include what a parent excluded
    for base, spec in reversed(layers):
        rel = Path(os.path.relpath(path, base)).as_posix()
        if is_dir:
            rel += "/"
        include = spec.check_file(rel).include
        if include is not None:
            return include
    return False


def walk(root: Path, hidden: bool = False) -> Iterator[WalkEntry]:
    """Yield the regular files under *root*, depth first, sorted by name.

    Hidden entries are skipped unless *hidden* is set. Ignore files in
    *root*, below it, and above it up to the enclosing git repository are
    honoured; the deepest matching rule wins and an ignored directory is not
    descended into. Listing or stat failures are yielded as error entries and
    the walk carries on.
    """
    root = Path(root)
    yield from _walk_dir(root, _parent_layers(root), hidden)


def _walk_dir(directory: Path, layers: List[_Layer], hidden: bool) -> Iterator[WalkEntry]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        yield WalkEntry(directory, False, e)
        return

    layers = layers + [(directory, spec) for spec in load_gitignore(directory)]

    for name in names:
        if not hidden and name.startswith("."):
            continue
        path = directory / name
        try:
            mode = path.lstat().st_mode
        except OSError as e:
            yield WalkEntry(path, False, e)
            continue

        is_dir = stat.S_ISDIR(mode)
        if _is_ignored(path, is_dir, layers):
            logger.debug("Skipping %s (ignore file)", path)
            continue

        if is_dir:
            yield from _walk_dir(path, layers, hidden)
        else:
            yield WalkEntry(path, stat.S_ISREG(mode))
