"""
Ignore rules for clipfiles.

A rule without glob characters is an exact name; anything containing ``*``,
``?`` or ``[`` is compiled as a glob. Rules are checked against the file name,
every ancestor directory name, the full relative path and each relative path
prefix, so one list can say "this file anywhere", "this directory anywhere"
and "this exact nested path".
"""

from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .errors import ConfigFileError, InvalidPatternError

logger = logging.getLogger(__name__)

# Defaults (extendable via --ignore / --config)
DEFAULT_PATTERNS: List[str] = [
    "yarn.lock",
    "Cargo.lock",
    "pnpm-lock.yaml",
    "package-lock.json",
    ".DS_Store",
    "thumbs.db",
    ".env",
    ".env.local",
    ".env.development",
    ".env.production",
    "node_modules",
    "target",
    "dist",
    "build",
    "LICENSE.md",
    "LICENSE",
]

_GLOB_CHARS = ("*", "?", "[")


def is_glob(pattern: str) -> bool:
    return any(ch in pattern for ch in _GLOB_CHARS)


def _validate_glob(pattern: str) -> None:
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            # a leading ']' is a member of the class, not its end
            if j < n and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                raise InvalidPatternError(f"unterminated character class at position {i}")
            i = end + 1
        elif ch == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            if j - i > 2:
                raise InvalidPatternError(
                    f"wildcards are either regular '*' or recursive '**' (position {i})"
                )
            if j - i == 2:
                starts_component = i == 0 or pattern[i - 1] == "/"
                ends_component = j == n or pattern[j] == "/"
                if not (starts_component and ends_component):
                    raise InvalidPatternError(
                        f"recursive wildcards must form a single path component (position {i})"
                    )
            i = j
        else:
            i += 1


@dataclass(frozen=True)
class GlobPattern:
    """A validated, compiled glob."""

    source: str
    regex: re.Pattern

    def matches(self, name: str) -> bool:
        return self.regex.match(name) is not None


def compile_glob(pattern: str) -> GlobPattern:
    """Compile *pattern*, raising :class:`InvalidPatternError` if it is malformed."""
    _validate_glob(pattern)
    return GlobPattern(pattern, re.compile(fnmatch.translate(pattern)))


@dataclass(frozen=True)
class IgnorePatterns:
    """Exact names plus compiled globs. Build with :meth:`build`."""

    exact_matches: FrozenSet[str] = frozenset()
    glob_patterns: Tuple[GlobPattern, ...] = ()

    @classmethod
    def build(
        cls,
        extra: Iterable[str] = (),
        defaults: Optional[Iterable[str]] = None,
    ) -> "IgnorePatterns":
        """Combine *defaults* (``DEFAULT_PATTERNS`` if omitted) with *extra*.

        Malformed globs are logged and dropped; they never abort the build.
        """
        exact = set()
        globs: List[GlobPattern] = []
        sources = list(DEFAULT_PATTERNS if defaults is None else defaults)
        sources.extend(p.strip() for p in extra)

        for pattern in sources:
            if not pattern:
                continue
            if is_glob(pattern):
                try:
                    globs.append(compile_glob(pattern))
                except InvalidPatternError as e:
                    logger.warning("Invalid glob pattern '%s': %s", pattern, e)
            else:
                exact.add(pattern)

        return cls(frozenset(exact), tuple(globs))

    def matches(self, name: str) -> bool:
        if name in self.exact_matches:
            return True
        return any(g.matches(name) for g in self.glob_patterns)


def should_ignore_file(path: Path, root: Path, patterns: IgnorePatterns) -> bool:
    """Return True if *path* (under *root*) is excluded by *patterns*."""
    path = Path(path)
    root = Path(root)

    if patterns.matches(path.name):
        return True

    for ancestor in path.parents:
        if ancestor == root:
            break
        if ancestor.name and patterns.matches(ancestor.name):
            return True

    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return False

    if patterns.matches("/".join(parts)):
        return True

    for i in range(1, len(parts) + 1):
        if patterns.matches("/".join(parts[:i])):
            return True

    return False


def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")
