"""
Pattern-based file discovery for batch archiving.

This module resolves a glob-style pattern into the ordered list of regular
files to archive. Directories are walked one path component at a time with
entries visited in sorted order, so the same tree and pattern always give
the same list.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
from colored_logger import get_colored_logger

from .errors import EnumerationError, PatternError
from .models import FileEntry

logger = get_colored_logger(__name__)

MAGIC_CHARS = "*?["
RECURSIVE_WILDCARD = "**"


@dataclass(frozen=True)
class MatchOptions:
    """Matching switches for glob patterns."""

    case_sensitive: bool = True
    require_literal_separator: bool = False
    require_literal_leading_dot: bool = False


def has_magic(text: str) -> bool:
    return any(char in text for char in MAGIC_CHARS)


def _translate_class(pattern: str, start: int, exclude_separator: bool) -> Tuple[str, int]:
    """Translate the ``[...]`` class opening at ``start``; return (regex, next index)."""
    i = start + 1
    negated = i < len(pattern) and pattern[i] in "!^"
    if negated:
        i += 1

    members: List[str] = []
    first = True
    while i < len(pattern) and (pattern[i] != "]" or first):
        first = False
        if i + 2 < len(pattern) and pattern[i + 1] == "-" and pattern[i + 2] != "]":
            low, high = pattern[i], pattern[i + 2]
            if low > high:
                raise PatternError(pattern, f"invalid range {low}-{high}")
            members.append(f"{re.escape(low)}-{re.escape(high)}")
            i += 3
        else:
            members.append(re.escape(pattern[i]))
            i += 1

    if i >= len(pattern):
        raise PatternError(pattern, "unclosed character class")

    body = "".join(members)
    if negated:
        separator = "/" if exclude_separator else ""
        return f"[^{separator}{body}]", i + 1
    if exclude_separator:
        return f"(?!/)[{body}]", i + 1
    return f"[{body}]", i + 1


def translate(pattern: str, options: MatchOptions, within_component: bool = False) -> str:
    """
    Translate a glob pattern into a regular expression source string.

    Args:
        pattern: Glob pattern using ``/`` as separator
        options: Matching switches
        within_component: Treat ``pattern`` as one path component, as the
            directory walker does; wildcards then never match ``/``

    Raises:
        PatternError: If the pattern is malformed
    """
    literal_separator = within_component or options.require_literal_separator
    any_char = "[^/]" if literal_separator else "."
    hidden_guard = r"(?!\.)" if options.require_literal_leading_dot else ""

    parts: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        at_component_start = i == 0 or pattern[i - 1] == "/"

        if char == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            run = j - i
            if run > 2:
                raise PatternError(pattern, "wildcards are either `*` or `**`")
            if run == 2:
                if within_component or not at_component_start or (j < n and pattern[j] != "/"):
                    raise PatternError(
                        pattern, "recursive wildcards must form a single path component"
                    )
                component = f"{hidden_guard}[^/]*"
                if j == n:
                    parts.append(f"{component}(?:/{component})*")
                    i = j
                else:
                    parts.append(f"(?:{component}/)*")
                    i = j + 1
                continue
            if at_component_start:
                parts.append(hidden_guard)
            parts.append(f"{any_char}*")
            i = j
        elif char == "?":
            if at_component_start:
                parts.append(hidden_guard)
            parts.append(any_char)
            i += 1
        elif char == "[":
            if at_component_start:
                parts.append(hidden_guard)
            regex, i = _translate_class(pattern, i, literal_separator)
            parts.append(regex)
        else:
            parts.append(re.escape(char))
            i += 1

    return "".join(parts)


class GlobPattern:
    """A compiled glob pattern split into its literal base and walkable components."""

    def __init__(self, pattern: str, options: Optional[MatchOptions] = None):
        if not pattern:
            raise PatternError(pattern, "pattern is empty")

        self.options = options or MatchOptions()
        self.flags = 0 if self.options.case_sensitive else re.IGNORECASE
        self.pattern = pattern.replace(os.sep, "/") if os.sep != "/" else pattern

        self._regex = re.compile(
            translate(self.pattern, self.options) + r"\Z", self.flags
        )
        self.base, self.components = self._split()
        # a trailing separator selects directories, which are never returned
        self.directories_only = self.pattern.endswith("/")

    def _split(self) -> Tuple[str, List[Tuple[str, Optional["re.Pattern"]]]]:
        raw = self.pattern.split("/")
        first_magic = next(
            (index for index, part in enumerate(raw) if has_magic(part)), len(raw)
        )

        base = "/".join(raw[:first_magic])
        if not base and self.pattern.startswith("/"):
            base = "/"

        components = []
        for part in raw[first_magic:]:
            if not part:
                continue
            if part == RECURSIVE_WILDCARD or not has_magic(part):
                components.append((part, None))
            else:
                regex = translate(part, self.options, within_component=True)
                components.append((part, re.compile(regex + r"\Z", self.flags)))
        return base, components

    @property
    def is_literal(self) -> bool:
        return not self.components

    def matches(self, path: str) -> bool:
        """Match a whole path string; here ``*`` crosses ``/`` unless literal separators are required."""
        normalized = path.replace(os.sep, "/") if os.sep != "/" else path
        return self._regex.match(normalized) is not None


class FileStats:
    """Container for file discovery statistics."""

    def __init__(self):
        self.total_files = 0
        self.total_size = 0

    def add_file(self, file_size: int) -> None:
        self.total_files += 1
        self.total_size += file_size

    def to_dict(self) -> Dict[str, Any]:
        return {"total_files": self.total_files, "total_size": self.total_size}


class PatternFileScanner:
    """Resolves a pattern into an ordered list of existing regular files."""

    def __init__(self, options: Optional[MatchOptions] = None):
        self.options = options or MatchOptions()

    def _is_hidden(self, name: str) -> bool:
        return self.options.require_literal_leading_dot and name.startswith(".")

    def _list_directory(self, directory: Path) -> List[Path]:
        try:
            return sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            raise EnumerationError(f"Cannot read directory {directory}: {e}") from e

    def _walk(self, directory: Path, components, results: List[Path]) -> None:
        text, regex = components[0]
        rest = components[1:]

        if text == RECURSIVE_WILDCARD:
            self._walk_recursive(directory, rest, results)
            return

        if regex is None:
            child = directory / text
            if rest:
                if child.is_dir():
                    self._walk(child, rest, results)
            elif child.is_file():
                results.append(child)
            return

        for entry in self._list_directory(directory):
            if not regex.match(entry.name):
                continue
            if rest:
                if entry.is_dir():
                    self._walk(entry, rest, results)
            elif entry.is_file():
                results.append(entry)

    def _walk_recursive(self, directory: Path, rest, results: List[Path]) -> None:
        """``**`` matches zero or more directories; trailing ``**`` takes every file below."""
        if rest:
            self._walk(directory, rest, results)

        for entry in self._list_directory(directory):
            if self._is_hidden(entry.name):
                continue
            if entry.is_dir():
                self._walk_recursive(entry, rest, results)
            elif not rest and entry.is_file():
                results.append(entry)

    def scan(self, pattern: str) -> List[Path]:
        """
        Return matching regular files in deterministic walk order.

        Raises:
            PatternError: If the pattern is malformed
            EnumerationError: If a directory cannot be read while matching
        """
        compiled = GlobPattern(pattern, self.options)

        if compiled.directories_only:
            logger.debug("Pattern only selects directories: %s", pattern)
            return []

        if compiled.is_literal:
            literal = Path(compiled.base)
            return [literal] if literal.is_file() else []

        start = Path(compiled.base) if compiled.base else Path(".")
        if not start.is_dir():
            logger.debug("Pattern base directory does not exist: %s", start)
            return []

        results: List[Path] = []
        self._walk(start, compiled.components, results)

        # a path reached through several `**` expansions is kept once
        seen = set()
        unique = []
        for path in results:
            if path not in seen:
                seen.add(path)
                unique.append(path)
        return unique

    def collect(self, pattern: str) -> Tuple[List[FileEntry], FileStats]:
        """Scan ``pattern`` and wrap the results as FileEntry with size statistics."""
        stats = FileStats()
        entries = []
        for path in self.scan(pattern):
            try:
                stats.add_file(path.stat().st_size)
            except OSError as e:
                raise EnumerationError(f"Cannot stat {path}: {e}") from e
            try:
                # entry names and manifest rows are UTF-8
                path.name.encode("utf-8")
            except UnicodeEncodeError as e:
                raise EnumerationError(
                    f"File name is not valid UTF-8: {path.name!r} in {path.parent}"
                ) from e
            entries.append(FileEntry(path))

        logger.info(
            "Pattern scan complete: %d files (%.2f MB) match %s",
            stats.total_files,
            stats.total_size / (1024 * 1024),
            pattern,
        )
        return entries, stats
