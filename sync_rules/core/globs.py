"""
Glob Patterns
=============

Expansion of rule/exclude patterns and a small glob matcher supporting
``*``, ``?``, ``**``, ``[...]`` and ``{a,b}``. Dotfiles always match.
"""

import re
from functools import lru_cache
from typing import Iterable

from sync_rules.errors import ScanError

GLOB_CHARS = re.compile(r"[*?\[\]{}!]")


def is_glob_pattern(pattern: str) -> bool:
    """Check whether a pattern contains glob characters."""
    return bool(GLOB_CHARS.search(pattern))


def normalize_glob(pattern: str) -> str:
    """Make simple basename globs such as ``*.md`` or ``temp.*`` recursive."""
    if "/" not in pattern and (pattern.startswith("*.") or ".*" in pattern):
        return "**/" + pattern
    return pattern


def expand_rule_patterns(patterns: Iterable[str]) -> list[str]:
    """
    Turn user rule patterns into globs.

    A literal name like ``.clinerules`` matches both the entry itself and
    everything beneath it. Globs are kept, apart from basename normalization.
    """
    expanded: list[str] = []
    for pattern in patterns:
        pattern = pattern.strip().strip("/")
        if not pattern:
            continue
        if is_glob_pattern(pattern):
            expanded.append(normalize_glob(pattern))
        else:
            expanded.extend([pattern, f"{pattern}/**/*"])
    return _unique(expanded)


def expand_exclude_patterns(patterns: Iterable[str]) -> list[str]:
    """Turn exclude patterns into ignore globs; literals match anywhere in the tree."""
    expanded: list[str] = []
    for pattern in patterns:
        pattern = pattern.strip().strip("/")
        if not pattern:
            continue
        if is_glob_pattern(pattern):
            expanded.append(normalize_glob(pattern))
        else:
            expanded.extend([f"**/{pattern}", f"**/{pattern}/**/*", pattern, f"{pattern}/**/*"])
    return _unique(expanded)


def separate_patterns(patterns: Iterable[str]) -> tuple[list[str], list[str]]:
    """
    Split patterns into positive ones and ``!``-prefixed negative ones.

    Empty patterns are dropped. With no positive pattern, every Markdown
    file is matched.
    """
    positive: list[str] = []
    negative: list[str] = []
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        if pattern.startswith("!"):
            if pattern[1:].strip():
                negative.append(pattern[1:])
        else:
            positive.append(pattern)
    return positive or ["**/*.md"], negative


@lru_cache(maxsize=512)
def translate_glob(pattern: str) -> re.Pattern:
    """Compile a POSIX glob into a regular expression over relative paths."""
    parts = [part for part in pattern.strip("/").split("/") if part not in ("", ".")]
    regex = ""
    for index, part in enumerate(parts):
        last = index == len(parts) - 1
        if part == "**":
            regex += ".*" if last else "(?:[^/]+/)*"
        else:
            regex += _translate_segment(part)
            if not last:
                regex += "/"
    return re.compile(f"^{regex}$")


def _translate_segment(segment: str) -> str:
    out: list[str] = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = segment.find("]", index + 2)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = segment[index + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                index = end
        elif char == "{":
            end = segment.find("}", index + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                options = segment[index + 1:end].split(",")
                out.append("(?:" + "|".join(_translate_segment(option) for option in options) + ")")
                index = end
        else:
            out.append(re.escape(char))
        index += 1
    return "".join(out)


def _unique(patterns: list[str]) -> list[str]:
    return list(dict.fromkeys(patterns))


class GlobMatcher:
    """Matches relative POSIX paths against include and ignore globs."""

    def __init__(self, include: Iterable[str], ignore: Iterable[str] = ()):
        self.include = list(include)
        self.ignore = list(ignore)
        try:
            self._include = [translate_glob(pattern) for pattern in self.include]
            self._ignore = [translate_glob(pattern) for pattern in self.ignore]
        except re.error as error:
            raise ScanError(f"Invalid glob pattern: {error}") from error

    def is_ignored(self, relative_path: str) -> bool:
        return any(regex.match(relative_path) for regex in self._ignore)

    def matches(self, relative_path: str) -> bool:
        if self.is_ignored(relative_path):
            return False
        return any(regex.match(relative_path) for regex in self._include)
