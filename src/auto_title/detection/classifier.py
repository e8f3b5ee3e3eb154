"""
Eligibility classification for notes.

Decides whether a note name still looks like a placeholder ("Untitled 3")
and whether its content already declares a title in front matter.
Pure functions, no I/O.
"""

import re
import time

from ..errors import ConfigValidationError

# Leading front matter block: "---" line, key/value lines, "---" line.
# The block may be empty ("---\n---\n"); group 1 is then None.
FRONT_MATTER_RE = re.compile(r"^---[ \t\r]*\n(?:([\s\S]*?)\n)??---[ \t\r]*(?:\n|$)")
TITLE_FIELD_RE = re.compile(r"^title:[ \t]*(.*)$", re.MULTILINE)
DAILY_NOTE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
MD_SUFFIX_RE = re.compile(r"\.md$", re.IGNORECASE)

RECENT_WINDOW_SECONDS = 5 * 60


def strip_front_matter(content: str) -> str:
    """Remove a leading front matter block and surrounding whitespace."""
    match = FRONT_MATTER_RE.match(content)
    return content[match.end():].strip() if match else content.strip()


def count_words(text: str) -> int:
    return len(text.split())


def has_declared_title(content: str) -> bool:
    """Check if the leading front matter declares a non-empty title."""
    match = FRONT_MATTER_RE.match(content)
    if not match or not match.group(1):
        return False
    title = TITLE_FIELD_RE.search(match.group(1))
    if title is None:
        return False
    value = title.group(1).strip()
    # An explicitly empty YAML string is still "no title"
    return value not in ("", '""', "''", "~", "null")


class EligibilityClassifier:
    """
    Matches note names against the configured "needs a title" patterns.

    Patterns are compiled once, as full case-insensitive matches. A new
    pattern list means a new classifier.
    """

    def __init__(self, patterns: list[str]):
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(rf"^(?:{pattern})$", re.IGNORECASE))
            except re.error as e:
                raise ConfigValidationError(f"Invalid untitled pattern {pattern!r}: {e}") from e
        self.patterns = tuple(patterns)
        self._compiled = tuple(compiled)

    def is_eligible(self, name: str) -> bool:
        """Check if a note name (with or without .md) matches a pattern."""
        stem = MD_SUFFIX_RE.sub("", name)
        return any(p.match(stem) for p in self._compiled)

    def has_declared_title(self, content: str) -> bool:
        return has_declared_title(content)

    def is_likely_untitled(self, name: str, created_at: float, now: float | None = None) -> bool:
        """
        Looser check used for notes the patterns don't catch.

        Recently created notes (last five minutes) with a very short or
        purely numeric name count as untitled. Daily notes never do.
        """
        if self.is_eligible(name):
            return True

        now = time.time() if now is None else now
        if created_at <= now - RECENT_WINDOW_SECONDS:
            return False

        stem = MD_SUFFIX_RE.sub("", name)
        if DAILY_NOTE_RE.match(stem):
            return False
        return len(stem) <= 3 or stem.isdigit()
