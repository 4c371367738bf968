"""Line classification and diff-position tracking shared by encoder and decoder.

GitHub anchors a review comment with ``position``: the number of lines below
the first ``@@`` hunk header of a file's diff. The line right under the first
header is position 1, and the count keeps increasing through later hunk
headers until the next file starts. Both the template encoder and the
decoder walk their input with ``advance`` so the positions they assign can
never drift apart.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

TOP_LEVEL_START_MARKER = "# ------ BEGIN  TOP-LEVEL REVIEW COMMENTS ----- #"
TOP_LEVEL_END_MARKER = "# ------ END OF TOP-LEVEL REVIEW COMMENTS ----- #"
INLINE_START_MARKER = "*" * 79 + "v"
INLINE_END_MARKER = "*" * 79 + "^"

# Looks like a git commit header so editors pick git syntax highlighting
# instead of guessing from the first diff hunk. Never a real revision.
NEUTRAL_REVISION = "0" * 40

# Full SHA-1 or SHA-256 object names only.
_COMMIT_RE = re.compile(r"^commit ([0-9a-f]{40}(?:[0-9a-f]{24})?)$")
_NEW_FILE_RE = re.compile(r"^\+\+\+ (?:b/(.*)|/dev/null)$")
_OLD_FILE_RE = re.compile(r"^--- (?:a/(.*)|/dev/null)$")
_THREAD_RE = re.compile(r"^\* Comment by @\S+ \([^)]+\) thread (\d+)$")

_DIFF_START = "diff --git "
_HUNK_START = "@@"
_DIFF_BODY_CHARS = ("+", "-", " ", "\\", "@")


class LineKind(enum.Enum):
    TOP_LEVEL_START = "top-level-start"
    TOP_LEVEL_END = "top-level-end"
    INLINE_START = "inline-start"
    INLINE_END = "inline-end"
    COMMIT_HEADER = "commit-header"
    DIFF_START = "diff-start"
    FILE_HEADER = "file-header"
    HUNK = "hunk"
    DIFF_BODY = "diff-body"
    THREAD_REF = "thread-ref"
    ECHO = "echo"
    BLANK = "blank"
    OTHER = "other"


_MARKERS = {
    TOP_LEVEL_START_MARKER: LineKind.TOP_LEVEL_START,
    TOP_LEVEL_END_MARKER: LineKind.TOP_LEVEL_END,
    INLINE_START_MARKER: LineKind.INLINE_START,
    INLINE_END_MARKER: LineKind.INLINE_END,
}


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    text: str
    value: str | None = None  # revision id, file path or thread id


@dataclass(frozen=True)
class DiffCursor:
    """Where a line sits in the diff.

    ``position`` only means something once ``saw_first_hunk`` is true.
    """

    revision: str = ""
    path: str = ""
    saw_first_hunk: bool = False
    position: int = 0


def classify(line: str, in_hunk: bool = False) -> ClassifiedLine:
    """Tag a single line (without its trailing newline).

    ``in_hunk`` disambiguates ``+++ b/x`` and ``--- a/x``: inside a hunk
    they are an added or removed line, not a file header.
    """
    kind = _MARKERS.get(line)
    if kind is not None:
        return ClassifiedLine(kind, line)
    if not line:
        return ClassifiedLine(LineKind.BLANK, line)

    m = _COMMIT_RE.match(line)
    if m:
        return ClassifiedLine(LineKind.COMMIT_HEADER, line, m.group(1))
    if line.startswith(_DIFF_START):
        return ClassifiedLine(LineKind.DIFF_START, line)
    if not in_hunk:
        m = _NEW_FILE_RE.match(line) or _OLD_FILE_RE.match(line)
        if m:
            return ClassifiedLine(LineKind.FILE_HEADER, line, m.group(1))
    if line.startswith(_HUNK_START):
        return ClassifiedLine(LineKind.HUNK, line)
    if line.startswith(_DIFF_BODY_CHARS):
        return ClassifiedLine(LineKind.DIFF_BODY, line)

    m = _THREAD_RE.match(line)
    if m:
        return ClassifiedLine(LineKind.THREAD_REF, line, m.group(1))
    if line[0] in ("*", "\t"):
        return ClassifiedLine(LineKind.ECHO, line)
    return ClassifiedLine(LineKind.OTHER, line)


def advance(cursor: DiffCursor, line: ClassifiedLine) -> tuple[DiffCursor, bool]:
    """Apply one classified line to the cursor.

    Returns the new cursor and whether the line consumed a diff position.
    """
    kind = line.kind
    if kind is LineKind.COMMIT_HEADER:
        return DiffCursor(revision=line.value or ""), False
    if kind is LineKind.DIFF_START:
        return replace(cursor, saw_first_hunk=False, position=0), False
    if kind is LineKind.FILE_HEADER:
        # "+++ /dev/null" on a deleted file keeps the "--- a/" path.
        if line.value:
            return replace(cursor, path=line.value), False
        return cursor, False

    if not cursor.saw_first_hunk:
        if kind is LineKind.HUNK:
            return replace(cursor, saw_first_hunk=True, position=0), False
        return cursor, False

    if kind in (LineKind.HUNK, LineKind.DIFF_BODY):
        return replace(cursor, position=cursor.position + 1), True
    return cursor, False


def scan(lines: Iterable[str], cursor: DiffCursor | None = None) -> Iterator[tuple[DiffCursor, ClassifiedLine, bool]]:
    """Classify and advance over every line, yielding the cursor after each."""
    cursor = cursor or DiffCursor()
    for raw in lines:
        classified = classify(raw.rstrip("\n"), in_hunk=cursor.saw_first_hunk)
        cursor, consumed = advance(cursor, classified)
        yield cursor, classified, consumed


def diff_positions(text: str) -> list[tuple[str, str, int]]:
    """Return (revision, path, position) for every addressable line in ``text``."""
    return [
        (cursor.revision, cursor.path, cursor.position)
        for cursor, _, consumed in scan(text.splitlines())
        if consumed
    ]
