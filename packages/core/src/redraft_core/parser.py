"""Decode an edited review document back into a ReviewRequest.

The decoder replays the same scanner the encoder used, so any free-text line
the reviewer typed below a diff line is anchored to that line's position.
"""

from __future__ import annotations

import logging

from redraft_core.errors import TemplateParseError
from redraft_core.models import DraftComment, ReviewRequest
from redraft_core.scanner import NEUTRAL_REVISION, DiffCursor, LineKind, advance, classify
from redraft_core.template import REVIEW_SIGNATURE

logger = logging.getLogger(__name__)


def _strip_blank_edges(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


class _Decoder:
    def __init__(self):
        self.request = ReviewRequest()
        self.cursor = DiffCursor()
        self.top_level: list[str] | None = None
        self.top_level_line = 0
        self.inline_line = 0
        self.thread_id: int | None = None
        self.comment: DraftComment | None = None
        self.pending_blank = 0

    def feed(self, number: int, line: str) -> None:
        if self.top_level is not None:
            self._feed_top_level(number, line)
            return

        classified = classify(line, in_hunk=self.cursor.saw_first_hunk)
        kind = classified.kind

        if kind is LineKind.BLANK:
            if self.comment is not None:
                self.pending_blank += 1
            return
        if kind is LineKind.OTHER and not self.inline_line:
            self._feed_comment_text(line)
            return
        self._close_comment()

        if kind is LineKind.TOP_LEVEL_START:
            if self.inline_line:
                raise TemplateParseError(
                    number, f"top-level comment marker inside the comment block opened on line {self.inline_line}"
                )
            self.top_level = []
            self.top_level_line = number
        elif kind is LineKind.TOP_LEVEL_END:
            raise TemplateParseError(number, "end of top-level comments without a matching begin marker")
        elif kind is LineKind.INLINE_START:
            if self.inline_line:
                raise TemplateParseError(number, f"comment block already opened on line {self.inline_line}")
            self.inline_line = number
        elif kind is LineKind.INLINE_END:
            if not self.inline_line:
                raise TemplateParseError(number, "end of comment block without a matching start marker")
            self.inline_line = 0
        elif kind is LineKind.THREAD_REF:
            self.thread_id = int(classified.value)
        elif self.inline_line:
            # Everything else inside a block is an echo of an existing comment.
            return
        else:
            self.cursor, consumed = advance(self.cursor, classified)
            if kind is LineKind.COMMIT_HEADER and classified.value != NEUTRAL_REVISION:
                self.request.commit_id = classified.value
            if consumed or kind in (LineKind.COMMIT_HEADER, LineKind.DIFF_START):
                self.thread_id = None

    def _feed_top_level(self, number: int, line: str) -> None:
        kind = classify(line).kind
        if kind is LineKind.TOP_LEVEL_END:
            body = "\n".join(_strip_blank_edges(self.top_level))
            if body:
                self.request.body = f"{body}\n{REVIEW_SIGNATURE}"
            self.top_level = None
        elif kind is LineKind.TOP_LEVEL_START:
            raise TemplateParseError(number, f"top-level comments already opened on line {self.top_level_line}")
        else:
            self.top_level.append(line)

    def _feed_comment_text(self, line: str) -> None:
        if not self.cursor.saw_first_hunk:
            logger.debug("Dropping text outside any hunk: %r", line)
            return
        if self.comment is None:
            self.comment = DraftComment(
                path=self.cursor.path,
                position=self.cursor.position,
                body=line,
                revision=self.cursor.revision or None,
                reply_to=self.thread_id,
            )
            self.thread_id = None
            self.request.comments.append(self.comment)
        else:
            self.comment.body += "\n" * (self.pending_blank + 1) + line
        self.pending_blank = 0

    def _close_comment(self) -> None:
        self.comment = None
        self.pending_blank = 0

    def finish(self, last_line: int) -> ReviewRequest:
        if self.top_level is not None:
            raise TemplateParseError(
                last_line, f"top-level comments opened on line {self.top_level_line} are never closed"
            )
        if self.inline_line:
            raise TemplateParseError(last_line, f"comment block opened on line {self.inline_line} is never closed")
        return self.request


def parse_template(text: str) -> ReviewRequest:
    """Decode the edited document into a ReviewRequest (``event`` left unset).

    Raises TemplateParseError when the marker lines are unbalanced.
    """
    decoder = _Decoder()
    number = 0
    for number, line in enumerate(text.splitlines(), start=1):
        decoder.feed(number, line)
    request = decoder.finish(number)
    logger.debug(
        "Parsed template: %d comment(s), top-level body %s",
        len(request.comments),
        "present" if request.body else "absent",
    )
    return request
