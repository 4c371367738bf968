"""Render a pull request into the editable review document."""

from __future__ import annotations

import io
from datetime import datetime
from typing import Iterable

from redraft_core.comments import CommentIndex
from redraft_core.models import ExistingComment, PullRequestInfo, ReviewEvent, TopLevelEntry
from redraft_core.scanner import (
    INLINE_END_MARKER,
    INLINE_START_MARKER,
    NEUTRAL_REVISION,
    TOP_LEVEL_END_MARKER,
    TOP_LEVEL_START_MARKER,
    DiffCursor,
    advance,
    classify,
)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
WRAP_WIDTH = 70

# Appended to every top-level body we submit, stripped again on display.
REVIEW_SIGNATURE = "<!-- review by redraft -->"

# The "This change is Reviewable" notice Reviewable.io adds to every PR.
_BOILERPLATE_MARKERS = ("<!-- Reviewable:start -->",)

_ACTIONS = {
    ReviewEvent.APPROVE: "Approved",
    "APPROVED": "Approved",
    ReviewEvent.REQUEST_CHANGES: "Changes requested",
    "CHANGES_REQUESTED": "Changes requested",
    ReviewEvent.PENDING: "Draft comment",
}

_INSTRUCTIONS = f"""
# Add top-level review comments by typing between the marker lines below.
# Don't modify the markers!

{TOP_LEVEL_START_MARKER}
{TOP_LEVEL_END_MARKER}

# Add ordinary review comments by typing on a new line below the line of the
# diff you'd like to comment on. Comments may not begin with the special
# characters <space>, +, -, @, \\, or *.
#
# Pre-existing comments are prefixed with *. Type directly below a block of
# pre-existing comments to reply to that thread.

"""


def format_time(value: datetime | None) -> str:
    return value.strftime(TIME_FORMAT) if value else "unknown"


def wrap(text: str, prefix: str, width: int = WRAP_WIDTH) -> str:
    """Word-wrap ``text`` at ``width`` columns, prefixing every continuation line.

    Each line is broken after the last space within the first ``width``
    characters, or hard-broken at ``width`` when there is no space.
    The first line is returned without ``prefix``.
    """
    out: list[str] = []
    for line in text.replace("\r\n", "\n").split("\n"):
        while len(line) > width:
            cut = line.rfind(" ", 0, width)
            cut = width if cut < 0 else cut + 1
            out.append(line[:cut])
            line = line[cut:]
        out.append(line)
    return ("\n" + prefix).join(out)


def _is_boilerplate(text: str) -> bool:
    return any(marker in text for marker in _BOILERPLATE_MARKERS)


def _display_body(body: str | None) -> str:
    return (body or "").replace(REVIEW_SIGNATURE, "").strip()


def render_header(pr: PullRequestInfo, diffstat: str = "") -> str:
    w = io.StringIO()
    w.write(f"commit {NEUTRAL_REVISION}\n")
    w.write(f"Author: {pr.author} <>\n")
    w.write(f"Date:   {format_time(pr.created_at)}\n")
    w.write(f"Title:  {pr.title}\n")
    w.write(f"State:  {pr.state}\n")
    if pr.merged_at is not None:
        w.write(f"Merged: {format_time(pr.merged_at)}\n")
    if pr.closed_at is not None:
        w.write(f"Closed: {format_time(pr.closed_at)}\n")
    w.write(f"URL:    {pr.url}\n\n")
    if diffstat:
        w.write(diffstat if diffstat.endswith("\n") else diffstat + "\n")
    return w.getvalue()


def _sort_key(entry: TopLevelEntry):
    return (entry.created_at is not None, entry.created_at or datetime.min)


def render_discussion(pr: PullRequestInfo, entries: Iterable[TopLevelEntry], width: int = WRAP_WIDTH) -> str:
    """Render the PR description and the conversation, oldest first."""
    w = io.StringIO()
    w.write(f"\nCreated by {pr.author} ({format_time(pr.created_at)})\n")
    text = _display_body(pr.body)
    if text:
        w.write(f"\n\t{wrap(text, chr(9), width)}\n")

    for entry in sorted(entries, key=_sort_key):
        text = _display_body(entry.body)
        if not text or _is_boilerplate(text):
            continue
        action = _ACTIONS.get(entry.state or "", "Comment")
        w.write(f"\n{action} by {entry.author} ({format_time(entry.created_at)})\n")
        w.write(f"\n\t{wrap(text, chr(9), width)}\n")
    w.write("\n")
    return w.getvalue()


def render_instructions() -> str:
    return _INSTRUCTIONS


def _render_inline_block(comments: list[ExistingComment], width: int) -> str:
    w = io.StringIO()
    w.write(INLINE_START_MARKER + "\n")
    for comment in comments:
        w.write(f"* Comment by @{comment.author} ({format_time(comment.created_at)})")
        if comment.in_reply_to is None:
            w.write(f" thread {comment.id}")
        w.write("\n")
        w.write(f"*\t{wrap(comment.body, '*' + chr(9), width)}\n")
    w.write(INLINE_END_MARKER + "\n")
    return w.getvalue()


def annotate_diff(diff_text: str, index: CommentIndex, width: int = WRAP_WIDTH) -> str:
    """Echo ``diff_text`` with existing comments inserted under the lines they target."""
    w = io.StringIO()
    cursor = DiffCursor()
    for raw in diff_text.splitlines():
        w.write(raw + "\n")
        cursor, consumed = advance(cursor, classify(raw, in_hunk=cursor.saw_first_hunk))
        if not consumed:
            continue
        comments = index.get(cursor.revision, cursor.path, cursor.position)
        if comments:
            w.write(_render_inline_block(comments, width))
    return w.getvalue()


def render_template(
    pr: PullRequestInfo,
    entries: Iterable[TopLevelEntry],
    diff_text: str,
    index: CommentIndex | None = None,
    diffstat: str = "",
    width: int = WRAP_WIDTH,
) -> str:
    """Build the complete review document for ``pr``."""
    return (
        render_header(pr, diffstat)
        + render_discussion(pr, entries, width)
        + render_instructions()
        + annotate_diff(diff_text, index or CommentIndex(), width)
    )
