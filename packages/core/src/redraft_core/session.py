"""Interactive edit/decide loop around a review document.

The session owns the working file: it is kept across re-edits and parse
failures so no typed comment is lost, and removed on every way out.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Callable

from rich.console import Console
from rich.markup import escape

from redraft_core.editor import edit_file
from redraft_core.errors import EditorError, TemplateParseError
from redraft_core.models import ReviewEvent, ReviewRequest
from redraft_core.parser import parse_template

logger = logging.getLogger(__name__)

MENU_PROMPT = "Submit this review [y,a,r,d,s,p,e,q,?]? "
RETRY_PROMPT = "edit again? [Y]/q "

_SUBMIT_EVENTS = {
    "y": ReviewEvent.COMMENT,
    "a": ReviewEvent.APPROVE,
    "r": ReviewEvent.REQUEST_CHANGES,
    "d": None,  # leave the review pending
}

_HELP = """\
y - submit comments
a - submit and approve
r - submit and request changes
d - publish as draft
s - save review locally and quit; resume with `redraft resume <pr>`
p - preview review
e - edit review
q - quit; abandon review
? - print help"""


class SessionAction(enum.Enum):
    SUBMIT = "submit"
    SAVED = "saved"
    ABORTED = "aborted"


@dataclass
class SessionResult:
    action: SessionAction
    request: ReviewRequest | None = None
    draft_path: str | None = None
    text: str | None = None  # last edited document


def format_request(request: ReviewRequest) -> str:
    """Plain-text preview of what would be submitted."""
    lines = []
    if request.commit_id:
        lines.append(f"Commit: {request.commit_id}")
    if request.body:
        lines.append("Top-level comment:")
        lines.extend("    " + line for line in request.body.splitlines())
    else:
        lines.append("No top-level comment.")
    lines.append(f"{len(request.comments)} inline comment(s)")
    for c in request.comments:
        target = f"{c.path}:{c.position}"
        if c.reply_to is not None:
            target += f" (reply to thread {c.reply_to})"
        lines.append(target)
        lines.extend("    " + line for line in c.body.splitlines())
    return "\n".join(lines)


class ReviewSession:
    """Runs the editor, decodes the result and asks what to do with it.

    ``save_draft`` receives the working file path and returns where the
    draft was stored; it is None when draft saving is not configured.
    ``read_line`` behaves like ``input`` and may raise EOFError.
    """

    def __init__(
        self,
        path: str,
        editor: str,
        save_draft: Callable[[str], str] | None = None,
        console: Console | None = None,
        read_line: Callable[[str], str] = input,
        edit: Callable[[str, str], str] = edit_file,
    ):
        self.path = path
        self.editor = editor
        self.save_draft = save_draft
        self.console = console or Console()
        self.read_line = read_line
        self.edit = edit
        self.text: str | None = None

    def run(self) -> SessionResult:
        try:
            return self._loop()
        finally:
            self._cleanup()

    def _loop(self) -> SessionResult:
        request = self._edit_until_parsed()
        if request is None:
            return SessionResult(SessionAction.ABORTED)

        while True:
            answer = self._ask(MENU_PROMPT)
            if answer is None:
                return SessionResult(SessionAction.ABORTED)
            choice = answer.strip()[:1]
            logger.debug("Menu choice: %r", choice)

            if choice in _SUBMIT_EVENTS:
                request.event = _SUBMIT_EVENTS[choice]
                return SessionResult(SessionAction.SUBMIT, request=request, text=self.text)
            if choice == "s":
                if self.save_draft is None:
                    self.console.print("[yellow]Draft saving is disabled (drafts: none).[/yellow]")
                    continue
                draft_path = self.save_draft(self.path)
                self.console.print(f"Saved draft as {escape(draft_path)}")
                return SessionResult(SessionAction.SAVED, request=request, draft_path=draft_path, text=self.text)
            if choice == "p":
                self.console.print(escape(format_request(request)), highlight=False)
                continue
            if choice == "q":
                return SessionResult(SessionAction.ABORTED)
            if choice == "?":
                self.console.print(escape(_HELP), style="bold red", highlight=False)
                continue

            # "e" and anything unrecognised: back to the editor.
            request = self._edit_until_parsed()
            if request is None:
                return SessionResult(SessionAction.ABORTED)

    def _edit_until_parsed(self) -> ReviewRequest | None:
        while True:
            try:
                self.text = self.edit(self.path, self.editor)
                return parse_template(self.text)
            except EditorError as e:
                self.console.print(f"[red]error: {escape(str(e))}[/red]")
            except TemplateParseError as e:
                self.console.print(f"[red]error parsing file: {escape(str(e))}[/red]")

            answer = self._ask(RETRY_PROMPT)
            if answer is None or answer.strip() == "q":
                return None

    def _ask(self, prompt: str) -> str | None:
        try:
            return self.read_line(prompt)
        except EOFError:
            return None

    def _cleanup(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
