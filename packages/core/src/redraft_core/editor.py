"""Launch the user's editor on the review document."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from redraft_core.errors import EditorError

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"

# Same set git's run-command.c uses to decide whether to go through a shell,
# so values like EDITOR="emacs -nw" or "code --wait" work.
_SHELL_METACHARS = set("|&;<>()$`\\\"' \t\n*?[#~=%")


def resolve_editor(config: dict | None = None) -> str:
    """Pick the editor command: config ``editor``, then $VISUAL, then $EDITOR."""
    configured = (config or {}).get("editor")
    return configured or os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR


def run_editor(path: str, editor: str) -> None:
    if _SHELL_METACHARS.intersection(editor):
        cmd = ["sh", "-c", f'{editor} "$@"', editor, path]
    else:
        cmd = [editor, path]

    logger.debug("Launching editor: %s", cmd)
    try:
        result = subprocess.run(cmd)
    except OSError as e:
        raise EditorError(f"could not launch editor {editor!r}: {e}") from e
    if result.returncode != 0:
        raise EditorError(f"editor {editor!r} exited with status {result.returncode}")


def edit_file(path: str, editor: str) -> str:
    """Open ``path`` in ``editor`` and return the saved contents."""
    run_editor(path, editor)
    return Path(path).read_text(encoding="utf-8")
