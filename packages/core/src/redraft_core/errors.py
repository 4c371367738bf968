"""Exceptions raised by redraft_core.

The CLI catches RedraftError at the command boundary and reports it as a
click error; the review session catches TemplateParseError and EditorError
and offers the user another edit pass instead.
"""

from __future__ import annotations


class RedraftError(Exception):
    """Base class for all redraft failures."""


class TemplateParseError(RedraftError):
    """The edited review document has broken or unbalanced marker lines."""

    def __init__(self, line_number: int, message: str):
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number
        self.message = message


class EditorError(RedraftError):
    """The configured editor could not be launched or exited non-zero."""


class GitError(RedraftError):
    """A git subprocess failed."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git {' '.join(args[1:])}: {detail}")
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
