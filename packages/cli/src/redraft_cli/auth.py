"""GitHub token resolution.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (CI / explicit override)
  2. A token file: `token_file` from .redraft.yml, else ~/.github-issue-token.
     Files readable by group or others are ignored.
  3. `gh auth token` (GitHub CLI session, works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import stat
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = "~/.github-issue-token"


def _read_token_file(token_file: str | None) -> str | None:
    path = Path(os.path.expanduser(token_file or DEFAULT_TOKEN_FILE))
    try:
        mode = path.stat().st_mode
    except FileNotFoundError:
        return None
    if mode & 0o077:
        logger.warning(
            "Ignoring token file %s: mode is %#o, want %#o", path, stat.S_IMODE(mode), stat.S_IMODE(mode) & 0o700
        )
        return None
    token = path.read_text().strip()
    if token:
        logger.debug("Resolved GitHub token from %s.", path)
    return token or None


def resolve_github_token(token_file: str | None = None) -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises; callers should check for None and emit a UsageError.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    token = _read_token_file(token_file)
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out.
        pass

    return None
