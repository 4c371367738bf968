"""git invocations that materialise a pull request's diff locally."""

from __future__ import annotations

import logging
import subprocess

from redraft_core.errors import GitError

logger = logging.getLogger(__name__)

# One "commit <sha>" header per commit so the scanner can tell revisions apart;
# the message is indented so it never looks like a diff or marker line.
SHOW_FORMAT = "--pretty=format:commit %H%nAuthor: %an <%ae>%nDate:   %ad%n%n%w(0,4,4)%B"


def _run(args: list[str]) -> str:
    logger.debug("Running %s", " ".join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise GitError(args, 127, str(e)) from e
    if result.returncode != 0:
        raise GitError(args, result.returncode, result.stderr)
    return result.stdout


def review_ref(number: int) -> str:
    return f"refs/reviews/{number}"


def fetch_pull_ref(remote_url: str, number: int) -> None:
    """Fetch the PR head into refs/reviews/<n> so its commits are available locally."""
    _run(["git", "fetch", "-f", remote_url, f"refs/pull/{number}/head:{review_ref(number)}"])


def show_commits(base_sha: str, head_sha: str) -> str:
    """Per-commit diffs for base..head, oldest commit first."""
    return _run(["git", "show", "--reverse", SHOW_FORMAT, f"{base_sha}..{head_sha}"])


def combined_diff(base_sha: str, head_sha: str) -> str:
    """The whole PR as one diff, attributed to the head commit."""
    diff = _run(["git", "diff", f"{base_sha}...{head_sha}"])
    return f"commit {head_sha}\n\n{diff}"


def diff_stat(base_sha: str, head_sha: str) -> str:
    return _run(["git", "diff", "--stat", f"{base_sha}...{head_sha}"])
