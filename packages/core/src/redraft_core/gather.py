"""Collect everything the template needs, fetching independent pieces in parallel.

PR metadata gates everything else: the review/comment listings need the
PullRequest object and the diff needs its base and head SHAs. The ref fetch
runs alongside the listings, and the diff waits on both the metadata and the
fetch.
"""

from __future__ import annotations

import logging
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from redraft_core import git
from redraft_core.comments import CommentIndex
from redraft_core.gh.pull_request import (
    get_pull,
    list_existing_comments,
    list_top_level_entries,
    to_pull_request_info,
)
from redraft_core.models import PullRequestInfo, TopLevelEntry
from redraft_core.template import render_template

logger = logging.getLogger(__name__)

# One worker per task so waiting on a sibling future can never starve the pool.
_MAX_WORKERS = 6


@dataclass
class ReviewData:
    pr: PullRequestInfo
    entries: list[TopLevelEntry]
    index: CommentIndex
    diff_text: str
    diffstat: str = ""


def _timed(label: str, fn, *args):
    start = time.monotonic()
    result = fn(*args)
    logger.debug("Fetched %s in %.2fs", label, time.monotonic() - start)
    return result


def _materialise_diff(pr, fetched, diff_mode: str) -> str:
    fetched.result()
    base, head = pr.base.sha, pr.head.sha
    if diff_mode == "combined":
        return git.combined_diff(base, head)
    return git.show_commits(base, head)


def _diffstat(pr, fetched) -> str:
    fetched.result()
    return git.diff_stat(pr.base.sha, pr.head.sha)


def gather_review_data(repo, number: int, config: dict) -> ReviewData:
    """Fetch PR metadata, discussion, existing comments and the local diff.

    Any failing task's exception propagates once all tasks have settled.
    """
    remote_url = config.get("remote_url") or f"https://github.com/{repo.full_name}"
    diff_mode = config.get("diff_mode", "commits")

    logger.info("Fetching details for PR %d", number)
    with ThreadPoolExecutor(max_workers=_MAX_WORKERS) as pool:
        pr_future = pool.submit(_timed, "pr", get_pull, repo, number)
        fetch_future = pool.submit(_timed, "refs", git.fetch_pull_ref, remote_url, number)
        entries_future = pool.submit(lambda: _timed("discussion", list_top_level_entries, pr_future.result()))
        comments_future = pool.submit(lambda: _timed("review comments", list_existing_comments, pr_future.result()))
        diff_future = pool.submit(
            lambda: _timed("diff", _materialise_diff, pr_future.result(), fetch_future, diff_mode)
        )
        stat_future = pool.submit(
            lambda: _timed("diff stat", _diffstat, pr_future.result(), fetch_future)
        )

    pr = pr_future.result()
    return ReviewData(
        pr=to_pull_request_info(pr),
        entries=entries_future.result(),
        index=CommentIndex.from_comments(comments_future.result()),
        diff_text=diff_future.result(),
        diffstat=stat_future.result(),
    )


def build_template(data: ReviewData, width: int = 70) -> str:
    return render_template(data.pr, data.entries, data.diff_text, data.index, data.diffstat, width)


def write_working_copy(text: str) -> str:
    """Write ``text`` to a fresh temporary file and return its path."""
    with tempfile.NamedTemporaryFile(
        "w", prefix="redraft-edit-", suffix=".diff", delete=False, encoding="utf-8"
    ) as f:
        f.write(text)
    return f.name
