from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from github import Github

from redraft_core.errors import RedraftError
from redraft_core.models import (
    DraftComment,
    ExistingComment,
    PullRequestInfo,
    ReviewEvent,
    ReviewRequest,
    SubmitSummary,
    TopLevelEntry,
)

logger = logging.getLogger(__name__)


def get_client(token: str) -> Github:
    return Github(token)


def get_repo(repo_name: str, token: str):
    return get_client(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def _login(user) -> str:
    return getattr(user, "login", None) or ""


def to_pull_request_info(pr) -> PullRequestInfo:
    return PullRequestInfo(
        number=pr.number,
        author=_login(pr.user),
        title=pr.title or "",
        state=pr.state or "",
        base_sha=pr.base.sha,
        head_sha=pr.head.sha,
        created_at=pr.created_at,
        merged_at=pr.merged_at,
        closed_at=pr.closed_at,
        url=pr.html_url or "",
        body=pr.body or "",
    )


def list_top_level_entries(pr) -> list[TopLevelEntry]:
    """Reviews and conversation comments, oldest first."""
    entries = [
        TopLevelEntry(
            body=r.body or "",
            author=_login(r.user),
            created_at=r.submitted_at,
            state=r.state,
            commit_id=r.commit_id,
        )
        for r in pr.get_reviews()
    ]
    entries.extend(
        TopLevelEntry(body=c.body or "", author=_login(c.user), created_at=c.created_at)
        for c in pr.get_issue_comments()
    )
    return sorted(entries, key=lambda e: (e.created_at is not None, e.created_at or datetime.min))


def to_existing_comment(comment) -> ExistingComment:
    return ExistingComment(
        id=comment.id,
        revision=comment.commit_id,
        path=comment.path,
        # position is None when the line no longer exists in the current diff.
        position=comment.position,
        author=_login(comment.user),
        created_at=comment.created_at,
        body=comment.body or "",
        in_reply_to=getattr(comment, "in_reply_to_id", None),
    )


def list_existing_comments(pr) -> list[ExistingComment]:
    return [to_existing_comment(c) for c in pr.get_review_comments()]


def search_involving(gh: Github, repo_name: str, user: str, since: datetime | None = None):
    """Open PRs updated since ``since`` (default: a month ago) involving ``user``.

    Returns (mine, theirs): PRs authored by ``user`` and everyone else's.
    """
    since = since or datetime.now(timezone.utc) - timedelta(days=30)
    query = f"type:pr state:open repo:{repo_name} involves:{user} updated:>={since:%Y-%m-%d}"
    mine, theirs = [], []
    for issue in gh.search_issues(query, sort="created"):
        (mine if _login(issue.user) == user else theirs).append(issue)
    return mine, theirs


def _group_by_revision(
    comments: list[DraftComment], default: str | None
) -> list[tuple[str | None, list[DraftComment]]]:
    """Split comments by the commit their positions were counted against, in document order."""
    groups: dict[str | None, list[DraftComment]] = {}
    for c in comments:
        groups.setdefault(c.revision or default, []).append(c)
    return list(groups.items())


def submit_review(repo, pr, request: ReviewRequest) -> SubmitSummary:
    """Post ``request`` on ``pr`` and report what was sent.

    Positions are only meaningful against the commit whose diff they were
    counted in, so inline comments go out as one review per commit. The
    body and the event ride on the last of those reviews; earlier ones are
    plain COMMENT reviews.

    A pending review (event None) keeps every comment inside the draft and
    must stay within one commit, since GitHub allows a single pending review
    per user. Otherwise comments that reply to an existing thread are posted
    as thread replies, since the create-review endpoint cannot thread them.
    """
    pending = request.event is None
    inline = [c for c in request.comments if pending or c.reply_to is None]
    replies = [] if pending else [c for c in request.comments if c.reply_to is not None]

    groups = _group_by_revision(inline, request.commit_id)
    if pending and len(groups) > 1:
        raise RedraftError(
            f"a pending review must stay within one commit; comments span {len(groups)} commits. "
            "Submit it instead or move the comments."
        )

    decisive = request.event in (ReviewEvent.APPROVE, ReviewEvent.REQUEST_CHANGES)
    if not groups and (request.body or decisive):
        groups = [(request.commit_id, [])]

    summary = SubmitSummary()
    for i, (revision, comments) in enumerate(groups):
        last = i == len(groups) - 1
        kwargs: dict = {"comments": [c.to_api() for c in comments]}
        event = request.event if last else ReviewEvent.COMMENT
        if last and request.body:
            kwargs["body"] = request.body
        if event:
            kwargs["event"] = event
        if revision:
            kwargs["commit"] = repo.get_commit(revision)
        logger.info("Submitting review on %s with %d comment(s)", revision or "head", len(comments))
        pr.create_review(**kwargs)
        summary.reviews += 1
        summary.comments += len(comments)

    for c in replies:
        logger.info("Replying to thread %d", c.reply_to)
        pr.create_review_comment_reply(c.reply_to, c.body)
        summary.replies += 1

    return summary
