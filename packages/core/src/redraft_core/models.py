"""Plain data passed between the GitHub layer, the encoder and the decoder.

None of these types know where their data came from. The gh layer builds
them from PyGithub objects; tests build them directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


class ReviewEvent:
    """GitHub review event/state strings."""

    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    COMMENT = "COMMENT"
    PENDING = "PENDING"


@dataclass
class PullRequestInfo:
    """Change metadata rendered into the template header."""

    number: int
    author: str
    title: str
    state: str
    base_sha: str
    head_sha: str
    created_at: datetime | None = None
    merged_at: datetime | None = None
    closed_at: datetime | None = None
    url: str = ""
    body: str = ""


@dataclass(frozen=True)
class ExistingComment:
    """A review comment already posted on a diff line."""

    id: int
    revision: str
    path: str
    position: int | None  # None when GitHub marks the comment outdated
    author: str
    created_at: datetime | None
    body: str
    in_reply_to: int | None = None


@dataclass(frozen=True)
class TopLevelEntry:
    """A submitted review or a general PR conversation comment."""

    body: str
    author: str
    created_at: datetime | None
    state: str | None = None  # only set for reviews
    commit_id: str | None = None


@dataclass
class DraftComment:
    """A new line-anchored comment decoded from the edited template."""

    path: str
    position: int
    body: str = ""
    revision: str | None = None
    reply_to: int | None = None

    def to_api(self) -> dict:
        """Return the comment dict GitHub's create-review endpoint accepts."""
        return {"path": self.path, "position": self.position, "body": self.body}


@dataclass
class ReviewRequest:
    """Everything needed to submit one review.

    ``event`` is None for a pending (draft) review.
    """

    body: str | None = None
    comments: list[DraftComment] = field(default_factory=list)
    event: str | None = None
    commit_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.body is None and not self.comments


@dataclass
class SubmitSummary:
    """What ``submit_review`` actually sent to GitHub."""

    reviews: int = 0
    comments: int = 0
    replies: int = 0

    @property
    def posted(self) -> bool:
        return bool(self.reviews or self.replies)
