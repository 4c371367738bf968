"""Lookup of already-posted review comments by diff location."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from redraft_core.models import ExistingComment

logger = logging.getLogger(__name__)


class CommentIndex:
    """Maps (revision, path, position) to the comments posted there, oldest first.

    Built once from the fetched review comments and only read while the
    template is rendered.
    """

    def __init__(self):
        self._by_revision: dict[str, dict[str, dict[int, list[ExistingComment]]]] = {}
        self._count = 0

    @classmethod
    def from_comments(cls, comments: Iterable[ExistingComment]) -> CommentIndex:
        index = cls()
        for comment in comments:
            index.put(comment)
        return index

    def put(self, comment: ExistingComment) -> None:
        if comment.position is None:
            # Outdated: GitHub no longer maps the comment to a diff line.
            logger.debug("Skipping outdated comment %s on %s", comment.id, comment.path)
            return
        files = self._by_revision.setdefault(comment.revision, {})
        lines = files.setdefault(comment.path, {})
        lines.setdefault(comment.position, []).append(comment)
        self._count += 1

    def get(self, revision: str, path: str, position: int) -> list[ExistingComment]:
        return self._by_revision.get(revision, {}).get(path, {}).get(position, [])

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[ExistingComment]:
        for files in self._by_revision.values():
            for lines in files.values():
                for comments in lines.values():
                    yield from comments
