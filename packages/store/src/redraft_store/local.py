"""LocalDraftStore: saved reviews as <pr>.redraft files in a directory.

The file holds the edited document verbatim, markers included, so resuming
simply opens it in the editor again.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from redraft_store.base import DRAFT_SUFFIX, BaseStore
from redraft_store.models import DraftRecord

logger = logging.getLogger(__name__)

_DRAFT_NAME_RE = re.compile(r"^(\d+)" + re.escape(DRAFT_SUFFIX) + "$")


class LocalDraftStore(BaseStore):
    """Stores one draft per PR number; saving again overwrites the previous draft."""

    def __init__(self, directory: str = "."):
        self._dir = Path(directory)

    def path_for(self, pr_number: int) -> Path:
        return self._dir / f"{pr_number}{DRAFT_SUFFIX}"

    def save(self, pr_number: int, text: str) -> DraftRecord:
        self._dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(pr_number)
        target.write_text(text, encoding="utf-8")
        logger.debug("Saved draft for PR %d to %s", pr_number, target)
        return self._record(pr_number, target)

    def load(self, pr_number: int) -> str | None:
        path = self.path_for(pr_number)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def list_drafts(self) -> list[DraftRecord]:
        if not self._dir.is_dir():
            return []
        records = []
        for path in self._dir.iterdir():
            m = _DRAFT_NAME_RE.match(path.name)
            if m and path.is_file():
                records.append(self._record(int(m.group(1)), path))
        return sorted(records, key=lambda r: r.saved_at)

    def delete(self, pr_number: int) -> None:
        self.path_for(pr_number).unlink(missing_ok=True)

    @staticmethod
    def _record(pr_number: int, path: Path) -> DraftRecord:
        stat = path.stat()
        return DraftRecord(
            pr_number=pr_number,
            path=str(path),
            saved_at=datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
            size=stat.st_size,
        )
