"""No-op store, used when .redraft.yml sets `drafts: none`."""

from __future__ import annotations

from datetime import datetime, timezone

from redraft_store.base import BaseStore
from redraft_store.models import DraftRecord


class NoOpStore(BaseStore):
    """Discards drafts; nothing is ever available to resume."""

    def save(self, pr_number: int, text: str) -> DraftRecord:
        return DraftRecord(pr_number=pr_number, path="", saved_at=datetime.now(timezone.utc).isoformat())

    def load(self, pr_number: int) -> str | None:
        return None

    def list_drafts(self) -> list[DraftRecord]:
        return []

    def delete(self, pr_number: int) -> None:
        pass
