"""Abstract draft store interface.

The CLI depends on BaseStore, not on a concrete backend, and hands the
session a save callback built from it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redraft_store.models import DraftRecord

DRAFT_SUFFIX = ".redraft"


class BaseStore(ABC):
    """Pluggable persistence for unsubmitted review documents, keyed by PR number."""

    @abstractmethod
    def save(self, pr_number: int, text: str) -> DraftRecord:
        """Persist the review document ``text`` for ``pr_number``."""

    @abstractmethod
    def load(self, pr_number: int) -> str | None:
        """Return the saved document text, or None if there is no draft."""

    @abstractmethod
    def list_drafts(self) -> list[DraftRecord]:
        """Return all saved drafts, oldest first. Never raises."""

    @abstractmethod
    def delete(self, pr_number: int) -> None:
        """Remove a saved draft; a missing draft is not an error."""

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """
