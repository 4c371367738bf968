"""Saved-draft data models.

Decoupled from redraft_core so the store layer can be used independently
and redraft_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DraftRecord:
    """A review document saved for later with `s` at the submit prompt."""

    pr_number: int
    path: str
    saved_at: str  # ISO-8601 UTC timestamp
    size: int = 0
