"""
unlock_queue.py - Per-holder queue of pending unlock requests

Entries live in a single arena keyed by (holder, index). Each holder's live
entries occupy the half-open range [queue_start, queue_end) tracked on the
holder's account; the queue itself never stores cursors. Indices are handed
out in creation order and never reused, so entries also mature in index
order: once an immature entry is seen, nothing after it can be matured.

Consumed entries are removed from the arena and read back as
UnlockEntry.ZERO, the same as indices that were never written.
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .core import UnlockEntry, UINT32_MAX
from .journal import Journal


EntryKey = Tuple[str, int]


class UnlockQueue:
    """
    Append-only, index-addressed store of unlock entries.

    Supports append at an index, peek by index, a pure scan over the matured
    prefix of a cursor range, and removal of a scanned prefix.
    """

    def __init__(self, journal: Optional[Journal] = None):
        self.entries: Dict[EntryKey, UnlockEntry] = {}
        self.journal = journal if journal is not None else Journal()

    def get(self, holder: str, index: int) -> UnlockEntry:
        """Return the entry at index, or UnlockEntry.ZERO if none is live there."""
        return self.entries.get((holder, index), UnlockEntry.ZERO)

    def append(self, holder: str, index: int, entry: UnlockEntry) -> None:
        """
        Write a new entry at index (the holder's current queue_end).

        Raises:
            ValueError: If index is out of range or the slot is already live
        """
        if index < 0 or index > UINT32_MAX:
            raise ValueError(f"index out of range: {index}")
        key = (holder, index)
        if key in self.entries:
            raise ValueError(f"unlock entry {index} for {holder} already exists")
        self.entries[key] = entry
        self.journal.record(lambda: self.entries.pop(key, None))

    def scan_matured(
        self,
        holder: str,
        start: int,
        end: int,
        now: datetime,
        max_entries: int = 0,
    ) -> Tuple[int, List[Tuple[int, UnlockEntry]]]:
        """
        Collect the matured prefix of [start, end) without modifying anything.

        The scan stops at the first immature entry, at end, or after
        max_entries entries when max_entries > 0. max_entries == 0 means no
        cap.

        Returns:
            (next_index, [(index, entry), ...]) where next_index is the new
            withdraw cursor
        """
        if max_entries < 0:
            raise ValueError(f"max_entries must be non-negative, got {max_entries}")
        matured: List[Tuple[int, UnlockEntry]] = []
        index = start
        while index < end and (max_entries == 0 or len(matured) < max_entries):
            entry = self.get(holder, index)
            if not entry.is_matured(now):
                break
            matured.append((index, entry))
            index += 1
        return index, matured

    def consume(self, holder: str, indices: List[int]) -> None:
        """Zero the given entries."""
        for index in indices:
            key = (holder, index)
            old = self.entries.pop(key, None)
            if old is not None:
                self.journal.record(lambda key=key, old=old: self.entries.__setitem__(key, old))

    def __len__(self) -> int:
        return len(self.entries)
