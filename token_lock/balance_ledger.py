"""
balance_ledger.py - Per-holder locked/unlocked balances

Stores one HolderAccount per holder identity. Accounts are created lazily on
first write and never deleted; an account that returns to all zeros reads
the same as one that never existed. Records are immutable, so every update
replaces the holder's record and journals the previous one.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, List, Optional

from .core import (
    HolderAccount,
    UnlockAmountExceeded,
    UINT32_MAX, UINT96_MAX,
    checked_add, checked_sub,
)
from .journal import Journal


class BalanceLedger:
    """
    Mapping from holder identity to HolderAccount.

    The mutators enforce fixed-width bounds and the locked/unlocked
    bookkeeping rules; keeping unlocked equal to the sum of live queue
    entries is the caller's job, since the queue lives elsewhere.
    """

    def __init__(self, journal: Optional[Journal] = None):
        self.accounts: Dict[str, HolderAccount] = {}
        self.journal = journal if journal is not None else Journal()

    def get(self, holder: str) -> HolderAccount:
        """Return the holder's account (all zeros if never written)."""
        return self.accounts.get(holder, HolderAccount())

    def holders(self) -> List[str]:
        """Holders with an account record, sorted for determinism."""
        return sorted(self.accounts)

    def _put(self, holder: str, account: HolderAccount) -> None:
        previous = self.accounts.get(holder)
        self.accounts[holder] = account
        if previous is None:
            self.journal.record(lambda: self.accounts.pop(holder, None))
        else:
            self.journal.record(lambda: self.accounts.__setitem__(holder, previous))

    def credit_locked(self, holder: str, amount: int) -> HolderAccount:
        """
        Add a deposit to the holder's locked balance.

        Raises:
            ArithmeticOverflow: If locked + unlocked would exceed uint96
        """
        account = self.get(holder)
        # The holder's total claim must stay representable too.
        checked_add(account.total, amount, UINT96_MAX, "holder total")
        updated = replace(account, locked=checked_add(account.locked, amount, UINT96_MAX, "locked"))
        self._put(holder, updated)
        return updated

    def move_to_unlocked(self, holder: str, amount: int) -> int:
        """
        Move amount from locked to unlocked and reserve the next queue index.

        Returns:
            The index reserved for the new unlock entry (the old queue_end)

        Raises:
            UnlockAmountExceeded: If amount > locked
            ArithmeticOverflow: If queue_end would exceed uint32
        """
        account = self.get(holder)
        if amount > account.locked:
            raise UnlockAmountExceeded(
                f"{holder}: unlock {amount} exceeds locked {account.locked}"
            )
        index = account.queue_end
        updated = replace(
            account,
            locked=account.locked - amount,
            unlocked=checked_add(account.unlocked, amount, UINT96_MAX, "unlocked"),
            queue_end=checked_add(index, 1, UINT32_MAX, "queue_end"),
        )
        self._put(holder, updated)
        return index

    def settle_withdrawal(self, holder: str, next_start: int, total: int) -> HolderAccount:
        """
        Advance the withdraw cursor to next_start and debit total from unlocked.

        queue_end is never touched here.
        """
        account = self.get(holder)
        if next_start < account.queue_start or next_start > account.queue_end:
            raise ValueError(
                f"{holder}: cursor {next_start} outside [{account.queue_start}, {account.queue_end}]"
            )
        if next_start == account.queue_start and total == 0:
            return account
        updated = replace(
            account,
            unlocked=checked_sub(account.unlocked, total, "unlocked"),
            queue_start=next_start,
        )
        self._put(holder, updated)
        return updated
