"""
token_lock.py - Custody lock with cooldown-gated withdrawals

The TokenLock class is the public surface of the package and the only place
that combines the balance ledger, the unlock queue and the external
collaborators.

Key responsibilities:
    - lock: credit a holder's locked balance and pull the custodied asset in
    - unlock: move locked to unlocked and queue an entry that matures after
      the cooldown
    - withdraw: pay out the matured prefix of a holder's queue, bounded by a
      caller-supplied cap, resuming from the holder's cursor on the next call
    - rescue_token: operator recovery of any asset other than the custodied one
    - read-only queries, a logical clock, and an append-only event log

Every mutating operation is all-or-nothing. Bookkeeping is finalised before
the external transfer call, and a mutating call made while another operation
is in progress (an asset calling back from inside a transfer) is rejected
with ReentrantCall. Queries stay available to such callbacks.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Union

from .core import (
    # Types
    HolderAccount, UnlockEntry, LockConfig,
    Locked, Unlocked, Withdrawn,
    AccessGate, AssetTransferPort,
    # Constants
    DEFAULT_COOLDOWN_PERIOD, DEFAULT_CUSTODIAN, EPOCH, UINT96_MAX,
    # Exceptions
    ReentrantCall, TokenLockError,
    # Helpers
    checked_add, maturity_after, require_amount,
)
from .access import OperatorGate
from .balance_ledger import BalanceLedger
from .journal import Journal
from .recovery import RecoveryService, call_transfer, check_rescue_amount
from .unlock_queue import UnlockQueue


LockEvent = Union[Locked, Unlocked, Withdrawn]


class TokenLock:
    """
    Custody ledger for a single fungible asset.

    Thread Safety:
        Not thread-safe. Operations are atomic, and a mutating call made
        from inside an asset transfer is rejected with ReentrantCall. Nothing
        guards against concurrent calls from threads.

    Example:
        token = FungibleToken("SAFE", "Safe Token")
        port = TokenTransferPort([token])
        lock = TokenLock("operator", "SAFE", timedelta(days=30), transfer_port=port)

        token.mint("alice", 1000)
        token.approve("alice", port.custodian, 1000)
        lock.lock("alice", 1000)
        lock.unlock("alice", 400)
        lock.advance_time(lock.current_time + timedelta(days=30))
        lock.withdraw("alice")          # -> 400
    """

    def __init__(
        self,
        operator: str,
        custodied_asset: str,
        cooldown_period: timedelta = DEFAULT_COOLDOWN_PERIOD,
        *,
        transfer_port: AssetTransferPort,
        access_gate: Optional[AccessGate] = None,
        initial_time: Optional[datetime] = None,
        verbose: bool = True,
    ):
        """
        Create a lock.

        Args:
            operator: Identity allowed to rescue foreign assets
            custodied_asset: Identifier of the asset held for holders
            cooldown_period: Delay between unlock and maturity (default: 1 day)
            transfer_port: Moves assets in and out of custody
            access_gate: Operator check (default: OperatorGate(operator))
            initial_time: Starting logical time (default: 1970-01-01)
            verbose: Print one line per applied or rejected operation

        Raises:
            InvalidAssetAddress: If custodied_asset is null
            InvalidCooldownPeriod: If cooldown_period is not positive
        """
        self.config = LockConfig(custodied_asset, cooldown_period)
        self.operator = operator
        self.transfer_port = transfer_port
        self.access_gate = access_gate if access_gate is not None else OperatorGate(operator)
        self.verbose = verbose
        self._current_time: datetime = initial_time or EPOCH

        self.journal = Journal()
        self.balances = BalanceLedger(self.journal)
        self.queue = UnlockQueue(self.journal)
        self.recovery = RecoveryService(custodied_asset, transfer_port, self.access_gate)

        self.event_log: List[LockEvent] = []
        self._next_sequence: int = 0
        self._in_operation: bool = False

    # ========================================================================
    # CONFIGURATION & TIME
    # ========================================================================

    @property
    def custodied_asset(self) -> str:
        return self.config.custodied_asset

    @property
    def cooldown_period(self) -> timedelta:
        return self.config.cooldown_period

    @property
    def current_time(self) -> datetime:
        """Current logical time of the lock."""
        return self._current_time

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # QUERIES (read-only)
    # ========================================================================

    def get_holder_account(self, holder: str) -> HolderAccount:
        """Return (locked, unlocked, queue_start, queue_end) for holder."""
        return self.balances.get(holder)

    def get_unlock_entry(self, holder: str, index: int) -> UnlockEntry:
        """Return the entry at index; UnlockEntry.ZERO if consumed or never created."""
        return self.queue.get(holder, index)

    def get_holder_total_balance(self, holder: str) -> int:
        """Return locked + unlocked: the holder's full claim on the lock."""
        return self.balances.get(holder).total

    def list_holders(self) -> List[str]:
        return self.balances.holders()

    def total_locked(self) -> int:
        return sum(self.balances.get(h).locked for h in self.balances.holders())

    def total_unlocked(self) -> int:
        return sum(self.balances.get(h).unlocked for h in self.balances.holders())

    def preview_withdraw(self, holder: str, max_entries: int = 0) -> int:
        """Return what withdraw(holder, max_entries) would pay at the current time."""
        _check_max_entries(max_entries)
        account = self.balances.get(holder)
        _, matured = self.queue.scan_matured(
            holder, account.queue_start, account.queue_end, self._current_time, max_entries
        )
        return sum(entry.amount for _, entry in matured)

    def verify_custody(self) -> Dict[str, Any]:
        """
        Reconcile the books against the queue and the custody wallet.

        Checks, for every holder, that live entries lie inside
        [queue_start, queue_end) and sum to unlocked, and that total
        liabilities do not exceed the custodied balance at the port.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every check passed
            - 'liabilities': int - sum of locked + unlocked over holders
            - 'custody_balance': int - custodied asset held by the custodian
            - 'discrepancies': List[Dict] - one entry per failed check
        """
        discrepancies: List[Dict[str, Any]] = []
        sums: Dict[str, int] = {}

        for (holder, index), entry in self.queue.entries.items():
            account = self.balances.get(holder)
            if not account.queue_start <= index < account.queue_end:
                discrepancies.append({
                    'holder': holder,
                    'index': index,
                    'error': 'live entry outside cursor range',
                })
            else:
                sums[holder] = sums.get(holder, 0) + entry.amount

        liabilities = 0
        for holder in self.balances.holders():
            account = self.balances.get(holder)
            liabilities += account.total
            queued = sums.get(holder, 0)
            if queued != account.unlocked:
                discrepancies.append({
                    'holder': holder,
                    'expected': account.unlocked,
                    'actual': queued,
                    'error': 'unlocked does not match queued entries',
                })

        custodian = getattr(self.transfer_port, 'custodian', DEFAULT_CUSTODIAN)
        custody_balance = self.transfer_port.balance_of(self.custodied_asset, custodian)
        if liabilities > custody_balance:
            discrepancies.append({
                'expected': liabilities,
                'actual': custody_balance,
                'error': 'custody balance below liabilities',
            })

        return {
            'valid': len(discrepancies) == 0,
            'liabilities': liabilities,
            'custody_balance': custody_balance,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # OPERATIONS (mutating)
    # ========================================================================

    def lock(self, holder: str, amount: int) -> None:
        """
        Deposit amount of the custodied asset and credit it as locked.

        Raises:
            InvalidTokenAmount: If amount is zero
            TransferFailed: If the asset cannot be pulled from holder
        """
        _check_holder(holder)
        with self._operation("lock", holder):
            amount = require_amount(amount)
            self.balances.credit_locked(holder, amount)
            self._emit(Locked(holder, amount))
            call_transfer(self.transfer_port.transfer_in, self.custodied_asset, holder, amount)
        if self.verbose:
            print(f"✓ LOCKED: {holder} {amount} {self.custodied_asset}")

    def unlock(self, holder: str, amount: int) -> int:
        """
        Request release of amount from the holder's locked balance.

        The amount moves to unlocked immediately and becomes withdrawable
        once the cooldown has elapsed.

        Returns:
            Index of the new unlock entry

        Raises:
            InvalidTokenAmount: If amount is zero
            UnlockAmountExceeded: If amount exceeds the locked balance
        """
        _check_holder(holder)
        with self._operation("unlock", holder):
            amount = require_amount(amount)
            matures_at = maturity_after(self._current_time, self.cooldown_period)
            index = self.balances.move_to_unlocked(holder, amount)
            self.queue.append(holder, index, UnlockEntry(amount, matures_at))
            self._emit(Unlocked(holder, index, amount))
        if self.verbose:
            print(f"✓ UNLOCKED: {holder} #{index} {amount} {self.custodied_asset} (matures {matures_at})")
        return index

    def withdraw(self, holder: str, max_entries: int = 0) -> int:
        """
        Pay out matured unlock entries starting at the holder's cursor.

        Args:
            holder: Holder withdrawing
            max_entries: Process at most this many entries; 0 drains every
                matured entry

        The scan stops at the first immature entry, at queue_end, or at the
        cap. Consumed entries are zeroed and the cursor advances past them.
        Returns 0 without transferring if nothing has matured.

        Returns:
            Amount transferred to holder
        """
        _check_holder(holder)
        _check_max_entries(max_entries)
        with self._operation("withdraw", holder):
            account = self.balances.get(holder)
            next_index, matured = self.queue.scan_matured(
                holder, account.queue_start, account.queue_end, self._current_time, max_entries
            )
            total = 0
            for index, entry in matured:
                total = checked_add(total, entry.amount, UINT96_MAX, "withdraw total")
                self._emit(Withdrawn(holder, index, entry.amount))
            self.queue.consume(holder, [index for index, _ in matured])
            self.balances.settle_withdrawal(holder, next_index, total)
            if total > 0:
                call_transfer(self.transfer_port.transfer_out, self.custodied_asset, holder, total)
        if self.verbose and matured:
            print(f"✓ WITHDRAWN: {holder} {total} {self.custodied_asset} ({len(matured)} entries)")
        return total

    def rescue_token(self, caller: str, asset: str, amount: int, to: Optional[str] = None) -> None:
        """
        Send a foreign asset held in custody to `to` (default: caller).

        Raises:
            Unauthorized: If caller is not the operator
            CannotRescueCustodiedAsset: If asset is the custodied asset
            TransferFailed: If the transfer raises or returns False
            ValueError: If amount is not a non-negative int
        """
        check_rescue_amount(amount)
        with self._operation("rescue_token", caller):
            recipient = self.recovery.rescue(caller, asset, amount, to)
        if self.verbose:
            print(f"✓ RESCUED: {amount} {asset} -> {recipient}")

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @contextmanager
    def _operation(self, name: str, who: str) -> Iterator[None]:
        """
        Run one public operation atomically, reporting rejections.

        Operations do not nest. An external transfer cannot be undone by the
        journal, so a callback that re-enters the lock must not be able to
        pay out against state the outer operation may still roll back.
        """
        try:
            if self._in_operation:
                raise ReentrantCall(f"{name} called while another operation is in progress")
            self._in_operation = True
            try:
                with self.journal.atomic():
                    yield
            finally:
                self._in_operation = False
        except TokenLockError as e:
            if self.verbose:
                print(f"✗ REJECTED: {name} by {who}: {type(e).__name__}: {e}")
            raise

    def _emit(self, event: LockEvent) -> None:
        sequence = self._next_sequence
        stamped = replace(event, timestamp=self._current_time, sequence_number=sequence)
        self._next_sequence = sequence + 1
        self.event_log.append(stamped)

        def undo():
            self.event_log.pop()
            self._next_sequence = sequence

        self.journal.record(undo)


def _check_holder(holder: str) -> None:
    if not isinstance(holder, str) or not holder.strip():
        raise ValueError("holder cannot be empty")


def _check_max_entries(max_entries: int) -> None:
    if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries < 0:
        raise ValueError(f"max_entries must be a non-negative int, got {max_entries!r}")
