"""
Core types and pure functions for the token lock.

This module provides the foundational data structures and protocols:
1. Constants: fixed-width bounds, the zero timestamp, the null asset address
2. Exceptions: TokenLockError and the domain-specific rejections
3. Immutable records: HolderAccount, UnlockEntry, LockConfig, event records
4. Protocols: AssetTransferPort and AccessGate (external collaborators)
5. Checked arithmetic: fixed-width add/sub that fail instead of wrapping

Nothing in this module mutates state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar, Optional, Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Fixed-width unsigned domains. Balances and entry amounts are uint96, which
# is wide enough to hold the entire supply of the custodied asset. Queue
# indices are uint32 and maturity timestamps are uint64 seconds.
UINT96_MAX = 2 ** 96 - 1
UINT64_MAX = 2 ** 64 - 1
UINT32_MAX = 2 ** 32 - 1

# The zero timestamp. Also the default initial time of a TokenLock.
EPOCH = datetime(1970, 1, 1)

# Null asset identifier (in addition to None and "").
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

DEFAULT_COOLDOWN_PERIOD = timedelta(days=1)

# Wallet identity of the lock itself at the transfer port.
DEFAULT_CUSTODIAN = "token_lock"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TokenLockError(Exception):
    """Base exception for all token lock errors."""
    pass


class InvalidAssetAddress(TokenLockError):
    """Raised when the custodied asset identifier is null."""
    pass


class InvalidCooldownPeriod(TokenLockError):
    """Raised when the cooldown period is zero or negative."""
    pass


class InvalidTokenAmount(TokenLockError):
    """Raised when lock or unlock is called with a zero amount."""
    pass


class UnlockAmountExceeded(TokenLockError):
    """Raised when an unlock asks for more than the holder's locked balance."""
    pass


class Unauthorized(TokenLockError):
    """Raised when a non-operator calls a privileged operation."""
    pass


class CannotRescueCustodiedAsset(TokenLockError):
    """Raised when the recovery path is pointed at the custodied asset."""
    pass


class TransferFailed(TokenLockError):
    """Raised when an upstream asset transfer fails or reports failure."""
    pass


class ArithmeticOverflow(TokenLockError):
    """Raised when a value would leave its fixed-width unsigned domain."""
    pass


class ReentrantCall(TokenLockError):
    """Raised when a mutating operation is entered while another is in progress."""
    pass


# ============================================================================
# VALIDATION
# ============================================================================

def is_null_asset(asset: Optional[str]) -> bool:
    """Return True for None, blank strings and the zero address."""
    if asset is None:
        return True
    if not isinstance(asset, str):
        return False
    return not asset.strip() or asset.lower() == ZERO_ADDRESS


def require_amount(amount: Any) -> int:
    """
    Validate a token amount for lock/unlock.

    Raises:
        InvalidTokenAmount: If amount is not a positive int (bool excluded)
        ArithmeticOverflow: If amount does not fit uint96
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidTokenAmount(f"amount must be an int, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidTokenAmount(f"amount must be positive, got {amount}")
    if amount > UINT96_MAX:
        raise ArithmeticOverflow(f"amount {amount} exceeds uint96")
    return amount


# ============================================================================
# CHECKED ARITHMETIC
# ============================================================================

def checked_add(value: int, delta: int, bound: int = UINT96_MAX, what: str = "value") -> int:
    """Add delta to value, failing instead of wrapping past bound."""
    result = value + delta
    if result > bound:
        raise ArithmeticOverflow(f"{what} overflow: {value} + {delta} > {bound}")
    return result


def checked_sub(value: int, delta: int, what: str = "value") -> int:
    """Subtract delta from value, failing instead of wrapping below zero."""
    if delta > value:
        raise ArithmeticOverflow(f"{what} underflow: {value} - {delta} < 0")
    return value - delta


def maturity_after(now: datetime, cooldown: timedelta) -> datetime:
    """
    Compute now + cooldown within the uint64-seconds timestamp domain.

    Raises:
        ArithmeticOverflow: If the result cannot be represented
    """
    try:
        matures_at = now + cooldown
    except OverflowError as e:
        raise ArithmeticOverflow(f"maturity overflow: {now} + {cooldown}") from e
    if (matures_at - EPOCH).total_seconds() > UINT64_MAX:
        raise ArithmeticOverflow(f"maturity {matures_at} exceeds uint64 seconds")
    return matures_at


# ============================================================================
# RECORDS
# ============================================================================

def _check_uint(value: Any, bound: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > bound:
        raise ValueError(f"{name} out of range: {value}")


@dataclass(frozen=True, slots=True)
class HolderAccount:
    """
    Per-holder balances and withdraw cursors.

    Attributes:
        locked: Amount deposited and not yet requested for release
        unlocked: Amount requested for release and not yet withdrawn
        queue_start: Index of the first unconsumed unlock entry (withdraw cursor)
        queue_end: Index the next unlock entry will be written at

    Invariant: queue_start <= queue_end, and unlocked equals the sum of the
    entry amounts in [queue_start, queue_end).
    """
    locked: int = 0
    unlocked: int = 0
    queue_start: int = 0
    queue_end: int = 0

    def __post_init__(self):
        _check_uint(self.locked, UINT96_MAX, "locked")
        _check_uint(self.unlocked, UINT96_MAX, "unlocked")
        _check_uint(self.queue_start, UINT32_MAX, "queue_start")
        _check_uint(self.queue_end, UINT32_MAX, "queue_end")
        if self.queue_start > self.queue_end:
            raise ValueError(
                f"queue_start {self.queue_start} > queue_end {self.queue_end}"
            )

    @property
    def total(self) -> int:
        """The holder's full claim on the lock: locked + unlocked."""
        return self.locked + self.unlocked

    @property
    def pending_count(self) -> int:
        return self.queue_end - self.queue_start

    def is_zero(self) -> bool:
        return self == HolderAccount()


@dataclass(frozen=True, slots=True)
class UnlockEntry:
    """
    A pending release request.

    Attributes:
        amount: Amount released by this request
        matures_at: Earliest time the entry may be withdrawn

    Consumed and never-created entries read as UnlockEntry.ZERO.
    """
    amount: int = 0
    matures_at: datetime = EPOCH

    ZERO: ClassVar['UnlockEntry']

    def __post_init__(self):
        _check_uint(self.amount, UINT96_MAX, "amount")
        if not isinstance(self.matures_at, datetime):
            raise ValueError(f"matures_at must be datetime, got {type(self.matures_at).__name__}")

    def is_matured(self, now: datetime) -> bool:
        return self.matures_at <= now


UnlockEntry.ZERO = UnlockEntry()


@dataclass(frozen=True, slots=True)
class LockConfig:
    """
    Immutable configuration fixed at construction.

    Attributes:
        custodied_asset: Identifier of the asset held in custody
        cooldown_period: Delay between an unlock and its maturity
    """
    custodied_asset: str
    cooldown_period: timedelta = DEFAULT_COOLDOWN_PERIOD

    def __post_init__(self):
        if is_null_asset(self.custodied_asset):
            raise InvalidAssetAddress("custodied asset cannot be null")
        if not isinstance(self.cooldown_period, timedelta):
            raise InvalidCooldownPeriod(
                f"cooldown_period must be timedelta, got {type(self.cooldown_period).__name__}"
            )
        if self.cooldown_period <= timedelta(0):
            raise InvalidCooldownPeriod(f"cooldown_period must be positive, got {self.cooldown_period}")


# ============================================================================
# EVENT RECORDS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Locked:
    """Emitted once per successful lock."""
    holder: str
    amount: int
    timestamp: datetime = EPOCH
    sequence_number: int = 0

    def __repr__(self) -> str:
        return f"Locked({self.holder}, {self.amount})"


@dataclass(frozen=True, slots=True)
class Unlocked:
    """Emitted once per successful unlock, carrying the new entry's index."""
    holder: str
    index: int
    amount: int
    timestamp: datetime = EPOCH
    sequence_number: int = 0

    def __repr__(self) -> str:
        return f"Unlocked({self.holder}, #{self.index}, {self.amount})"


@dataclass(frozen=True, slots=True)
class Withdrawn:
    """Emitted once per consumed unlock entry (not once per withdraw call)."""
    holder: str
    index: int
    amount: int
    timestamp: datetime = EPOCH
    sequence_number: int = 0

    def __repr__(self) -> str:
        return f"Withdrawn({self.holder}, #{self.index}, {self.amount})"


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class AssetTransferPort(Protocol):
    """
    Moves assets between holders and the lock's custody wallet.

    transfer_in pulls from a holder into custody; transfer_out pushes from
    custody to a recipient. Either may raise, and either may return False
    to report failure without raising. A None return counts as success.
    """

    def transfer_in(self, asset: str, holder: str, amount: int) -> Optional[bool]:
        ...

    def transfer_out(self, asset: str, to: str, amount: int) -> Optional[bool]:
        ...

    def balance_of(self, asset: str, holder: str) -> int:
        ...


@runtime_checkable
class AccessGate(Protocol):
    """Answers whether a caller is the privileged operator."""

    def is_operator(self, caller: str) -> bool:
        ...
