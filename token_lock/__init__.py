"""
token_lock - Custody Lock with Cooldown Withdrawals

Holders lock a designated fungible asset, unlock portions of it subject to a
fixed cooldown, and withdraw matured unlocks in bounded, resumable batches.
The operator may rescue any other asset sent to the lock by mistake.

Usage:
    from datetime import datetime, timedelta
    from token_lock import TokenLock, FungibleToken, TokenTransferPort

    safe = FungibleToken("SAFE", "Safe Token")
    port = TokenTransferPort([safe])
    lock = TokenLock("operator", "SAFE", timedelta(days=30),
                     transfer_port=port, initial_time=datetime(2025, 1, 1))

    safe.mint("alice", 1000)
    safe.approve("alice", port.custodian, 1000)
    lock.lock("alice", 1000)
    for _ in range(5):
        lock.unlock("alice", 100)

    lock.advance_time(datetime(2025, 1, 31))
    lock.withdraw("alice", 3)       # pays 300, cursor moves to 3
    lock.withdraw("alice")          # drains the rest: 200
"""

# Core types
from .core import (
    HolderAccount,
    UnlockEntry,
    LockConfig,
    Locked,
    Unlocked,
    Withdrawn,
    AssetTransferPort,
    AccessGate,
    TokenLockError,
    InvalidAssetAddress,
    InvalidCooldownPeriod,
    InvalidTokenAmount,
    UnlockAmountExceeded,
    Unauthorized,
    CannotRescueCustodiedAsset,
    TransferFailed,
    ArithmeticOverflow,
    ReentrantCall,
    UINT96_MAX,
    UINT64_MAX,
    UINT32_MAX,
    EPOCH,
    ZERO_ADDRESS,
    DEFAULT_COOLDOWN_PERIOD,
    DEFAULT_CUSTODIAN,
)

# Engine
from .journal import Journal
from .unlock_queue import UnlockQueue
from .balance_ledger import BalanceLedger
from .recovery import RecoveryService
from .token_lock import TokenLock

# Reference collaborators
from .assets import (
    FungibleToken,
    TokenTransferPort,
    InsufficientBalance,
    InsufficientAllowance,
)
from .access import OperatorGate

__all__ = [
    # Core
    'HolderAccount', 'UnlockEntry', 'LockConfig',
    'Locked', 'Unlocked', 'Withdrawn',
    'AssetTransferPort', 'AccessGate',
    'TokenLockError', 'InvalidAssetAddress', 'InvalidCooldownPeriod',
    'InvalidTokenAmount', 'UnlockAmountExceeded', 'Unauthorized',
    'CannotRescueCustodiedAsset', 'TransferFailed', 'ArithmeticOverflow',
    'ReentrantCall',
    'UINT96_MAX', 'UINT64_MAX', 'UINT32_MAX', 'EPOCH', 'ZERO_ADDRESS',
    'DEFAULT_COOLDOWN_PERIOD', 'DEFAULT_CUSTODIAN',
    # Engine
    'Journal', 'UnlockQueue', 'BalanceLedger', 'RecoveryService', 'TokenLock',
    # Reference collaborators
    'FungibleToken', 'TokenTransferPort', 'InsufficientBalance',
    'InsufficientAllowance', 'OperatorGate',
]

__version__ = '1.0.0'
