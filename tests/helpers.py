"""
helpers.py - Shared constants and helper functions for TokenLock tests
"""

from datetime import datetime, timedelta

from token_lock import TokenLock, FungibleToken, TokenTransferPort


T0 = datetime(2025, 1, 1)
COOLDOWN = timedelta(days=30)
OPERATOR = "operator"
SAFE = "SAFE"
FOREIGN = "TEST"


def fund(token: FungibleToken, port: TokenTransferPort, holder: str, amount: int) -> None:
    """Mint amount to holder and approve the custodian to pull it."""
    token.mint(holder, amount)
    token.approve(holder, port.custodian, token.allowance(holder, port.custodian) + amount)


def fund_and_lock(lock: TokenLock, token: FungibleToken, holder: str, amount: int) -> None:
    fund(token, lock.transfer_port, holder, amount)
    lock.lock(holder, amount)


def assert_queue_invariant(lock: TokenLock, holder: str) -> None:
    """queue_start <= queue_end and unlocked equals the live entries in range."""
    account = lock.get_holder_account(holder)
    assert account.queue_start <= account.queue_end
    live = sum(
        lock.get_unlock_entry(holder, i).amount
        for i in range(account.queue_start, account.queue_end)
    )
    assert live == account.unlocked
    assert lock.verify_custody()['valid']


def snapshot(lock: TokenLock, holder: str):
    """Capture everything a failed operation must leave unchanged."""
    account = lock.get_holder_account(holder)
    entries = {
        i: lock.get_unlock_entry(holder, i)
        for i in range(0, account.queue_end + 1)
    }
    return account, entries, list(lock.event_log)
