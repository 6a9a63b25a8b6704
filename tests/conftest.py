"""
conftest.py - Shared pytest fixtures for TokenLock tests

Provides:
- The custodied token, a foreign token, and a transfer port over both
- A fresh lock with a 30-day cooldown starting 2025-01-01
- A lock where alice already holds 1000 locked
"""

import pytest

from token_lock import TokenLock, FungibleToken, TokenTransferPort, OperatorGate

from tests.helpers import T0, COOLDOWN, OPERATOR, SAFE, FOREIGN, fund_and_lock


@pytest.fixture
def safe_token():
    return FungibleToken(SAFE, "Safe Token")


@pytest.fixture
def foreign_token():
    return FungibleToken(FOREIGN, "Test Token")


@pytest.fixture
def port(safe_token, foreign_token):
    return TokenTransferPort([safe_token, foreign_token])


@pytest.fixture
def gate():
    return OperatorGate(OPERATOR)


@pytest.fixture
def token_lock(port, gate):
    """Fresh lock over SAFE with a 30-day cooldown."""
    return TokenLock(
        OPERATOR, SAFE, COOLDOWN,
        transfer_port=port,
        access_gate=gate,
        initial_time=T0,
        verbose=False,
    )


@pytest.fixture
def alice_locked(token_lock, safe_token):
    """Lock with alice holding 1000 locked."""
    fund_and_lock(token_lock, safe_token, "alice", 1000)
    return token_lock
