"""
Shared construction and random-operation driver for conformance tests.
"""

from datetime import timedelta

from hypothesis import strategies as st

from token_lock import TokenLock, FungibleToken, TokenTransferPort, TokenLockError

from tests.helpers import T0, COOLDOWN, OPERATOR, SAFE, fund


HOLDERS = ["alice", "bob", "carol"]


def make_lock():
    """Fresh lock with every holder funded and approved for 10,000."""
    token = FungibleToken(SAFE, "Safe Token")
    port = TokenTransferPort([token])
    lock = TokenLock(OPERATOR, SAFE, COOLDOWN, transfer_port=port, initial_time=T0, verbose=False)
    for holder in HOLDERS:
        fund(token, port, holder, 10_000)
    return lock, token


operations = st.lists(
    st.tuples(
        st.sampled_from(["lock", "unlock", "withdraw", "advance"]),
        st.sampled_from(HOLDERS),
        st.integers(min_value=0, max_value=3_000),
    ),
    max_size=40,
)


def apply(lock: TokenLock, op: str, holder: str, value: int) -> bool:
    """Apply one operation; return False if the lock rejected it."""
    try:
        if op == "lock":
            lock.lock(holder, value)
        elif op == "unlock":
            lock.unlock(holder, value)
        elif op == "withdraw":
            lock.withdraw(holder, value % 4)
        else:
            lock.advance_time(lock.current_time + timedelta(days=value % 45))
    except TokenLockError:
        return False
    return True
