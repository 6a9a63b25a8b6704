"""
assets.py - In-memory fungible tokens and a transfer port over them

Provides reference collaborators for the lock:
- FungibleToken: balances, allowances, transfer and transfer_from
- TokenTransferPort: an AssetTransferPort that moves registered tokens
  between holders and a single custodian wallet

transfer_in pulls with transfer_from (the holder must approve the custodian
first); transfer_out pushes with transfer from the custodian. The port
forwards whatever the token's transfer returns, so tokens that report
failure with False instead of raising are seen as such by the caller.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

from .core import DEFAULT_CUSTODIAN, TransferFailed, UINT96_MAX


class InsufficientBalance(TransferFailed):
    """Raised when a transfer exceeds the sender's balance."""
    pass


class InsufficientAllowance(TransferFailed):
    """Raised when transfer_from exceeds the approved allowance."""
    pass


class FungibleToken:
    """
    Minimal fungible token with integer base-unit balances.

    Example:
        token = FungibleToken("SAFE", "Safe Token")
        token.mint("alice", 1000)
        token.approve("alice", "token_lock", 1000)
        token.transfer_from("token_lock", "alice", "token_lock", 400)
    """

    def __init__(self, symbol: str, name: str = "", max_supply: int = UINT96_MAX):
        if not symbol or not symbol.strip():
            raise ValueError("Token symbol cannot be empty")
        self.symbol = symbol
        self.name = name or symbol
        self.max_supply = max_supply
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative, got {amount}")
        if self._total_supply + amount > self.max_supply:
            raise ValueError(f"{self.symbol}: mint of {amount} exceeds max supply {self.max_supply}")
        self._total_supply += amount
        self.balances[to] = self.balance_of(to) + amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative, got {amount}")
        self.allowances[(owner, spender)] = amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative, got {amount}")
        balance = self.balance_of(sender)
        if amount > balance:
            raise InsufficientBalance(
                f"{self.symbol}: {sender} balance {balance} < {amount}"
            )
        self.balances[sender] = balance - amount
        self.balances[to] = self.balance_of(to) + amount

    def transfer(self, sender: str, to: str, amount: int) -> Optional[bool]:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> Optional[bool]:
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise InsufficientAllowance(
                f"{self.symbol}: allowance {allowed} of {owner} to {spender} < {amount}"
            )
        self._move(owner, to, amount)
        self.allowances[(owner, spender)] = allowed - amount
        return True

    def __repr__(self) -> str:
        return f"FungibleToken({self.symbol}, supply={self._total_supply})"


class TokenTransferPort:
    """
    AssetTransferPort over a registry of FungibleToken instances.

    Attributes:
        custodian: Wallet identity of the lock at every registered token
        tokens: Registered tokens by symbol
    """

    def __init__(self, tokens: Iterable[FungibleToken] = (), custodian: str = DEFAULT_CUSTODIAN):
        self.custodian = custodian
        self.tokens: Dict[str, FungibleToken] = {}
        for token in tokens:
            self.register(token)

    def register(self, token: FungibleToken) -> None:
        if token.symbol in self.tokens:
            raise ValueError(f"Token {token.symbol} already registered")
        self.tokens[token.symbol] = token

    def list_tokens(self) -> List[str]:
        return sorted(self.tokens)

    def _token(self, asset: str) -> FungibleToken:
        token = self.tokens.get(asset)
        if token is None:
            raise TransferFailed(f"Token {asset} not registered")
        return token

    def transfer_in(self, asset: str, holder: str, amount: int) -> Optional[bool]:
        return self._token(asset).transfer_from(self.custodian, holder, self.custodian, amount)

    def transfer_out(self, asset: str, to: str, amount: int) -> Optional[bool]:
        return self._token(asset).transfer(self.custodian, to, amount)

    def balance_of(self, asset: str, holder: str) -> int:
        return self._token(asset).balance_of(holder)
