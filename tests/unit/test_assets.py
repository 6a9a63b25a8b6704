"""
test_assets.py - Unit tests for the reference collaborators

Tests:
- FungibleToken mint / approve / transfer / transfer_from
- TokenTransferPort pulls via allowance and pushes from the custodian
- OperatorGate two-step handover
"""

import pytest

from token_lock import (
    FungibleToken, TokenTransferPort, OperatorGate,
    InsufficientBalance, InsufficientAllowance, TransferFailed, Unauthorized,
    AssetTransferPort, AccessGate, DEFAULT_CUSTODIAN,
)
from tests.fake_tokens import FalseReturningToken, SilentToken


class TestFungibleToken:

    def test_mint_and_balance(self):
        token = FungibleToken("SAFE")
        token.mint("alice", 100)
        assert token.balance_of("alice") == 100
        assert token.balance_of("bob") == 0
        assert token.total_supply == 100

    def test_mint_respects_max_supply(self):
        token = FungibleToken("SAFE", max_supply=10)
        with pytest.raises(ValueError, match="max supply"):
            token.mint("alice", 11)

    def test_transfer(self):
        token = FungibleToken("SAFE")
        token.mint("alice", 100)
        assert token.transfer("alice", "bob", 40) is True
        assert token.balance_of("alice") == 60
        assert token.balance_of("bob") == 40

    def test_transfer_insufficient(self):
        token = FungibleToken("SAFE")
        token.mint("alice", 10)
        with pytest.raises(InsufficientBalance):
            token.transfer("alice", "bob", 11)
        assert token.balance_of("alice") == 10

    def test_transfer_from_consumes_allowance(self):
        token = FungibleToken("SAFE")
        token.mint("alice", 100)
        token.approve("alice", "spender", 70)
        token.transfer_from("spender", "alice", "carol", 50)
        assert token.allowance("alice", "spender") == 20
        assert token.balance_of("carol") == 50

    def test_transfer_from_without_allowance(self):
        token = FungibleToken("SAFE")
        token.mint("alice", 100)
        with pytest.raises(InsufficientAllowance):
            token.transfer_from("spender", "alice", "carol", 1)

    def test_errors_are_transfer_failures(self):
        assert issubclass(InsufficientBalance, TransferFailed)
        assert issubclass(InsufficientAllowance, TransferFailed)

    def test_empty_symbol_rejected(self):
        with pytest.raises(ValueError):
            FungibleToken("")


class TestTokenTransferPort:

    def test_satisfies_protocol(self):
        assert isinstance(TokenTransferPort(), AssetTransferPort)
        assert TokenTransferPort().custodian == DEFAULT_CUSTODIAN

    def test_transfer_in_and_out(self):
        token = FungibleToken("SAFE")
        port = TokenTransferPort([token])
        token.mint("alice", 100)
        token.approve("alice", port.custodian, 100)
        port.transfer_in("SAFE", "alice", 60)
        assert port.balance_of("SAFE", port.custodian) == 60
        port.transfer_out("SAFE", "bob", 25)
        assert token.balance_of("bob") == 25
        assert port.balance_of("SAFE", port.custodian) == 35

    def test_unknown_token(self):
        with pytest.raises(TransferFailed, match="not registered"):
            TokenTransferPort().transfer_out("NOPE", "bob", 1)

    def test_duplicate_registration(self):
        port = TokenTransferPort([FungibleToken("SAFE")])
        with pytest.raises(ValueError):
            port.register(FungibleToken("SAFE"))
        assert port.list_tokens() == ["SAFE"]

    def test_forwards_false_and_none(self):
        port = TokenTransferPort([FalseReturningToken("BAD"), SilentToken("QUIET")])
        assert port.transfer_out("BAD", "bob", 1) is False
        port.tokens["QUIET"].mint(port.custodian, 1)
        assert port.transfer_out("QUIET", "bob", 1) is None


class TestOperatorGate:

    def test_satisfies_protocol(self):
        assert isinstance(OperatorGate("op"), AccessGate)

    def test_is_operator(self):
        gate = OperatorGate("op")
        assert gate.is_operator("op")
        assert not gate.is_operator("alice")

    def test_two_step_handover(self):
        gate = OperatorGate("op")
        gate.transfer_operator("op", "new")
        assert gate.pending_operator == "new"
        assert gate.is_operator("op")
        assert not gate.is_operator("new")
        gate.accept_operator("new")
        assert gate.operator == "new"
        assert gate.pending_operator is None
        assert not gate.is_operator("op")

    def test_only_operator_nominates(self):
        gate = OperatorGate("op")
        with pytest.raises(Unauthorized):
            gate.transfer_operator("alice", "alice")

    def test_only_nominee_accepts(self):
        gate = OperatorGate("op")
        gate.transfer_operator("op", "new")
        with pytest.raises(Unauthorized):
            gate.accept_operator("alice")
        with pytest.raises(Unauthorized):
            OperatorGate("op").accept_operator("op")

    def test_cancel_nomination(self):
        gate = OperatorGate("op")
        gate.transfer_operator("op", "new")
        gate.transfer_operator("op", None)
        with pytest.raises(Unauthorized):
            gate.accept_operator("new")

    def test_empty_operator_rejected(self):
        with pytest.raises(ValueError):
            OperatorGate("")
