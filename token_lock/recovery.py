"""
recovery.py - Operator recovery of foreign assets

Assets other than the custodied one can end up in the lock's custody wallet
by mistake. The operator may send them back out. The custodied asset is
never reachable through this path, whatever the amount or destination.
"""

from __future__ import annotations
from typing import Optional

from .core import (
    AccessGate, AssetTransferPort,
    CannotRescueCustodiedAsset, InvalidAssetAddress, TokenLockError,
    TransferFailed, Unauthorized,
    is_null_asset,
)


class RecoveryService:
    """Operator-gated, asset-restricted transfer-out."""

    def __init__(self, custodied_asset: str, transfer_port: AssetTransferPort, access_gate: AccessGate):
        self.custodied_asset = custodied_asset
        self.transfer_port = transfer_port
        self.access_gate = access_gate

    def rescue(self, caller: str, asset: str, amount: int, to: Optional[str] = None) -> str:
        """
        Transfer amount of a foreign asset from custody to `to` (default: caller).

        Returns:
            The recipient

        Raises:
            Unauthorized: If caller is not the operator
            CannotRescueCustodiedAsset: If asset is the custodied asset
            InvalidAssetAddress: If asset is null
            TransferFailed: If the asset's transfer raises or returns False
            ValueError: If amount is not a non-negative int
        """
        if not self.access_gate.is_operator(caller):
            raise Unauthorized(f"{caller} is not the operator")
        if asset == self.custodied_asset:
            raise CannotRescueCustodiedAsset(f"{asset} is held in custody for holders")
        if is_null_asset(asset):
            raise InvalidAssetAddress("cannot rescue the null asset")
        check_rescue_amount(amount)
        recipient = to if to is not None else caller
        call_transfer(self.transfer_port.transfer_out, asset, recipient, amount)
        return recipient


def check_rescue_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValueError(f"amount must be a non-negative int, got {amount!r}")


def call_transfer(transfer, asset: str, counterparty: str, amount: int) -> None:
    """
    Invoke a port transfer and normalise its outcome.

    Assets differ in how they report failure: some raise, some return False,
    and some return nothing at all on success. False is a failure even
    without an exception; None is success.
    """
    try:
        ok = transfer(asset, counterparty, amount)
    except TokenLockError:
        raise
    except Exception as e:
        raise TransferFailed(f"{asset} transfer of {amount} with {counterparty} failed: {e}") from e
    if ok is False:
        raise TransferFailed(f"{asset} transfer of {amount} with {counterparty} returned False")
