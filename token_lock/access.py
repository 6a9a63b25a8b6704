"""
access.py - Single-operator access gate

The operator is fixed at construction and can only be handed over in two
steps: the current operator nominates a successor, and the successor
accepts. Until acceptance the current operator keeps full rights.
"""

from __future__ import annotations
from typing import Optional

from .core import Unauthorized


class OperatorGate:
    """AccessGate with a single operator and two-step handover."""

    def __init__(self, operator: str):
        if not operator or not operator.strip():
            raise ValueError("operator cannot be empty")
        self._operator = operator
        self._pending: Optional[str] = None

    @property
    def operator(self) -> str:
        return self._operator

    @property
    def pending_operator(self) -> Optional[str]:
        return self._pending

    def is_operator(self, caller: str) -> bool:
        return caller == self._operator

    def transfer_operator(self, caller: str, new_operator: Optional[str]) -> None:
        """
        Nominate new_operator. Passing None cancels a pending nomination.

        Raises:
            Unauthorized: If caller is not the operator
        """
        if not self.is_operator(caller):
            raise Unauthorized(f"{caller} is not the operator")
        self._pending = new_operator

    def accept_operator(self, caller: str) -> None:
        """
        Complete a handover.

        Raises:
            Unauthorized: If caller is not the pending operator
        """
        if self._pending is None or caller != self._pending:
            raise Unauthorized(f"{caller} is not the pending operator")
        self._operator = caller
        self._pending = None

    def __repr__(self) -> str:
        return f"OperatorGate(operator={self._operator}, pending={self._pending})"
