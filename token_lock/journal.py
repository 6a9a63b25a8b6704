"""
journal.py - Undo journal for all-or-nothing operations

Every state write in the lock records how to undo itself. A public operation
runs inside Journal.atomic(): if it raises, every write made since it began
is undone in reverse order, including writes made inside nested scopes.
Only the outermost scope clears the journal on success.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, List


Undo = Callable[[], None]


class Journal:
    """
    Stack of undo closures with nested atomic scopes.

    Example:
        journal = Journal()
        with journal.atomic():
            old = store.get(key)
            store[key] = new
            journal.record(lambda: store.__setitem__(key, old))
            raise TransferFailed()   # store[key] is restored
    """

    def __init__(self):
        self._undo: List[Undo] = []
        self._depth: int = 0

    @property
    def depth(self) -> int:
        """Number of atomic scopes currently open."""
        return self._depth

    def __len__(self) -> int:
        return len(self._undo)

    def record(self, undo: Undo) -> None:
        """Register how to reverse a write that has just been applied."""
        if self._depth == 0:
            return
        self._undo.append(undo)

    def rollback(self, mark: int) -> None:
        """Undo every write recorded after mark, newest first."""
        while len(self._undo) > mark:
            self._undo.pop()()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        mark = len(self._undo)
        self._depth += 1
        try:
            yield
        except BaseException:
            self.rollback(mark)
            raise
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._undo.clear()
