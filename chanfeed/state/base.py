"""Capability interface shared by every managed state component."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ManagedState(ABC):
    """
    Accumulated, entity-level state maintained from raw feed updates.

    The client only ever calls these three methods; it never reaches into the
    component's internals.
    """

    @abstractmethod
    def update(self, raw: Any) -> None:
        """Apply a raw update in place."""
        ...

    @abstractmethod
    def parse(self, raw: Any) -> Any:
        """Return a view of just this update, framed against the current state."""
        ...

    @abstractmethod
    def get_state(self) -> Any:
        """Return a snapshot of the accumulated state."""
        ...


def is_snapshot(rows: Any) -> bool:
    """A snapshot body is a list of rows; a single update is one flat row."""
    return isinstance(rows, list) and (not rows or isinstance(rows[0], list))
