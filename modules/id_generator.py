"""
Local order identifiers.

Orders get a local id when they are queued so the ERP's answer can be
matched back to them. Parsing and stock reconciliation never use ids; the
generator is injected into the order service only.
"""

from __future__ import annotations

import itertools
from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Anything that hands out a fresh unique identifier on demand."""

    def new_id(self) -> str:
        ...


class UuidIdGenerator:
    """Random identifiers (uuid4 hex). Default in production."""

    def new_id(self) -> str:
        return uuid4().hex


class SequentialIdGenerator:
    """Deterministic identifiers: ``<prefix>1``, ``<prefix>2``, ..."""

    def __init__(self, prefix: str = "order-", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)

    def new_id(self) -> str:
        return f"{self._prefix}{next(self._counter)}"
