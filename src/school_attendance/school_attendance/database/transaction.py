from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from .connection import DatabaseConnection
from .mysql_base import transaction


class TransactionManager(Protocol):
    """Unit-of-work boundary used by services for multi-row state changes."""

    def atomic(self) -> AbstractContextManager:
        """Read-write block: all repository writes inside commit or roll back together."""

        raise NotImplementedError

    def snapshot(self) -> AbstractContextManager:
        """Read-only block: all reads inside see one consistent snapshot."""

        raise NotImplementedError


class MySQLTransactionManager(TransactionManager):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def atomic(self) -> AbstractContextManager:
        return transaction(self._conn_factory)

    def snapshot(self) -> AbstractContextManager:
        return transaction(self._conn_factory, readonly=True, consistent_snapshot=True)
