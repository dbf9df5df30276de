"""Money transfers carried out as single database transactions."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from simplebank.models import Account, Entry, Transfer
from simplebank.queries import Queries

logger = logging.getLogger(__name__)


class TransactionError(RuntimeError):
    """Raised when a failed transaction could not be rolled back either."""


@dataclass
class TransferTxResult:
    """Everything a transfer transaction created or changed."""

    transfer: Transfer
    from_account: Account
    to_account: Account
    from_entry: Entry
    to_entry: Entry

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "transfer": self.transfer.to_dict(),
            "from_account": self.from_account.to_dict(),
            "to_account": self.to_account.to_dict(),
            "from_entry": self.from_entry.to_dict(),
            "to_entry": self.to_entry.to_dict(),
        }


class Store(Queries):
    """All single queries plus multi-step transactions on one connection.

    Work on the connection is serialised by a lock, so a store may be shared
    between threads when the connection allows it.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        super().__init__(conn)
        self._lock = threading.RLock()

    @contextmanager
    def _statement(self) -> Iterator[sqlite3.Connection]:
        with self._lock, super()._statement() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[Queries]:
        """Run the block in one transaction, committing on success and rolling back on error."""
        with self._lock:
            self._conn.execute("BEGIN")
            try:
                yield Queries(self._conn)
            except BaseException as err:
                try:
                    self._conn.rollback()
                except sqlite3.Error as rb_err:
                    raise TransactionError(f"tx err: {err}, rb err: {rb_err}") from err
                raise
            else:
                self._conn.commit()

    def transfer_tx(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: int,
        tx_name: str | None = None,
    ) -> TransferTxResult:
        """Move amount between two accounts, recording the transfer and both entries."""
        with self.transaction() as q:
            logger.debug("%s create transfer", tx_name)
            transfer = q.create_transfer(from_account_id, to_account_id, amount)

            logger.debug("%s create entry 1", tx_name)
            from_entry = q.create_entry(from_account_id, -amount)

            logger.debug("%s create entry 2", tx_name)
            to_entry = q.create_entry(to_account_id, amount)

            logger.debug("%s update account 1 balance", tx_name)
            from_account = q.add_account_balance(from_account_id, -amount)

            logger.debug("%s update account 2 balance", tx_name)
            to_account = q.add_account_balance(to_account_id, amount)

        return TransferTxResult(
            transfer=transfer,
            from_account=from_account,
            to_account=to_account,
            from_entry=from_entry,
            to_entry=to_entry,
        )