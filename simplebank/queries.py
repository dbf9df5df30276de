"""Parameterised queries over the accounts, entries and transfers tables."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Sequence, TypeVar

from simplebank.models import Account, Entry, Transfer

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner TEXT NOT NULL,
    balance INTEGER NOT NULL,
    currency TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS accounts_owner_idx ON accounts (owner);

CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS entries_account_idx ON entries (account_id);

CREATE TABLE IF NOT EXISTS transfers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_account_id INTEGER NOT NULL REFERENCES accounts (id),
    to_account_id INTEGER NOT NULL REFERENCES accounts (id),
    amount INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS transfers_from_idx ON transfers (from_account_id);
CREATE INDEX IF NOT EXISTS transfers_to_idx ON transfers (to_account_id);
"""

_ACCOUNT_COLUMNS = "id, owner, balance, currency, created_at"
_ENTRY_COLUMNS = "id, account_id, amount, created_at"
_TRANSFER_COLUMNS = "id, from_account_id, to_account_id, amount, created_at"


class NoRowsError(LookupError):
    """Raised when a query that must return one row finds none."""

    def __init__(self, message: str = "sql: no rows in result set") -> None:
        super().__init__(message)


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the bank tables on the connection if they do not exist yet."""
    conn.execute("PRAGMA foreign_keys = ON")
    conn.executescript(SCHEMA)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Queries:
    """Query methods bound to one database connection.

    Each call commits on its own unless the connection is already inside a
    transaction, in which case the caller decides when to commit.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    @contextmanager
    def _statement(self) -> Iterator[sqlite3.Connection]:
        owns = not self._conn.in_transaction
        try:
            yield self._conn
        except BaseException:
            if owns and self._conn.in_transaction:
                self._conn.rollback()
            raise
        if owns and self._conn.in_transaction:
            self._conn.commit()

    def _one(self, sql: str, params: Sequence[Any], build: Callable[[Sequence[Any]], T]) -> T:
        row = self._conn.execute(sql, params).fetchone()
        if row is None:
            raise NoRowsError()
        return build(row)

    def _many(self, sql: str, params: Sequence[Any], build: Callable[[Sequence[Any]], T]) -> list[T]:
        return [build(row) for row in self._conn.execute(sql, params)]

    def _account(self, account_id: int) -> Account:
        return self._one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ? LIMIT 1",
            (account_id,),
            Account.from_row,
        )

    # accounts

    def add_account_balance(self, account_id: int, amount: int) -> Account:
        """Add amount to the account's balance and return the updated account."""
        with self._statement() as conn:
            cur = conn.execute(
                "UPDATE accounts SET balance = balance + ? WHERE id = ?",
                (amount, account_id),
            )
            if cur.rowcount == 0:
                raise NoRowsError()
            return self._account(account_id)

    def create_account(self, owner: str, balance: int, currency: str) -> Account:
        """Insert a new account and return it."""
        with self._statement() as conn:
            cur = conn.execute(
                "INSERT INTO accounts (owner, balance, currency, created_at) VALUES (?, ?, ?, ?)",
                (owner, balance, currency, _now()),
            )
            return self._account(cur.lastrowid)

    def delete_account(self, account_id: int) -> Account:
        """Delete the account and return it as it was."""
        with self._statement() as conn:
            account = self._account(account_id)
            conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))
            return account

    def get_account_for_update(self, account_id: int) -> Account:
        """Return the account with the given id."""
        with self._statement():
            return self._account(account_id)

    def list_accounts(self, limit: int, offset: int) -> list[Account]:
        """Return accounts ordered by id, paged by limit and offset."""
        with self._statement():
            return self._many(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY id LIMIT ? OFFSET ?",
                (limit, offset),
                Account.from_row,
            )

    def update_account(self, account_id: int, balance: int) -> Account:
        """Set the account's balance and return the updated account."""
        with self._statement() as conn:
            cur = conn.execute(
                "UPDATE accounts SET balance = ? WHERE id = ?", (balance, account_id)
            )
            if cur.rowcount == 0:
                raise NoRowsError()
            return self._account(account_id)

    # entries

    def create_entry(self, account_id: int, amount: int) -> Entry:
        """Record a balance change for an account and return the entry."""
        with self._statement() as conn:
            cur = conn.execute(
                "INSERT INTO entries (account_id, amount, created_at) VALUES (?, ?, ?)",
                (account_id, amount, _now()),
            )
            return self.get_entry(cur.lastrowid)

    def get_entry(self, entry_id: int) -> Entry:
        """Return the entry with the given id."""
        with self._statement():
            return self._one(
                f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE id = ? LIMIT 1",
                (entry_id,),
                Entry.from_row,
            )

    def list_entries(self, account_id: int, limit: int, offset: int) -> list[Entry]:
        """Return an account's entries ordered by id, paged by limit and offset."""
        with self._statement():
            return self._many(
                f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE account_id = ? "
                "ORDER BY id LIMIT ? OFFSET ?",
                (account_id, limit, offset),
                Entry.from_row,
            )

    # transfers

    def create_transfer(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        """Record a transfer between two accounts and return it."""
        with self._statement() as conn:
            cur = conn.execute(
                "INSERT INTO transfers (from_account_id, to_account_id, amount, created_at) "
                "VALUES (?, ?, ?, ?)",
                (from_account_id, to_account_id, amount, _now()),
            )
            return self.get_transfer(cur.lastrowid)

    def get_transfer(self, transfer_id: int) -> Transfer:
        """Return the transfer with the given id."""
        with self._statement():
            return self._one(
                f"SELECT {_TRANSFER_COLUMNS} FROM transfers WHERE id = ? LIMIT 1",
                (transfer_id,),
                Transfer.from_row,
            )

    def list_transfers(
        self, from_account_id: int, to_account_id: int, limit: int, offset: int
    ) -> list[Transfer]:
        """Return transfers leaving from_account_id or reaching to_account_id, ordered by id."""
        with self._statement():
            return self._many(
                f"SELECT {_TRANSFER_COLUMNS} FROM transfers "
                "WHERE from_account_id = ? OR to_account_id = ? "
                "ORDER BY id LIMIT ? OFFSET ?",
                (from_account_id, to_account_id, limit, offset),
                Transfer.from_row,
            )