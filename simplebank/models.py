"""Records stored by the bank: accounts, ledger entries and transfers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass
class Account:
    """A bank account holding a balance in one currency."""

    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Account":
        """Build an account from (id, owner, balance, currency, created_at)."""
        id_, owner, balance, currency, created_at = row
        return cls(int(id_), str(owner), int(balance), str(currency), _parse_time(created_at))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": self.id,
            "owner": self.owner,
            "balance": self.balance,
            "currency": self.currency,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Entry:
    """A change to one account's balance; the amount may be negative or positive."""

    id: int
    account_id: int
    amount: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Entry":
        """Build an entry from (id, account_id, amount, created_at)."""
        id_, account_id, amount, created_at = row
        return cls(int(id_), int(account_id), int(amount), _parse_time(created_at))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": self.id,
            "account_id": self.account_id,
            "amount": self.amount,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Transfer:
    """A movement of money between two accounts; the amount must be positive."""

    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Transfer":
        """Build a transfer from (id, from_account_id, to_account_id, amount, created_at)."""
        id_, from_id, to_id, amount, created_at = row
        return cls(int(id_), int(from_id), int(to_id), int(amount), _parse_time(created_at))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "id": self.id,
            "from_account_id": self.from_account_id,
            "to_account_id": self.to_account_id,
            "amount": self.amount,
            "created_at": self.created_at.isoformat(),
        }