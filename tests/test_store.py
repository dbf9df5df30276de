import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor

import pytest

from simplebank.models import Account
from simplebank.queries import NoRowsError, create_schema
from simplebank.random_util import random_currency, random_money, random_owner
from simplebank.store import Store, TransferTxResult


@pytest.fixture
def store():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    create_schema(conn)
    yield Store(conn)
    conn.close()


def create_random_account(store: Store) -> Account:
    owner, balance, currency = random_owner(), random_money(), random_currency()
    account = store.create_account(owner, balance, currency)
    assert account.owner == owner
    assert account.balance == balance
    assert account.currency == currency
    assert account.id != 0
    return account


def test_transfer_tx_concurrent(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    amount = 10
    n = 5

    def run(i: int) -> TransferTxResult:
        return store.transfer_tx(account1.id, account2.id, amount, tx_name=f"tx {i + 1}")

    with ThreadPoolExecutor(max_workers=n) as pool:
        results = list(pool.map(run, range(n)))

    existed = set()
    for result in results:
        transfer = result.transfer
        assert transfer.from_account_id == account1.id
        assert transfer.to_account_id == account2.id
        assert transfer.amount == amount
        assert transfer.id != 0
        assert store.get_transfer(transfer.id) == transfer

        from_entry = result.from_entry
        assert from_entry.account_id == account1.id
        assert from_entry.amount == -amount
        assert from_entry.id != 0
        assert store.get_entry(from_entry.id) == from_entry

        to_entry = result.to_entry
        assert to_entry.account_id == account2.id
        assert to_entry.amount == amount
        assert to_entry.id != 0
        assert store.get_entry(to_entry.id) == to_entry

        from_account = result.from_account
        to_account = result.to_account
        assert from_account.id == account1.id
        assert to_account.id == account2.id

        diff1 = account1.balance - from_account.balance
        diff2 = to_account.balance - account2.balance
        assert diff1 == diff2
        assert diff1 > 0
        assert diff1 % amount == 0
        k = diff1 // amount
        assert 1 <= k <= n
        assert k not in existed
        existed.add(k)

    updated1 = store.get_account_for_update(account1.id)
    updated2 = store.get_account_for_update(account2.id)
    assert updated1.balance == account1.balance - n * amount
    assert updated2.balance == account2.balance + n * amount


def test_transfer_tx_records_listed(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    result = store.transfer_tx(account1.id, account2.id, 7)
    assert store.list_transfers(account1.id, account1.id, 10, 0) == [result.transfer]
    assert store.list_entries(account1.id, 10, 0) == [result.from_entry]
    assert store.list_entries(account2.id, 10, 0) == [result.to_entry]


def test_transfer_tx_to_missing_account_rolls_back(store):
    account1 = create_random_account(store)
    with pytest.raises(sqlite3.IntegrityError):
        store.transfer_tx(account1.id, account1.id + 1000, 10)
    assert store.get_account_for_update(account1.id).balance == account1.balance
    assert store.list_transfers(account1.id, account1.id, 10, 0) == []
    assert store.list_entries(account1.id, 10, 0) == []


def test_transaction_commits(store):
    with store.transaction() as q:
        created = q.create_account("alice", 50, "EUR")
    assert store.get_account_for_update(created.id) == created


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(ValueError):
        with store.transaction() as q:
            created = q.create_account("bob", 20, "USD")
            raise ValueError("boom")
    with pytest.raises(NoRowsError):
        store.get_account_for_update(created.id)


def test_transfer_tx_logs_tx_name(store, caplog):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    with caplog.at_level(logging.DEBUG, logger="simplebank.store"):
        store.transfer_tx(account1.id, account2.id, 1, tx_name="tx 1")
    assert "tx 1 create transfer" in caplog.messages
    assert "tx 1 update account 2 balance" in caplog.messages


def test_result_to_dict(store):
    account1 = create_random_account(store)
    account2 = create_random_account(store)
    result = store.transfer_tx(account1.id, account2.id, 3)
    data = result.to_dict()
    assert data["transfer"]["amount"] == 3
    assert data["from_entry"]["amount"] == -3
    assert data["to_entry"]["account_id"] == account2.id
    assert data["from_account"]["balance"] == account1.balance - 3
    assert data["to_account"]["balance"] == account2.balance + 3