# simplebank

A small bank ledger built on the standard library's `sqlite3`. It keeps
three kinds of record:

- **accounts** (`simplebank.models.Account`): an owner, a balance and a currency;
- **entries** (`simplebank.models.Entry`): changes to an account's balance, negative or positive;
- **transfers** (`simplebank.models.Transfer`): money moved from one account to another.

Each record is a dataclass with a `created_at` timestamp and a `to_dict()`
method that returns a JSON-ready mapping.

## Installation

```
pip install .
```

Run the tests with:

```
pip install ".[test]"
pytest
```

## Usage

```python
import sqlite3

from simplebank.queries import NoRowsError, Queries, create_schema
from simplebank.store import Store

conn = sqlite3.connect(":memory:")
create_schema(conn)  # creates the tables and turns on foreign keys

queries = Queries(conn)
alice = queries.create_account("alice", 100, "USD")
bob = queries.create_account("bob", 50, "USD")

store = Store(conn)
result = store.transfer_tx(alice.id, bob.id, 10, tx_name="tx 1")

print(result.from_account.balance)  # 90
print(result.to_account.balance)    # 60
print(result.from_entry.amount)     # -10
print(result.to_entry.amount)       # 10

# Listing uses limit/offset paging ordered by id.
print(queries.list_accounts(limit=5, offset=0))
print(queries.list_entries(alice.id, limit=5, offset=0))
print(queries.list_transfers(alice.id, alice.id, limit=5, offset=0))

# Looking up a missing row raises NoRowsError.
carol = queries.create_account("carol", 0, "EUR")
queries.delete_account(carol.id)
try:
    queries.get_account_for_update(carol.id)
except NoRowsError:
    print("gone")
```

### Queries

`Queries(conn)` binds the query methods to one connection:

- accounts: `create_account`, `get_account_for_update`, `list_accounts`,
  `update_account` (sets the balance), `add_account_balance` (adds to it),
  `delete_account` (returns the account as it was);
- entries: `create_entry`, `get_entry`, `list_entries`;
- transfers: `create_transfer`, `get_transfer`, `list_transfers` (transfers
  leaving the first id or reaching the second).

Each call commits on its own, unless the connection is already inside a
transaction; then the caller decides when to commit. A lookup, update or
delete that finds no row raises `NoRowsError` (a `LookupError`).

### Store and transactions

`Store(conn)` has every `Queries` method and serialises work on the
connection with a lock, so one store can be shared between threads when
the connection allows it.

`Store.transaction()` is a context manager that gives a `Queries` bound to
one transaction. It commits when the block ends normally and rolls back if
the block raises; if the rollback itself fails, `TransactionError` is
raised.

```python
with store.transaction() as q:
    q.add_account_balance(alice.id, -5)
    q.create_entry(alice.id, -5)
```

`Store.transfer_tx(from_account_id, to_account_id, amount, tx_name=None)`
records the transfer, an entry of `-amount` on the first account, an entry
of `amount` on the second, and updates both balances, all in one
transaction. It returns a `TransferTxResult` holding `transfer`,
`from_account`, `to_account`, `from_entry` and `to_entry`. Each step is
logged at debug level on the `simplebank.store` logger, tagged with
`tx_name`.

## Random test data

`simplebank.random_util` makes sample values: `rand_int(min_value, max_value)`
(both ends included; `ValueError` on an empty range), `random_string(n)`,
`random_owner()` (six lower-case letters), `random_money()` (0 to 1000) and
`random_currency()` (one of `EUR`, `USD`, `INR`).

## What it does not do

- It is a library only: there is no command-line tool and no HTTP server.
- Storage is SQLite through `sqlite3`; no other database is supported.
- Transfers do not check that the amount is positive, that the source
  account has enough money, or that both accounts use the same currency.