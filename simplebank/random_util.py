"""Random values for building sample accounts and test data."""

from __future__ import annotations

import random
import string

ALPHABET = string.ascii_lowercase
CURRENCIES = ("EUR", "USD", "INR")

_rng = random.Random()


def rand_int(min_value: int, max_value: int) -> int:
    """Return a random integer between min_value and max_value, both included."""
    if max_value < min_value:
        raise ValueError(f"empty range: {min_value}..{max_value}")
    return _rng.randint(min_value, max_value)


def random_string(n: int) -> str:
    """Return n random lower-case ASCII letters."""
    return "".join(_rng.choice(ALPHABET) for _ in range(n))


def random_owner() -> str:
    """Return a random six-letter owner name."""
    return random_string(6)


def random_money() -> int:
    """Return a random amount of money between 0 and 1000."""
    return rand_int(0, 1000)


def random_currency() -> str:
    """Return one of the supported currency codes at random."""
    return _rng.choice(CURRENCIES)