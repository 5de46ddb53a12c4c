"""
Generates a long CSV of well-formed but not necessarily coherent events.

Ids are skewed towards the top of their range so that clients and
transactions collide often enough to exercise disputes and duplicates.
The output can be fed straight to main.py.
"""

import math
import random
import sys
from typing import Iterator, Optional

NUM_RECORDS = 1_000_000
TX_MAX = 4_000_000_000
CLIENT_MAX = 60_000
AMOUNT_MAX = 100_000
DISPUTE_CHANCE = 0.2

HEADER = "type, client, tx, amount"
TX_TYPES = ["deposit", "withdrawal"]
DISPUTE_TYPES = ["dispute", "resolve", "chargeback"]


def generate_rows(
    num_records: int = NUM_RECORDS,
    seed: Optional[int] = None,
    tx_max: int = TX_MAX,
    client_max: int = CLIENT_MAX,
    amount_max: int = AMOUNT_MAX,
    dispute_chance: float = DISPUTE_CHANCE,
) -> Iterator[str]:
    """Yield num_records CSV lines (without header)."""
    rng = random.Random(seed)
    for _ in range(num_records):
        tx = math.floor(math.sqrt(rng.random() * tx_max * tx_max))
        client = math.floor(math.sqrt(rng.random() * client_max * client_max))
        if rng.random() < dispute_chance:
            yield f"{rng.choice(DISPUTE_TYPES)},{client},{tx}"
        else:
            amount = round(rng.random() * amount_max, 4)
            yield f"{rng.choice(TX_TYPES)},{client},{tx},{amount}"


def main() -> None:
    num_records = int(sys.argv[1]) if len(sys.argv) > 1 else NUM_RECORDS
    print(HEADER)
    for row in generate_rows(num_records):
        print(row)


if __name__ == "__main__":
    main()
