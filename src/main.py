import sys
import logging
from decimal import Decimal
from typing import List, Optional, TextIO

from exceptions import LedgerError
from models import AccountSnapshot
from payments_engine import PaymentsEngine

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

USAGE = "Usage: python main.py <input.csv> [num_workers]"


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_snapshots(snapshots: List[AccountSnapshot], stream: TextIO) -> None:
    print("client,available,held,total,locked", file=stream)
    for snapshot in snapshots:
        print(
            f"{snapshot.client},"
            f"{format_decimal(snapshot.available)},"
            f"{format_decimal(snapshot.held)},"
            f"{format_decimal(snapshot.total)},"
            f"{str(snapshot.locked).lower()}",
            file=stream,
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (1, 2):
        print(USAGE, file=sys.stderr)
        return 1

    filepath = args[0]
    try:
        num_workers = int(args[1]) if len(args) == 2 else 1
    except ValueError:
        print(USAGE, file=sys.stderr)
        return 1

    engine = PaymentsEngine(num_workers=num_workers)
    try:
        engine.process_file(filepath)
    except LedgerError as e:
        logger.critical(f"Aborting, ledger state is inconsistent: {e}")
        return 2

    write_snapshots(engine.snapshots(), sys.stdout)

    stats = engine.stats
    print(
        f"Processed: {stats.processed}, "
        f"Rejected: {stats.rejected}, "
        f"Malformed: {stats.malformed}",
        file=sys.stderr
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
