import sys
import logging
from typing import List, Optional

from errors import InputFormatError
from csv_io import write_snapshots
from payments_engine import PaymentsEngine


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine()
    try:
        snapshots = engine.process_file(args[0])
    except (InputFormatError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    write_snapshots(snapshots, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
