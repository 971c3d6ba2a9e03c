import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from csv_writer import write_accounts
from errors import EngineError
from ledger import Ledger

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.WARNING

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def resolve_log_level(value: Optional[str]) -> int:
    """Accept a level name ('info') or number ('20'); anything else means WARNING."""
    if not value:
        return DEFAULT_LOG_LEVEL
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def configure_logging() -> None:
    logging.basicConfig(
        level=resolve_log_level(os.environ.get(LOG_LEVEL_ENV)),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def validate_input_path(filepath: str) -> Optional[str]:
    """Return an error message if filepath is not an existing .csv file."""
    path = Path(filepath)
    if path.suffix.lower() != ".csv":
        return f"input file must have a .csv extension: {filepath}"
    if not path.is_file():
        return f"input file does not exist: {filepath}"
    return None


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    configure_logging()

    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return EXIT_USAGE

    filepath = args[0]
    error = validate_input_path(filepath)
    if error:
        print(f"error: {error}", file=sys.stderr)
        return EXIT_USAGE

    logger.info(f"Processing {filepath}")
    ledger = Ledger()
    try:
        ledger.process_file(filepath)
    except EngineError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    write_accounts(ledger.snapshots(), sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
