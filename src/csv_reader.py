import csv
import logging
from typing import Callable, Dict, Iterator, List, Optional, TextIO

from errors import InputDecodeError, InputIoError
from models import Transaction, TransactionType
from money import Money

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"


def read_transactions(stream: TextIO, on_skip: Optional[Callable[[int], None]] = None) -> Iterator[Transaction]:
    """
    Lazily decode CSV rows into transactions.

    The header may list its columns in any order and rows may leave out the
    amount. Rows with undecodable values are logged and skipped (on_skip gets
    the line number). Broken structure raises InputDecodeError, a failing
    stream raises InputIoError.
    """
    reader = csv.DictReader(stream)
    _normalize_header(reader)

    for line, row in _rows(reader):
        if _is_blank(row):
            continue

        transaction = parse_row(row, line)
        if transaction is None:
            if on_skip is not None:
                on_skip(line)
            continue

        yield transaction


def parse_row(row: Dict[str, Optional[str]], line: Optional[int] = None) -> Optional[Transaction]:
    """
    Parse a header-keyed CSV row into a Transaction.
    Returns None when a value is malformed; raises InputDecodeError when a required field is absent.
    """
    values = {}
    for column in REQUIRED_COLUMNS:
        value = row.get(column)
        if value is None or not value.strip():
            raise InputDecodeError(f"missing value for column '{column}'", line)
        values[column] = value.strip()

    try:
        transaction_type = TransactionType.from_wire(values["type"])
        client_id = int(values["client"])
        transaction_id = int(values["tx"])

        amount = None
        amount_str = (row.get(AMOUNT_COLUMN) or "").strip()
        if amount_str and transaction_type.carries_amount:
            amount = Money.parse(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except ValueError as e:
        logger.warning(f"Failed to parse row {_describe(row)} at line {line}: {e}")
        return None


def _normalize_header(reader: csv.DictReader) -> None:
    try:
        fieldnames = reader.fieldnames
    except csv.Error as e:
        raise InputDecodeError(str(e), reader.line_num) from e
    except UnicodeDecodeError as e:
        raise InputDecodeError(str(e), reader.line_num) from e
    except OSError as e:
        raise InputIoError(e) from e

    if not fieldnames:
        raise InputDecodeError("input is empty, expected a header row")

    normalized = [name.strip().lower() for name in fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in normalized]
    if missing:
        raise InputDecodeError(f"header is missing column(s) {', '.join(missing)}", 1)

    reader.fieldnames = normalized


def _rows(reader: csv.DictReader) -> Iterator:
    """Yield (line number, row), translating reader failures into engine errors."""
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise InputDecodeError(str(e), reader.line_num) from e
        except UnicodeDecodeError as e:
            raise InputDecodeError(str(e), reader.line_num) from e
        except OSError as e:
            raise InputIoError(e) from e
        yield reader.line_num, row


def _is_blank(row: Dict) -> bool:
    for key, value in row.items():
        if key is None:
            extras: List[str] = value
            if any(extra.strip() for extra in extras):
                return False
        elif value is not None and value.strip():
            return False
    return True


def _describe(row: Dict) -> str:
    return ",".join(f"{key}={value}" for key, value in row.items() if key is not None)
