import csv
from typing import Iterable, TextIO

from models import AccountSnapshot

HEADER = ("client", "available", "held", "total", "locked")


def format_amount(value) -> str:
    """Format with exactly 4 decimal places, truncating any extra precision."""
    return str(value.truncate())


def format_row(snapshot: AccountSnapshot) -> list:
    return [
        str(snapshot.client_id),
        format_amount(snapshot.available),
        format_amount(snapshot.held),
        format_amount(snapshot.total),
        str(snapshot.locked).lower(),
    ]


def write_accounts(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> int:
    """Write the account CSV to stream. Returns the number of rows written."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)

    count = 0
    for snapshot in snapshots:
        writer.writerow(format_row(snapshot))
        count += 1
    return count
