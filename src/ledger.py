import csv
import logging
from typing import AsyncIterable, Dict, Iterable, Iterator

from account import ClientAccount
from csv_reader import read_transactions
from errors import InputDecodeError, InputIoError
from models import AccountSnapshot, ProcessingResult, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class Ledger:
    """
    Routes records to per-client accounts in input order.
    Accounts are created on the first record for their client.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._stats = ProcessingStats()

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        """Accounts built by the current or most recent run, including a run that was interrupted."""
        return self._accounts

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def run(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every record and return the final accounts keyed by client id."""
        self._start()
        logger.info("Starting ledger run")

        iterator = iter(transactions)
        while True:
            try:
                transaction = next(iterator)
            except StopIteration:
                break
            except csv.Error as e:
                raise InputDecodeError(str(e)) from e
            except OSError as e:
                raise InputIoError(e) from e
            self._process(transaction)

        self._finish()
        return self._accounts

    async def run_async(self, transactions: AsyncIterable[Transaction]) -> Dict[int, ClientAccount]:
        """
        Same as run() over an async source. Only fetching the next record may
        suspend. If the caller is cancelled mid-run, the accounts processed so
        far remain available through the accounts property.
        """
        self._start()
        logger.info("Starting async ledger run")

        iterator = transactions.__aiter__()
        while True:
            try:
                transaction = await iterator.__anext__()
            except StopAsyncIteration:
                break
            except csv.Error as e:
                raise InputDecodeError(str(e)) from e
            except OSError as e:
                raise InputIoError(e) from e
            self._process(transaction)

        self._finish()
        return self._accounts

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Decode a CSV file and run it."""
        try:
            f = open(filepath, "r", newline="")
        except OSError as e:
            raise InputIoError(e) from e

        with f:
            return self.run(read_transactions(f, on_skip=self._on_skip))

    def snapshots(self) -> Iterator[AccountSnapshot]:
        """Yield one output snapshot per account, ordered by client id."""
        for client_id in sorted(self._accounts):
            yield self._accounts[client_id].snapshot()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
            logger.debug(f"Created account for client {client_id}")
        return account

    def _start(self) -> None:
        # Decoding is lazy, so rows skipped by the reader are counted after this reset.
        self._accounts = {}
        self._stats = ProcessingStats()

    def _process(self, transaction: Transaction) -> None:
        account = self.get_or_create_account(transaction.client_id)
        result = account.apply(transaction)
        self._stats.record(result)
        if result == ProcessingResult.APPLIED:
            logger.debug(f"Applied {transaction!r}")

    def _finish(self) -> None:
        logger.info(f"Ledger run complete: {len(self._accounts)} accounts, {self._stats}")

    def _on_skip(self, line: int) -> None:
        self._stats.record_skip()
