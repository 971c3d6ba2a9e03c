import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from models import (
    AccountSnapshot,
    ProcessingResult,
    StoredTransaction,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from money import Money

logger = logging.getLogger(__name__)


@dataclass
class ClientAccount:
    """
    Ledger for a single client.

    Balances only change through apply(). Every handler checks all of its
    guards before touching a field, so a rejected record leaves no trace.
    total is always available + held.
    """

    client_id: int
    available: Money = Money.ZERO
    held: Money = Money.ZERO
    locked: bool = False
    _transactions: Dict[int, StoredTransaction] = field(default_factory=dict, repr=False)

    @property
    def total(self) -> Money:
        return self.available + self.held

    def get_transaction(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Retrieve a stored deposit or withdrawal by id."""
        return self._transactions.get(transaction_id)

    def snapshot(self) -> AccountSnapshot:
        """Output view with balances truncated to four decimal places."""
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available.truncate(),
            held=self.held.truncate(),
            total=self.total.truncate(),
            locked=self.locked,
        )

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Advance the account by one record.

        Returns:
            APPLIED: balances and/or transaction status changed
            REJECTED: a guard failed, nothing changed
        """
        if transaction.client_id != self.client_id:
            logger.error(f"Client {self.client_id} tx {transaction.transaction_id}: record belongs to client {transaction.client_id}")
            return ProcessingResult.REJECTED

        if self.locked:
            logger.warning(f"Client {self.client_id} tx {transaction.transaction_id}: account locked, {transaction.transaction_type.value} rejected")
            return ProcessingResult.REJECTED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)

        return ProcessingResult.REJECTED

    def _check_new_funds(self, transaction: Transaction) -> bool:
        kind = transaction.transaction_type.value.capitalize()

        if transaction.transaction_id in self._transactions:
            logger.warning(f"{kind} tx {transaction.transaction_id} (client {self.client_id}): duplicate transaction id")
            return False

        if transaction.amount is None or not transaction.amount.is_positive():
            logger.warning(f"{kind} tx {transaction.transaction_id} (client {self.client_id}): invalid amount {transaction.amount}")
            return False

        return True

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if not self._check_new_funds(transaction):
            return ProcessingResult.REJECTED

        self.available = self.available + transaction.amount
        self._transactions[transaction.transaction_id] = StoredTransaction.verified(transaction)
        logger.debug(f"Deposit tx {transaction.transaction_id} (client {self.client_id}): credited {transaction.amount}")
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        if not self._check_new_funds(transaction):
            return ProcessingResult.REJECTED

        if self.available < transaction.amount:
            logger.warning(f"Withdrawal tx {transaction.transaction_id} (client {self.client_id}): insufficient funds ({self.available} available, {transaction.amount} requested)")
            return ProcessingResult.REJECTED

        self.available = self.available - transaction.amount
        self._transactions[transaction.transaction_id] = StoredTransaction.verified(transaction)
        logger.debug(f"Withdrawal tx {transaction.transaction_id} (client {self.client_id}): debited {transaction.amount}")
        return ProcessingResult.APPLIED

    def _find_referenced(self, transaction: Transaction, expected: TransactionStatus) -> Optional[StoredTransaction]:
        """Look up the stored transaction a dispute/resolve/chargeback points at."""
        kind = transaction.transaction_type.value.capitalize()
        original = self._transactions.get(transaction.transaction_id)

        if original is None:
            logger.warning(f"{kind} for tx {transaction.transaction_id} (client {self.client_id}): transaction not found")
            return None

        if original.status != expected:
            logger.warning(f"{kind} for tx {transaction.transaction_id} (client {self.client_id}): transaction is {original.status.value}, expected {expected.value}")
            return None

        if original.amount is None:
            logger.warning(f"{kind} for tx {transaction.transaction_id} (client {self.client_id}): stored transaction has no amount")
            return None

        return original

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_referenced(transaction, TransactionStatus.VERIFIED)
        if original is None:
            return ProcessingResult.REJECTED

        # Holding more than is available would drive available negative.
        if self.available < original.amount:
            logger.warning(f"Dispute for tx {transaction.transaction_id} (client {self.client_id}): {self.available} available, cannot hold {original.amount}")
            return ProcessingResult.REJECTED

        available = self.available - original.amount
        held = self.held + original.amount
        self.available, self.held = available, held
        original.status = TransactionStatus.DISPUTED
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_referenced(transaction, TransactionStatus.DISPUTED)
        if original is None:
            return ProcessingResult.REJECTED

        if self.held < original.amount:
            logger.warning(f"Resolve for tx {transaction.transaction_id} (client {self.client_id}): {self.held} held, cannot release {original.amount}")
            return ProcessingResult.REJECTED

        available = self.available + original.amount
        held = self.held - original.amount
        self.available, self.held = available, held
        original.status = TransactionStatus.RESOLVED
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_referenced(transaction, TransactionStatus.DISPUTED)
        if original is None:
            return ProcessingResult.REJECTED

        if self.held < original.amount:
            logger.warning(f"Chargeback for tx {transaction.transaction_id} (client {self.client_id}): {self.held} held, cannot reverse {original.amount}")
            return ProcessingResult.REJECTED

        # Removing from held alone also removes it from total.
        self.held = self.held - original.amount
        self.locked = True
        original.status = TransactionStatus.CHARGEBACKED
        logger.info(f"Chargeback for tx {transaction.transaction_id} (client {self.client_id}): account locked")
        return ProcessingResult.APPLIED
