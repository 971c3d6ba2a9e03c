from dataclasses import dataclass
from enum import Enum
from typing import Optional

from money import Money

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def from_wire(cls, token: str) -> "TransactionType":
        """Case-insensitive lookup, e.g. 'Deposit' -> DEPOSIT."""
        return cls(token.strip().lower())

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class TransactionStatus(Enum):
    VERIFIED = "verified"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGEBACKED = "chargebacked"


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Money] = None

    def __post_init__(self):
        if not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client id {self.client_id} outside 0..{MAX_CLIENT_ID}")
        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise ValueError(f"tx id {self.transaction_id} outside 0..{MAX_TRANSACTION_ID}")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A deposit or withdrawal that passed its guards and now lives in an account."""

    transaction_type: TransactionType
    transaction_id: int
    amount: Money
    status: TransactionStatus = TransactionStatus.VERIFIED

    @classmethod
    def verified(cls, transaction: Transaction) -> "StoredTransaction":
        return cls(
            transaction_type=transaction.transaction_type,
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
        )


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Money
    held: Money
    total: Money
    locked: bool


class ProcessingStats:
    """Counters for a single ledger run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.skipped = 0

    def record(self, result: ProcessingResult):
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.rejected += 1

    def record_skip(self):
        self.skipped += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, rejected={self.rejected}, skipped={self.skipped})"
