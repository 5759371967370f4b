"""
Ledger Entities

Accounts, transactions and the read-side projections returned by the
engine. Monetary values are always Decimal and are stored as strings so
they round-trip exactly through any storage backend.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Dict, Any
from enum import Enum


class TransactionType(Enum):
    """Direction of a recorded movement"""
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"


@dataclass(frozen=True)
class Account:
    """
    Ledger account.

    The balance equals the sum of deposits minus the sum of withdrawals
    recorded for the account. Only the engine produces new balances, and it
    does so by replacing the record rather than mutating it.
    """
    id: str
    name: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            "id": self.id,
            "name": self.name,
            "balance": str(self.balance),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        """Create instance from dictionary"""
        return cls(
            id=data["id"],
            name=data["name"],
            balance=Decimal(data["balance"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass(frozen=True)
class TransactionSummary:
    """History view of a transaction"""
    id: str
    type: TransactionType
    amount: Decimal
    description: str
    timestamp: datetime


@dataclass(frozen=True)
class Transaction:
    """
    A single recorded deposit or withdrawal.

    Amount is the positive magnitude; the direction comes from type.
    Transactions are append-only and never edited after creation.
    """
    id: str
    account_id: str
    type: TransactionType
    amount: Decimal
    timestamp: datetime
    description: str = ""

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on the account balance"""
        if self.type == TransactionType.WITHDRAWAL:
            return -self.amount
        return self.amount

    def to_summary(self) -> TransactionSummary:
        return TransactionSummary(
            id=self.id,
            type=self.type,
            amount=self.amount,
            description=self.description,
            timestamp=self.timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            "id": self.id,
            "account_id": self.account_id,
            "type": self.type.value,
            "amount": str(self.amount),
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Create instance from dictionary"""
        return cls(
            id=data["id"],
            account_id=data["account_id"],
            type=TransactionType(data["type"]),
            amount=Decimal(data["amount"]),
            description=data.get("description", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass(frozen=True)
class AccountBalance:
    """Balance of an account as of a clock reading"""
    account_id: str
    name: str
    balance: Decimal
    as_of: datetime
