"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

from ..config import get_config
from ..models import Account, AccountBalance, Transaction, TransactionSummary, TransactionType


class CreateAccountRequest(BaseModel):
    name: str = Field(..., description="Display name of the account")
    
    @field_validator("name")
    @classmethod
    def name_within_limits(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Account name is required")
        limit = get_config().max_account_name_length
        if len(value) > limit:
            raise ValueError(f"Account name cannot exceed {limit} characters")
        return value


def _check_amount(value: Decimal) -> Decimal:
    if not value.is_finite() or value <= 0:
        raise ValueError("Amount must be greater than zero")
    limit = Decimal(get_config().max_transaction_amount)
    if value > limit:
        raise ValueError(f"Amount cannot exceed {limit}")
    return value


def _check_description(value: Optional[str]) -> Optional[str]:
    limit = get_config().max_description_length
    if value and len(value) > limit:
        raise ValueError(f"Description cannot exceed {limit} characters")
    return value


class CreateTransactionRequest(BaseModel):
    type: TransactionType = Field(..., description="Deposit or Withdrawal")
    amount: Decimal = Field(..., description="Positive decimal amount")
    description: Optional[str] = None
    
    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, value: Any) -> Any:
        # Accept enum names in any case as well as the exact values
        if isinstance(value, str):
            for member in TransactionType:
                if value.lower() in (member.value.lower(), member.name.lower()):
                    return member
        return value
    
    @field_validator("amount")
    @classmethod
    def amount_within_limits(cls, value: Decimal) -> Decimal:
        return _check_amount(value)
    
    @field_validator("description")
    @classmethod
    def description_within_limits(cls, value: Optional[str]) -> Optional[str]:
        return _check_description(value)


class TransferRequest(BaseModel):
    to_account_id: str
    amount: Decimal = Field(..., description="Positive decimal amount")
    description: Optional[str] = None
    
    @field_validator("amount")
    @classmethod
    def amount_within_limits(cls, value: Decimal) -> Decimal:
        return _check_amount(value)
    
    @field_validator("description")
    @classmethod
    def description_within_limits(cls, value: Optional[str]) -> Optional[str]:
        return _check_description(value)


def account_to_dict(account: Account) -> Dict[str, Any]:
    return {
        "id": account.id,
        "name": account.name,
        "balance": str(account.balance),
        "created_at": account.created_at.isoformat(),
    }


def balance_to_dict(balance: AccountBalance) -> Dict[str, Any]:
    return {
        "account_id": balance.account_id,
        "name": balance.name,
        "balance": str(balance.balance),
        "as_of": balance.as_of.isoformat(),
    }


def transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "account_id": transaction.account_id,
        "type": transaction.type.value,
        "amount": str(transaction.amount),
        "description": transaction.description,
        "timestamp": transaction.timestamp.isoformat(),
    }


def summary_to_dict(summary: TransactionSummary) -> Dict[str, Any]:
    return {
        "id": summary.id,
        "type": summary.type.value,
        "amount": str(summary.amount),
        "description": summary.description,
        "timestamp": summary.timestamp.isoformat(),
    }
