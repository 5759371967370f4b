"""
Ledger Errors

Typed business failures raised by the ledger engine. They are expected
outcomes reported to the caller, not defects.
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base class for all ledger business failures"""
    pass


class AccountNotFoundError(LedgerError):
    """Raised when a command targets an account that does not exist"""
    
    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account with ID '{account_id}' was not found.")


class InsufficientFundsError(LedgerError):
    """Raised when a withdrawal exceeds the balance read at check time"""
    
    def __init__(self, account_id: str, balance: Decimal, requested: Decimal):
        self.account_id = account_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient funds in account '{account_id}'. "
            f"Current balance: {balance}, withdrawal amount: {requested}."
        )


class InvalidAmountError(LedgerError):
    """Raised when an amount is not a positive exact decimal"""
    
    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"Amount must be a positive decimal value, got {amount!r}.")
