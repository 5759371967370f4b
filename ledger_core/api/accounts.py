"""
Account and transaction endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from .dependencies import get_engine
from .schemas import (
    CreateAccountRequest, CreateTransactionRequest, TransferRequest,
    account_to_dict, balance_to_dict, transaction_to_dict, summary_to_dict
)
from ..errors import AccountNotFoundError, InsufficientFundsError, InvalidAmountError
from ..ledger import LedgerEngine
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("ledger.api")


def _rejected(error: Exception, status_code: int, action: str, account_id: str) -> HTTPException:
    log_action(
        logger, "info", f"Request rejected: {error}",
        action=action, resource=f"account:{account_id}",
        details={"error": type(error).__name__, "status_code": status_code}
    )
    return HTTPException(status_code=status_code, detail=str(error))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    engine: LedgerEngine = Depends(get_engine)
):
    """Create an account with an initial balance of 0"""
    account = await engine.create_account(request.name)
    return account_to_dict(account)


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    engine: LedgerEngine = Depends(get_engine)
):
    """Get account details"""
    account = await engine.get_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account_to_dict(account)


@router.get("/{account_id}/balance")
async def get_account_balance(
    account_id: str,
    engine: LedgerEngine = Depends(get_engine)
):
    """Get the current balance of an account"""
    balance = await engine.get_account_balance(account_id)
    if not balance:
        raise HTTPException(status_code=404, detail="Account not found")
    return balance_to_dict(balance)


@router.post("/{account_id}/transactions", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    account_id: str,
    request: CreateTransactionRequest,
    engine: LedgerEngine = Depends(get_engine)
):
    """Record a deposit or withdrawal"""
    try:
        transaction = await engine.record_transaction(
            account_id, request.type, request.amount, request.description
        )
    except AccountNotFoundError as e:
        raise _rejected(e, 404, "record_transaction", account_id)
    except (InsufficientFundsError, InvalidAmountError) as e:
        raise _rejected(e, 400, "record_transaction", account_id)
    
    return transaction_to_dict(transaction)


@router.get("/{account_id}/transactions")
async def get_transaction_history(
    account_id: str,
    engine: LedgerEngine = Depends(get_engine)
):
    """Get all transactions of an account, most recent first"""
    try:
        history = await engine.get_transaction_history(account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [summary_to_dict(s) for s in history]


@router.post("/{account_id}/transfer", status_code=status.HTTP_201_CREATED)
async def transfer(
    account_id: str,
    request: TransferRequest,
    engine: LedgerEngine = Depends(get_engine)
):
    """Transfer money from this account to another"""
    try:
        withdrawal, deposit = await engine.transfer(
            account_id, request.to_account_id, request.amount, request.description
        )
    except AccountNotFoundError as e:
        raise _rejected(e, 404, "transfer", account_id)
    except (InsufficientFundsError, InvalidAmountError) as e:
        raise _rejected(e, 400, "transfer", account_id)
    
    return [transaction_to_dict(withdrawal), transaction_to_dict(deposit)]
