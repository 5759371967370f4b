"""
Ledger Engine

Owns the business rules of the ledger: account creation, recording deposits
and withdrawals, and composing transfers out of a withdrawal leg and a
deposit leg. Account balance and transaction history are written together
so the two projections stay reconciled.

Every mutation of an account happens under that account's lock, so
concurrent commands against the same account cannot lose updates. A transfer
holds both accounts' locks and either applies both legs or neither.
"""

from decimal import Decimal, InvalidOperation
from dataclasses import replace
from typing import Any, List, Optional, Tuple
import asyncio
import uuid

from .clock import Clock, SystemClock
from .errors import AccountNotFoundError, InsufficientFundsError, InvalidAmountError
from .logging_config import get_logger, log_action
from .models import Account, AccountBalance, Transaction, TransactionSummary, TransactionType
from .repositories import AccountStore, TransactionStore


def to_amount(value: Any) -> Decimal:
    """
    Convert a caller-supplied amount to an exact positive Decimal.

    Floats are refused because they cannot carry exact decimal values.
    """
    if isinstance(value, (bool, float)):
        raise InvalidAmountError(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidAmountError(value) from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(value)
    return amount


class LedgerEngine:
    """
    Records movements against accounts.

    The engine keeps no state of its own; the stores (and the lock registry
    carried by the account store) are shared, so an engine may be created
    per request.
    """

    def __init__(
        self,
        accounts: AccountStore,
        transactions: TransactionStore,
        clock: Optional[Clock] = None
    ):
        self.accounts = accounts
        self.transactions = transactions
        self.clock = clock or SystemClock()
        self.logger = get_logger("ledger.engine")

    async def create_account(self, name: str) -> Account:
        """
        Create a new account with a zero balance

        Args:
            name: Display name, validated by the caller

        Returns:
            The persisted Account
        """
        now = self.clock.now()
        account = Account(
            id=str(uuid.uuid4()),
            name=name,
            balance=Decimal("0"),
            created_at=now,
            updated_at=now
        )
        await self.accounts.add(account)

        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{account.id}",
            details={"name": name}
        )
        return account

    async def get_account(self, account_id: str) -> Optional[Account]:
        return await self.accounts.get_by_id(account_id)

    async def get_account_balance(self, account_id: str) -> Optional[AccountBalance]:
        """Current balance of an account stamped with the clock reading, or None"""
        account = await self.accounts.get_by_id(account_id)
        if account is None:
            return None
        return AccountBalance(
            account_id=account.id,
            name=account.name,
            balance=account.balance,
            as_of=self.clock.now()
        )

    async def record_transaction(
        self,
        account_id: str,
        transaction_type: TransactionType,
        amount: Any,
        description: Optional[str] = None
    ) -> Transaction:
        """
        Record a deposit or withdrawal against an account

        Args:
            account_id: Target account
            transaction_type: Deposit or Withdrawal
            amount: Positive amount (Decimal, int or numeric string)
            description: Optional free text

        Returns:
            The recorded Transaction

        Raises:
            InvalidAmountError: If amount is not a positive exact decimal
            AccountNotFoundError: If the account does not exist
            InsufficientFundsError: If a withdrawal exceeds the balance
        """
        amount = to_amount(amount)

        async with self.accounts.locks.hold(account_id):
            account = await self._require_account(account_id)
            self._check_funds(account, transaction_type, amount)
            transaction = await self._apply(account, transaction_type, amount, description)

        log_action(
            self.logger, "info", f"Transaction recorded: {transaction_type.value}",
            action="record_transaction", resource=f"account:{account_id}",
            details={
                "transaction_id": transaction.id,
                "type": transaction_type.value,
                "amount": str(amount)
            }
        )
        return transaction

    async def get_transaction_history(self, account_id: str) -> List[TransactionSummary]:
        """
        Transactions of an account, most recent first

        Transactions with equal timestamps keep their recording order.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        if await self.accounts.get_by_id(account_id) is None:
            raise AccountNotFoundError(account_id)

        transactions = await self.transactions.get_by_account_id(account_id)
        ordered = sorted(transactions, key=lambda t: t.timestamp, reverse=True)
        return [t.to_summary() for t in ordered]

    async def transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Any,
        description: Optional[str] = None
    ) -> Tuple[Transaction, Transaction]:
        """
        Move an amount from one account to another

        Records a Withdrawal on the source and a Deposit on the destination
        with the same amount and description. Both accounts are locked and
        validated before either leg is written, so business failures leave
        both balances untouched. The withdrawal leg is validated first: a
        source short of funds fails before the destination is looked up.

        Returns:
            (withdrawal leg, deposit leg)

        Raises:
            InvalidAmountError, AccountNotFoundError, InsufficientFundsError
        """
        amount = to_amount(amount)

        async with self.accounts.locks.hold(from_account_id, to_account_id):
            source = await self._require_account(from_account_id)
            self._check_funds(source, TransactionType.WITHDRAWAL, amount)
            target = await self._require_account(to_account_id)

            if from_account_id == to_account_id:
                withdrawal = await self._apply(source, TransactionType.WITHDRAWAL, amount, description)
                target = await self._require_account(to_account_id)
                deposit = await self._apply(target, TransactionType.DEPOSIT, amount, description)
            else:
                withdrawal, deposit = await self._apply_legs(source, target, amount, description)

        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer", resource=f"account:{from_account_id}",
            details={
                "from_account": from_account_id,
                "to_account": to_account_id,
                "amount": str(amount),
                "withdrawal_id": withdrawal.id,
                "deposit_id": deposit.id
            }
        )
        return withdrawal, deposit

    async def _apply_legs(
        self,
        source: Account,
        target: Account,
        amount: Decimal,
        description: Optional[str]
    ) -> Tuple[Transaction, Transaction]:
        """Write both legs concurrently; undo a committed leg if the other fails"""
        results = await asyncio.gather(
            self._apply(source, TransactionType.WITHDRAWAL, amount, description),
            self._apply(target, TransactionType.DEPOSIT, amount, description),
            return_exceptions=True
        )
        withdrawal, deposit = results
        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return withdrawal, deposit

        for leg in results:
            if isinstance(leg, Transaction):
                await self._compensate(leg)
        raise failures[0]

    async def _compensate(self, leg: Transaction) -> Transaction:
        """Record the opposite movement of a committed leg. Caller holds the lock."""
        account = await self._require_account(leg.account_id)
        if leg.type == TransactionType.WITHDRAWAL:
            opposite = TransactionType.DEPOSIT
        else:
            opposite = TransactionType.WITHDRAWAL
        reversal = await self._apply(account, opposite, leg.amount, f"Reversal of {leg.id}")

        log_action(
            self.logger, "warning", "Transfer leg reversed",
            action="compensate_transfer", resource=f"account:{leg.account_id}",
            details={"reversed_id": leg.id, "reversal_id": reversal.id, "amount": str(leg.amount)}
        )
        return reversal

    async def _require_account(self, account_id: str) -> Account:
        account = await self.accounts.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    @staticmethod
    def _check_funds(account: Account, transaction_type: TransactionType, amount: Decimal) -> None:
        if transaction_type == TransactionType.WITHDRAWAL and amount > account.balance:
            raise InsufficientFundsError(account.id, account.balance, amount)

    async def _apply(
        self,
        account: Account,
        transaction_type: TransactionType,
        amount: Decimal,
        description: Optional[str]
    ) -> Transaction:
        """
        Write the new balance and the transaction record.

        The caller holds the account lock and has already checked funds. If
        the transaction cannot be appended, the previous account record is
        written back before the error propagates.
        """
        now = self.clock.now()
        transaction = Transaction(
            id=str(uuid.uuid4()),
            account_id=account.id,
            type=transaction_type,
            amount=amount,
            description=description or "",
            timestamp=now
        )
        updated = replace(
            account,
            balance=account.balance + transaction.signed_amount,
            updated_at=now
        )

        await self.accounts.update(updated)
        try:
            await self.transactions.add(transaction)
        except Exception:
            await self.accounts.update(account)
            raise
        return transaction
