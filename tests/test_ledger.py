"""
Test suite for the ledger engine

Tests account creation, lookups, deposits and withdrawals, history ordering,
and the reconciliation between balances and transaction history.
"""

import pytest
import logging
from decimal import Decimal
from datetime import datetime, timezone, timedelta

from ledger_core.async_storage import AsyncStorageAdapter
from ledger_core.clock import ManualClock
from ledger_core.errors import (
    LedgerError, AccountNotFoundError, InsufficientFundsError, InvalidAmountError
)
from ledger_core.ledger import LedgerEngine, to_amount
from ledger_core.models import TransactionType
from ledger_core.repositories import StorageAccountStore, StorageTransactionStore
from ledger_core.storage import InMemoryStorage


DEPOSIT = TransactionType.DEPOSIT
WITHDRAWAL = TransactionType.WITHDRAWAL
START = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestToAmount:
    """Test amount normalization"""

    def test_accepts_exact_values(self):
        assert to_amount(Decimal("10.50")) == Decimal("10.50")
        assert to_amount(3) == Decimal("3")
        assert to_amount("0.01") == Decimal("0.01")

    @pytest.mark.parametrize("value", [0, -1, "0", "-0.01", "abc", "NaN", "Infinity", 1.5, True, None])
    def test_rejects_invalid_values(self, value):
        with pytest.raises(InvalidAmountError):
            to_amount(value)


class TestLedgerEngine:
    """Test ledger engine operations"""

    def setup_method(self):
        """Set up test fixtures"""
        self.clock = ManualClock(START)
        self.storage = AsyncStorageAdapter(InMemoryStorage())
        self.accounts = StorageAccountStore(self.storage)
        self.transactions = StorageTransactionStore(self.storage)
        self.engine = LedgerEngine(self.accounts, self.transactions, self.clock)

    async def balance_of(self, account_id):
        return (await self.accounts.get_by_id(account_id)).balance

    @pytest.mark.asyncio
    async def test_create_account_starts_at_zero(self):
        account = await self.engine.create_account("User")

        assert account.name == "User"
        assert account.balance == Decimal("0")
        assert account.created_at == START
        assert account.id
        assert await self.accounts.get_by_id(account.id) == account

    @pytest.mark.asyncio
    async def test_create_account_ids_are_unique(self):
        first = await self.engine.create_account("A")
        second = await self.engine.create_account("A")
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_get_account(self):
        account = await self.engine.create_account("User")

        assert await self.engine.get_account(account.id) == account
        assert await self.engine.get_account("none") is None

    @pytest.mark.asyncio
    async def test_get_account_balance(self):
        account = await self.engine.create_account("User")
        await self.engine.record_transaction(account.id, DEPOSIT, Decimal("999"))
        later = self.clock.advance(timedelta(hours=1))

        balance = await self.engine.get_account_balance(account.id)

        assert balance.account_id == account.id
        assert balance.name == "User"
        assert balance.balance == Decimal("999")
        assert balance.as_of == later

    @pytest.mark.asyncio
    async def test_get_account_balance_not_found(self):
        assert await self.engine.get_account_balance("none") is None

    @pytest.mark.asyncio
    async def test_deposit_increases_balance(self):
        account = await self.engine.create_account("User")
        self.clock.advance()

        tx = await self.engine.record_transaction(account.id, DEPOSIT, Decimal("50"), "salary")

        assert tx.type == DEPOSIT
        assert tx.amount == Decimal("50")
        assert tx.account_id == account.id
        assert tx.description == "salary"
        assert tx.timestamp == self.clock.now()
        assert await self.balance_of(account.id) == Decimal("50")

    @pytest.mark.asyncio
    async def test_withdrawal_decreases_balance(self):
        account = await self.engine.create_account("User")
        await self.engine.record_transaction(account.id, DEPOSIT, Decimal("100"))

        tx = await self.engine.record_transaction(account.id, WITHDRAWAL, Decimal("30"))

        assert tx.type == WITHDRAWAL
        assert tx.amount == Decimal("30")
        assert tx.description == ""
        assert await self.balance_of(account.id) == Decimal("70")

    @pytest.mark.asyncio
    async def test_withdrawal_of_entire_balance(self):
        account = await self.engine.create_account("User")
        await self.engine.record_transaction(account.id, DEPOSIT, Decimal("25.00"))
        await self.engine.record_transaction(account.id, WITHDRAWAL, Decimal("25.00"))

        assert await self.balance_of(account.id) == Decimal("0")

    @pytest.mark.asyncio
    async def test_balance_write_updates_timestamp(self):
        account = await self.engine.create_account("User")
        later = self.clock.advance(timedelta(minutes=3))
        await self.engine.record_transaction(account.id, DEPOSIT, 1)

        stored = await self.accounts.get_by_id(account.id)
        assert stored.created_at == START
        assert stored.updated_at == later

    @pytest.mark.asyncio
    async def test_insufficient_funds_scenario(self):
        """Deposit 100 then withdraw 150: rejected, balance stays 100"""
        account = await self.engine.create_account("A")
        await self.engine.record_transaction(account.id, DEPOSIT, Decimal("100"))

        with pytest.raises(InsufficientFundsError) as exc_info:
            await self.engine.record_transaction(account.id, WITHDRAWAL, Decimal("150"))

        error = exc_info.value
        assert error.account_id == account.id
        assert error.balance == Decimal("100")
        assert error.requested == Decimal("150")
        assert isinstance(error, LedgerError)
        assert "Current balance: 100, withdrawal amount: 150" in str(error)

        assert await self.balance_of(account.id) == Decimal("100")
        assert len(await self.transactions.get_by_account_id(account.id)) == 1

    @pytest.mark.asyncio
    async def test_unknown_account_creates_nothing(self):
        with pytest.raises(AccountNotFoundError) as exc_info:
            await self.engine.record_transaction("none", DEPOSIT, Decimal("100"))

        assert exc_info.value.account_id == "none"
        assert "Account with ID 'none' was not found." == str(exc_info.value)
        assert await self.transactions.get_all() == []

    @pytest.mark.asyncio
    async def test_invalid_amount_rejected_before_lookup(self):
        account = await self.engine.create_account("User")

        with pytest.raises(InvalidAmountError):
            await self.engine.record_transaction(account.id, DEPOSIT, Decimal("0"))
        with pytest.raises(InvalidAmountError):
            await self.engine.record_transaction(account.id, DEPOSIT, Decimal("-5"))
        with pytest.raises(InvalidAmountError):
            await self.engine.record_transaction("none", DEPOSIT, 0.1)

        assert await self.balance_of(account.id) == Decimal("0")
        assert await self.transactions.get_all() == []

    @pytest.mark.asyncio
    async def test_decimal_arithmetic_has_no_drift(self):
        account = await self.engine.create_account("User")
        for _ in range(10):
            await self.engine.record_transaction(account.id, DEPOSIT, "0.1")

        assert await self.balance_of(account.id) == Decimal("1.0")

    @pytest.mark.asyncio
    async def test_balance_matches_history(self):
        """Sequential movements: balance equals deposits minus withdrawals"""
        account = await self.engine.create_account("User")
        movements = [
            (DEPOSIT, "100.00"), (WITHDRAWAL, "20.55"), (DEPOSIT, "3.10"),
            (WITHDRAWAL, "82.55"), (DEPOSIT, "0.01"), (DEPOSIT, "49.99"),
        ]
        for tx_type, amount in movements:
            self.clock.advance()
            await self.engine.record_transaction(account.id, tx_type, Decimal(amount))

        expected = sum(
            Decimal(a) if t == DEPOSIT else -Decimal(a) for t, a in movements
        )
        history = await self.engine.get_transaction_history(account.id)
        from_history = sum(
            s.amount if s.type == DEPOSIT else -s.amount for s in history
        )

        assert await self.balance_of(account.id) == expected == Decimal("50.00")
        assert from_history == expected
        assert len(history) == len(movements)

    @pytest.mark.asyncio
    async def test_history_most_recent_first(self):
        account = await self.engine.create_account("User")
        for amount in ("1", "2", "3"):
            self.clock.advance()
            await self.engine.record_transaction(account.id, DEPOSIT, Decimal(amount))

        history = await self.engine.get_transaction_history(account.id)

        assert [s.amount for s in history] == [Decimal("3"), Decimal("2"), Decimal("1")]
        timestamps = [s.timestamp for s in history]
        assert timestamps == sorted(timestamps, reverse=True)

    @pytest.mark.asyncio
    async def test_history_ties_keep_recording_order(self):
        account = await self.engine.create_account("User")
        recorded = []
        for amount in ("1", "2", "3"):
            tx = await self.engine.record_transaction(account.id, DEPOSIT, Decimal(amount))
            recorded.append(tx.id)

        history = await self.engine.get_transaction_history(account.id)
        assert [s.id for s in history] == recorded

    @pytest.mark.asyncio
    async def test_history_does_not_leak_other_accounts(self):
        a = await self.engine.create_account("A")
        b = await self.engine.create_account("B")
        await self.engine.record_transaction(a.id, DEPOSIT, 10)
        await self.engine.record_transaction(b.id, DEPOSIT, 20)
        await self.engine.record_transaction(a.id, WITHDRAWAL, 5)

        a_ids = {t.id for t in await self.transactions.get_by_account_id(a.id)}
        history = await self.engine.get_transaction_history(a.id)

        assert {s.id for s in history} == a_ids
        assert len(history) == 2
        assert [s.amount for s in await self.engine.get_transaction_history(b.id)] == [Decimal("20")]

    @pytest.mark.asyncio
    async def test_history_empty_for_new_account(self):
        account = await self.engine.create_account("User")
        assert await self.engine.get_transaction_history(account.id) == []

    @pytest.mark.asyncio
    async def test_history_unknown_account(self):
        with pytest.raises(AccountNotFoundError):
            await self.engine.get_transaction_history("none")

    @pytest.mark.asyncio
    async def test_engines_share_state_through_stores(self):
        """An engine per request sees the same accounts"""
        account = await self.engine.create_account("User")
        other = LedgerEngine(self.accounts, self.transactions, self.clock)

        await other.record_transaction(account.id, DEPOSIT, 5)
        assert (await self.engine.get_account(account.id)).balance == Decimal("5")

    @pytest.mark.asyncio
    async def test_commands_are_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="ledger.engine")
        account = await self.engine.create_account("User")
        await self.engine.record_transaction(account.id, DEPOSIT, 5)

        actions = [getattr(r, "action", None) for r in caplog.records]
        assert "create_account" in actions
        assert "record_transaction" in actions

    @pytest.mark.asyncio
    async def test_unknown_ids_leave_no_locks_behind(self):
        for i in range(500):
            with pytest.raises(AccountNotFoundError):
                await self.engine.record_transaction(f"ghost-{i}", DEPOSIT, 1)

        assert len(self.accounts.locks) == 0

    @pytest.mark.asyncio
    async def test_locks_released_after_success(self):
        account = await self.engine.create_account("User")
        await self.engine.record_transaction(account.id, DEPOSIT, 5)
        assert len(self.accounts.locks) == 0

    @pytest.mark.asyncio
    async def test_business_failures_are_not_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="ledger.engine")
        with pytest.raises(AccountNotFoundError):
            await self.engine.record_transaction("none", DEPOSIT, 5)
        assert [r for r in caplog.records if r.name.startswith("ledger")] == []
