"""
Account and Transaction Stores

Repository contracts the ledger engine reads and writes through, plus the
implementations backed by an AsyncStorageInterface. Both stores are shared
by every engine instance; the account store also owns the per-account lock
registry so serialization holds across engines.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .async_storage import AsyncStorageInterface
from .locks import AccountLocks
from .models import Account, Transaction


class AccountStore(ABC):
    """Keyed storage of accounts"""

    def __init__(self):
        self.locks = AccountLocks()

    @abstractmethod
    async def add(self, account: Account) -> Account:
        pass

    @abstractmethod
    async def get_by_id(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    async def get_all(self) -> List[Account]:
        pass

    @abstractmethod
    async def update(self, account: Account) -> None:
        pass


class TransactionStore(ABC):
    """Append-only storage of transactions"""

    @abstractmethod
    async def add(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    async def get_by_account_id(self, account_id: str) -> List[Transaction]:
        """Transactions of one account in insertion order"""
        pass

    @abstractmethod
    async def get_all(self) -> List[Transaction]:
        pass


class StorageAccountStore(AccountStore):
    """Account store on top of a storage backend"""

    def __init__(self, storage: AsyncStorageInterface, table_name: str = "accounts"):
        super().__init__()
        self.storage = storage
        self.table_name = table_name

    async def add(self, account: Account) -> Account:
        await self.storage.save(self.table_name, account.id, account.to_dict())
        return account

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        data = await self.storage.load(self.table_name, account_id)
        if data:
            return Account.from_dict(data)
        return None

    async def get_all(self) -> List[Account]:
        return [Account.from_dict(data) for data in await self.storage.load_all(self.table_name)]

    async def update(self, account: Account) -> None:
        await self.storage.save(self.table_name, account.id, account.to_dict())


class StorageTransactionStore(TransactionStore):
    """Transaction store on top of a storage backend"""

    def __init__(self, storage: AsyncStorageInterface, table_name: str = "transactions"):
        self.storage = storage
        self.table_name = table_name

    async def add(self, transaction: Transaction) -> Transaction:
        if await self.storage.exists(self.table_name, transaction.id):
            raise ValueError(f"Transaction {transaction.id} already recorded")
        await self.storage.save(self.table_name, transaction.id, transaction.to_dict())
        return transaction

    async def get_by_account_id(self, account_id: str) -> List[Transaction]:
        found = await self.storage.find(self.table_name, {"account_id": account_id})
        return [Transaction.from_dict(data) for data in found]

    async def get_all(self) -> List[Transaction]:
        return [Transaction.from_dict(data) for data in await self.storage.load_all(self.table_name)]
