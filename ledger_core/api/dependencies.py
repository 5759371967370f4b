"""
Dependency wiring for the HTTP layer
"""

from typing import Optional
from fastapi import Request

from ..async_storage import AsyncStorageInterface, create_async_storage
from ..clock import Clock, SystemClock
from ..config import LedgerConfig, get_config
from ..ledger import LedgerEngine
from ..repositories import StorageAccountStore, StorageTransactionStore


class LedgerSystem:
    """Shared stores, clock and configuration behind the API"""
    
    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        storage: Optional[AsyncStorageInterface] = None,
        clock: Optional[Clock] = None
    ):
        self.config = config or get_config()
        self.storage = storage or create_async_storage(self.config)
        self.clock = clock or SystemClock()
        
        # Shared singletons; engines are cheap and built per request
        self.accounts = StorageAccountStore(self.storage)
        self.transactions = StorageTransactionStore(self.storage)
    
    def engine(self) -> LedgerEngine:
        return LedgerEngine(self.accounts, self.transactions, self.clock)
    
    async def close(self) -> None:
        await self.storage.close()


def get_ledger_system(request: Request) -> LedgerSystem:
    return request.app.state.ledger_system


def get_engine(request: Request) -> LedgerEngine:
    return get_ledger_system(request).engine()
