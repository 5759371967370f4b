"""
Async Storage Backend Module

Async view of the storage backends. The ledger stores are awaited from the
event loop, while the sync backends do their work on worker threads so a
slow disk never blocks the loop.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
import asyncio

from .storage import StorageInterface, InMemoryStorage, SQLiteStorage
from .config import LedgerConfig, get_config


class AsyncStorageInterface(ABC):
    """Abstract interface for async storage backends"""

    @abstractmethod
    async def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Insert or overwrite a record"""
        pass

    @abstractmethod
    async def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    async def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        pass

    @abstractmethod
    async def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    async def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    async def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass


class AsyncStorageAdapter(AsyncStorageInterface):
    """Runs a thread-safe sync backend in the default thread pool"""

    def __init__(self, storage: Optional[StorageInterface] = None):
        self.storage = storage or InMemoryStorage()

    async def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        await asyncio.to_thread(self.storage.save, table, record_id, data)

    async def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self.storage.load, table, record_id)

    async def load_all(self, table: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.storage.load_all, table)

    async def exists(self, table: str, record_id: str) -> bool:
        return await asyncio.to_thread(self.storage.exists, table, record_id)

    async def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.storage.find, table, filters)

    async def close(self) -> None:
        await asyncio.to_thread(self.storage.close)


def create_storage(config: Optional[LedgerConfig] = None) -> StorageInterface:
    """Build the sync backend selected by configuration"""
    config = config or get_config()
    backend = config.storage_backend.lower()

    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(config.database_path)
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


def create_async_storage(config: Optional[LedgerConfig] = None) -> AsyncStorageInterface:
    """Factory function to create the async storage used by the ledger stores"""
    return AsyncStorageAdapter(create_storage(config))
