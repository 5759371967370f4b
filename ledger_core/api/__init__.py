"""
Ledger API Application Factory
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
import uvicorn

from .accounts import router as accounts_router
from .dependencies import LedgerSystem, get_ledger_system, get_engine
from .. import __version__
from ..config import get_config
from ..logging_config import setup_logging


def create_app(system: Optional[LedgerSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.ledger_system.close()
    
    app = FastAPI(
        title="Ledger API",
        description="Accounts, deposits, withdrawals and transfers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.ledger_system = system or LedgerSystem()
    
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    
    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        system = get_ledger_system(request)
        return {
            "status": "healthy",
            "service": "ledger_api",
            "version": __version__,
            "locked_accounts": len(system.accounts.locks)
        }
    
    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)
    uvicorn.run(
        "ledger_core.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )


__all__ = ["create_app", "run_server", "LedgerSystem", "get_ledger_system", "get_engine"]
