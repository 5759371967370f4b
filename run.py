#!/usr/bin/env python3
"""
Ledger Service Entry Point

Starts the FastAPI server with the ledger API. Host, port, storage backend
and logging are read from LEDGER_* environment variables (see
ledger_core/config.py).
"""

import sys

from ledger_core.api import run_server


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down ledger service...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
