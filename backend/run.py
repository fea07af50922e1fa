#!/usr/bin/env python3
"""
Entry point for running the Expense Tracker API.

Usage:
    python run.py [--port PORT] [--host HOST] [--reload]
"""

import argparse
import uvicorn

from expenses.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Expense Tracker API server")
    parser.add_argument("--port", type=int, default=8000, help="Port to run on")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    print(f"Expense Tracker API on http://{args.host}:{args.port} (docs at /docs)")
    print(f"Database: {settings.resolved_database_url}")

    uvicorn.run(
        "expenses.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
