#!/usr/bin/env python3
"""
Account service -- user registration, password login, and logout over HTTP.

Usage:
  python main.py
  python main.py --port 9000
  python main.py --host 0.0.0.0 --reload

Environment variables (or a .env file in the working directory):
  DATABASE_URL           SQLAlchemy URL of the user database.
  ACCESS_TOKEN_SECRET    Secret for access tokens (>= 32 chars).
  REFRESH_TOKEN_SECRET   Secret for refresh tokens (>= 32 chars, differs from the above).
  PORT                   Listen port (default 8008).
  DEBUG                  true = auto-generate missing secrets for local development.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="account-service",
        description="Run the account service HTTP API.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: PORT or {settings.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    print(f"Server is running on port {args.port}")
    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
