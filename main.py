#!/usr/bin/env python3
"""
AuthGate -- user registration, password sign-in and server-side sessions.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 127.0.0.1 --reload

Environment variables (or .env):
  DATABASE_URL          SQLAlchemy URL for the users table (SQLite file by default).
  SESSION_STORE_URL     SQLAlchemy URL for the sessions table (defaults to DATABASE_URL).
  PORT                  Listen port when --port is not given (default 3030).
  BCRYPT_ROUNDS         bcrypt cost factor (default 14).
  SECURE_COOKIES        Set false only for plain-HTTP local development.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the AuthGate HTTP server.")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listen port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
