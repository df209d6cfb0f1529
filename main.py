#!/usr/bin/env python3
"""
ISRS auth service runner.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY     JWT signing secret, at least 32 characters. Required unless DEBUG=true.
  DEBUG          true = generate a throwaway SECRET_KEY at startup (dev only).
  DATABASE_URL   SQLAlchemy URL. Defaults to isrs.sqlite in the project root.
  PORT           Listen port. Defaults to 3000.
"""

import argparse

import uvicorn

from core.config import get_settings


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the ISRS auth API server.")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listen port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser


def main() -> None:
    args = _build_parser().parse_args()
    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
