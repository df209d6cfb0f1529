"""
asgi.py -- ASGI entry point for the ISRS auth service.

Run with:  uvicorn asgi:app --reload
           python main.py

The static front-end is served separately; this app exposes only /api/*.
"""

from api.main import app

__all__ = ["app"]
