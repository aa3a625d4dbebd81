# techfolio/adapters/api/__init__.py
"""
REST API Adapter.

This package is the HTTP entry point of the content backend.
It is built on FastAPI and follows the Hexagonal Architecture principles:
- It depends on `techfolio.core` (Use Cases & Models).
- It wires the `techfolio.shared.container` to inject dependencies.
- It does NOT contain business logic; every request becomes one Dispatcher message.
"""

from .main import create_app

__all__ = ["create_app"]
