# tests/__init__.py
"""
Test Suite for techfolio.

Organization:
- `core`: Domain models and use cases, running on in-memory repositories.
- `adapters`: SQL repositories (SQLite) and the HTTP API (TestClient).
"""
