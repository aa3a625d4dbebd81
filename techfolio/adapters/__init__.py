# techfolio/adapters/__init__.py
"""
Infrastructure Adapters.

This package contains the concrete implementations of the Ports defined in `techfolio.core.ports`.
These adapters connect the application to the outside world:
- `api`: The Primary Adapter (Driving) - FastAPI web server.
- `persistence`: Secondary Adapters (Driven) - in-memory and SQL repositories.

In Hexagonal Architecture, dependencies point INWARD. These modules depend on `techfolio.core`,
but `techfolio.core` never imports from here.
"""
