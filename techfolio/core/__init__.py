# techfolio/core/__init__.py
"""
Core Domain Layer.

This package contains the pure business logic and entities of the system.
It strictly follows the Hexagonal Architecture (Ports & Adapters) pattern:
- No dependencies on web frameworks.
- No dependencies on infrastructure (SQL, in-memory stores).
- Defines Interfaces (Ports) that the Infrastructure layer must implement.
"""
