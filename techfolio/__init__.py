# techfolio/__init__.py
"""
Techfolio - Technical Content Management Backend.

Serves a portfolio of articles, projects and certificates organized in a
category tree. The package follows Hexagonal Architecture (Ports & Adapters):
`core` holds the domain and use cases, `adapters` the HTTP and storage edges,
`shared` the configuration, DI container and observability setup.
"""

__version__ = "0.1.0"
