# techfolio/main.py
"""ASGI entry point: `uvicorn techfolio.main:app`."""
from techfolio.adapters.api.main import create_app

app = create_app()
