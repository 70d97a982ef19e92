"""
ASGI entry point: `uvicorn app:app` from the src/ directory.
"""

from api.assistant import create_app

app = create_app()
