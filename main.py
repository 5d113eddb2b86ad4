"""
Main Application Entry Point

FastAPI application for PDF translation with layout reflow.

Run with: uvicorn main:app --host 0.0.0.0 --port 3000
"""

from core.app_factory import create_app

app = create_app()
