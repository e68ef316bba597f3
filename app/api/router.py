"""
Router registration for the TicTacToe API.
"""
from fastapi import FastAPI

from app.api import sessions


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(sessions.router, prefix="/api/v1", tags=["sessions"])
