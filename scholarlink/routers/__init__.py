"""Aggregate router exports."""
from .auth import router as auth_router
from .connections import router as connections_router

__all__ = ["auth_router", "connections_router"]
