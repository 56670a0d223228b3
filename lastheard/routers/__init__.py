"""API routers package."""
from lastheard.routers import public, api, user, system

__all__ = [
    "public",
    "api",
    "user",
    "system",
]
