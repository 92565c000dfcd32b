"""Version 1 API routers."""

from ferna.api.v1.auth import router as auth_router

__all__ = ["auth_router"]
