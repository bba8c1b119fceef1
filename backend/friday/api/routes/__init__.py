"""API routes module."""

from friday.api.routes.admin import router as admin_router
from friday.api.routes.health import router as health_router
from friday.api.routes.instances import router as instances_router
from friday.api.routes.leaderboard import router as leaderboard_router

__all__ = [
    "admin_router",
    "health_router",
    "instances_router",
    "leaderboard_router",
]
