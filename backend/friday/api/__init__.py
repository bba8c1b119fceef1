"""HTTP API: application factory, middleware and routers."""

from friday.api.server import create_app

__all__ = ["create_app"]
