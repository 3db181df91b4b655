"""HTTP API routers."""

from clipforge.api.proxy import router as proxy_router

__all__ = ["proxy_router"]
