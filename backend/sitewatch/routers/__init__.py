"""API routers."""
from .targets import router as targets_router
from .probe import router as probe_router
from .status import router as status_router
from .live import router as live_router

__all__ = ["targets_router", "probe_router", "status_router", "live_router"]
