"""Route modules."""

from .jobs import router as jobs_router
from .orders import router as orders_router
from .webhooks import router as webhooks_router

__all__ = ["jobs_router", "orders_router", "webhooks_router"]
