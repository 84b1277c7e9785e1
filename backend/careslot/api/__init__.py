from .routes import router as api_router
from .insights import router as insights_router

__all__ = ["api_router", "insights_router"]
