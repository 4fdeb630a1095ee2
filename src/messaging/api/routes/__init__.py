from .messages import router as messages_router
from .webhook import router as webhook_router

__all__ = ["messages_router", "webhook_router"]
