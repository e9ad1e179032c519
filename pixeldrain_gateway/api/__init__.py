from .routes import router, health_router

__all__ = ["router", "health_router"]
