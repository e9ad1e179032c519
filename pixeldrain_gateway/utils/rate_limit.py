from slowapi import Limiter
from slowapi.util import get_remote_address

from pixeldrain_gateway.config.app_config import settings

# Per-client limiter shared by the app (exception handler) and the routes (decorators)
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
