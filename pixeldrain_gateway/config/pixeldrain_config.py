import os
from dotenv import load_dotenv

load_dotenv()

class PixeldrainSettings:
    """Pixeldrain API Configuration"""
    
    # Endpoints
    API_URL: str = os.environ.get("PIXELDRAIN_API_URL", "https://pixeldrain.com/api").rstrip("/")
    PUBLIC_URL: str = os.environ.get("PIXELDRAIN_PUBLIC_URL", "https://pixeldrain.com").rstrip("/")
    
    # Authentication (sent as basic auth password, empty user name)
    API_KEY: str = os.environ.get("PIXELDRAIN_API_KEY", "")
    
    # Total timeout per upstream request in seconds; uploads can be large
    TIMEOUT: int = int(os.environ.get("PIXELDRAIN_TIMEOUT", 300))
    
    # Retry settings for transient failures
    MAX_RETRIES: int = int(os.environ.get("PIXELDRAIN_MAX_RETRIES", 2))
    RETRY_DELAY: float = float(os.environ.get("PIXELDRAIN_RETRY_DELAY", 1.0))
    
    CHECK_ON_STARTUP: bool = os.environ.get("PIXELDRAIN_CHECK_ON_STARTUP", "false").lower() == "true"

pixeldrain_settings = PixeldrainSettings()
