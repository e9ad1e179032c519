import os
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    APP_PORT: int = int(os.environ.get("APP_PORT", 8000))
    APP_HOST: str = os.environ.get("APP_HOST", "127.0.0.1")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Browser origins allowed to call the gateway (the desktop shell renderer)
    CORS_ORIGINS: list[str] = _split_csv(os.environ.get("CORS_ORIGINS", ""))

    # Caller trust
    ALLOWED_CLIENTS: list[str] = _split_csv(os.environ.get("ALLOWED_CLIENTS", "127.0.0.1,::1,localhost"))
    GATEWAY_TOKEN: str = os.environ.get("GATEWAY_TOKEN", "")

    # Upload limits
    MAX_UPLOAD_SIZE_MB: int = int(os.environ.get("MAX_UPLOAD_SIZE_MB", 512))

    # Rate limiting
    RATE_LIMIT: str = os.environ.get("RATE_LIMIT", "60/minute")
    RATE_LIMIT_ENABLED: bool = os.environ.get("RATE_LIMIT_ENABLED", "true").lower() == "true"

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


settings = Settings()
