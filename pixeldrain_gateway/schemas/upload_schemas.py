from typing import Optional
from pydantic import BaseModel, Field, model_validator


class UploadResult(BaseModel):
    """Normalized outcome of a single upload attempt."""
    ok: bool = Field(..., description="Whether the upload succeeded")
    url: Optional[str] = Field(None, description="Public URL of the uploaded file (success only)")
    error: Optional[str] = Field(None, description="Human readable error message (failure only)")

    @model_validator(mode="after")
    def check_url_or_error(self):
        if self.ok:
            if not self.url:
                raise ValueError("successful upload result requires a non-empty url")
            if self.error is not None:
                raise ValueError("successful upload result cannot carry an error")
        else:
            if not self.error:
                raise ValueError("failed upload result requires a non-empty error")
            if self.url is not None:
                raise ValueError("failed upload result cannot carry a url")
        return self

    @classmethod
    def success(cls, url: str) -> "UploadResult":
        return cls(ok=True, url=url)

    @classmethod
    def failure(cls, error: str) -> "UploadResult":
        return cls(ok=False, error=error or "Upload failed")

    def to_response(self) -> dict:
        """Envelope as sent over the wire, without the absent field."""
        return self.model_dump(exclude_none=True)
