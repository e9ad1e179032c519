from typing import Literal
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Failure envelope returned by every endpoint."""
    ok: Literal[False] = False
    error: str = Field(..., description="Human readable error message", min_length=1)
