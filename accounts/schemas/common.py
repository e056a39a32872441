"""Response envelope shared by every success path."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ServiceResponse(BaseModel, Generic[T]):
    """Uniform success wrapper: HTTP status code plus payload (or null)."""

    status: int = Field(..., description="HTTP status code of the response")
    data: T | None = Field(default=None, description="Payload; null when there is none")
