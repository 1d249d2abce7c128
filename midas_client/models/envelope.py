"""Generic response envelope models.

Every backend response is wrapped in the same envelope:
{ status: str, message: str, code: uint16, data: T }

``data`` may be missing on backend-side failures; the decoder then rebuilds
the envelope from a RawEnvelope with a default payload, so callers always get
a fully populated ApiResponse.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from midas_client.models.defaults import default_for

T = TypeVar("T")

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class RawEnvelope(BaseModel):
    """Status-only subset of the envelope, used to recover from payload mismatches."""

    status: str
    message: str
    code: int = Field(..., ge=0, le=65535)


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all backend responses."""

    status: str
    message: str
    code: int = Field(..., ge=0, le=65535)
    data: T

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    @classmethod
    def payload_type(cls) -> Any:
        """Return the concrete ``T`` of a parametrized envelope class."""
        args = cls.__pydantic_generic_metadata__["args"]
        if not args:
            raise TypeError(
                f"{cls.__name__} is not parametrized; use e.g. ApiResponse[int]"
            )
        return args[0]

    @classmethod
    def with_default(cls, status: str, message: str, code: int) -> ApiResponse[T]:
        """Build an envelope whose ``data`` is the payload type's zero value."""
        return cls(
            status=status,
            message=message,
            code=code,
            data=default_for(cls.payload_type()),
        )

    @classmethod
    def from_raw(cls, raw: RawEnvelope) -> ApiResponse[T]:
        return cls.with_default(raw.status, raw.message, raw.code)
