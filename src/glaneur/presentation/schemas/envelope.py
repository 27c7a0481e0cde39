"""
Response envelope schemas.

Every API response is wrapped as
{success, data | error: {code, message}, requestId}.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model accepting snake_case names and emitting camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class ErrorBody(BaseModel):
    code: str
    message: str


class SuccessEnvelope(CamelModel, Generic[T]):
    """Successful response."""

    success: bool = True
    data: T
    request_id: Optional[str] = Field(default=None, alias="requestId")


class ErrorEnvelope(CamelModel):
    """Failed response."""

    success: bool = False
    error: ErrorBody
    request_id: Optional[str] = Field(default=None, alias="requestId")
