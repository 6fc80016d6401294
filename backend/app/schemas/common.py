"""Response envelopes shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """Success envelope: ``{"success": true, "data": ...}``."""

    success: bool = True
    data: DataT


class ErrorEnvelope(BaseModel):
    """Failure envelope: ``{"success": false, "error": ..., "status": ...}``."""

    success: bool = False
    error: str
    status: int


class MessageResponse(BaseModel):
    message: str
