from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope for every successful response."""
    message: str = Field(..., description="Short human-readable outcome, e.g. 'Exam attempt ready'.")
    data: Optional[DataType] = Field(None, description="Payload of the operation.")

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable code such as TOKEN_EXPIRED or INSUFFICIENT_BALANCE")
    message: str = Field(..., description="Human-readable explanation")
    details: Optional[Dict[str, Any]] = Field(None, description="Structured context, e.g. required and available balance")

class ErrorResponse(BaseModel):
    """Body of every error response, domain failures and validation errors alike."""
    error: ErrorDetail
    timestamp: str = Field(..., description="UTC time of the failure, ISO 8601")
    path: str = Field(..., description="Request URL")
    request_id: Optional[str] = Field(None, description="Matches the X-Request-ID header and the request log line")

class HealthStatus(BaseModel):
    status: str = "ok"
    version: str
