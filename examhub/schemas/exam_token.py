from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class ExamTokenRequest(BaseModel):
    """Body for issuing a one-time exam token."""
    user_id: int
    ttl_minutes: Optional[int] = Field(default=None, ge=1)

class ExamTokenScopedRequest(BaseModel):
    """Body for revoke/delete: the token is only touched when it matches bank and user."""
    user_id: int
    token: str = Field(..., min_length=1)

class ExamTokenIssued(BaseModel):
    token: str
    expires_at: datetime
    url: str

class ExamTokenRevoked(BaseModel):
    revoked: bool

class ExamTokenDeleted(BaseModel):
    deleted: bool
