from pydantic import BaseModel
from datetime import datetime


class ProviderResponse(BaseModel):
    """Schema for provider response."""
    id: int
    name: str
    timezone: str | None
    created_at: datetime

    class Config:
        from_attributes = True
