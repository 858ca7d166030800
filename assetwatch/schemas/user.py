"""User schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from assetwatch.models.user import UserRole


class UserResponse(BaseModel):
    """Schema for user response."""

    id: UUID
    email: EmailStr
    role: UserRole
    is_active: bool
    last_updated: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
