from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, EmailStr


class RecipientCreate(BaseModel):
    email: EmailStr
    active: bool = True


class RecipientPatch(BaseModel):
    active: bool


class RecipientOut(BaseModel):
    id: int
    email: str
    active: bool
    created_at: datetime

    class Config:
        from_attributes = True
