# menova/schemas/profile.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserProfileIn(BaseModel):
    menopause_stage: Optional[str] = Field(default=None, max_length=64, description="perimenopause|menopause|postmenopause")
    notes: Optional[str] = None
    consent_given: Optional[bool] = Field(default=None, description="Explicit consent to process/store data")


class UserProfileOut(BaseModel):
    user_id: str
    menopause_stage: Optional[str] = None
    notes: Optional[str] = None
    consent_given: bool = False
    consent_at: Optional[datetime] = None

    class Config:
        from_attributes = True
