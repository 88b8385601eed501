from typing import Optional
from pydantic import BaseModel, Field

from healthbridge.schemas.common import CamelModel


class AdminLoginRequest(BaseModel):
    email: str
    password: str


class AdminAvailabilityRequest(CamelModel):
    """Omitting available flips the doctor's current flag"""
    doctor_id: str = Field(..., alias="docId")
    available: Optional[bool] = None
