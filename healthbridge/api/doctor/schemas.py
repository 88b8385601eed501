from typing import Any, Dict, Optional, Union
from pydantic import BaseModel

from healthbridge.schemas.common import CamelModel


class DoctorLoginRequest(BaseModel):
    email: str
    password: str


class ChangeAvailabilityRequest(BaseModel):
    """Omitting available flips the current flag"""
    available: Optional[bool] = None


class DoctorProfileUpdateRequest(CamelModel):
    fees: Optional[int] = None
    address: Union[Dict[str, Any], str, None] = None
    available: Optional[bool] = None
    about: Optional[str] = None
