from typing import Optional
from pydantic import BaseModel, Field

from healthbridge.schemas.common import CamelModel, Address


class UserProfile(CamelModel):
    id: str
    name: str
    email: str
    image: Optional[str] = None
    phone: Optional[str] = None
    address: Address = Address()
    gender: Optional[str] = None
    dob: Optional[str] = None


class UserProfileResponse(BaseModel):
    success: bool = True
    user_data: UserProfile = Field(..., alias="userData")
