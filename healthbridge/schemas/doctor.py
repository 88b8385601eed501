from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from healthbridge.schemas.common import CamelModel, Address


class DoctorPublic(CamelModel):
    """Doctor as listed publicly; no credentials or email"""
    id: str
    name: str
    image: str
    speciality: str
    degree: str
    experience: str
    about: Optional[str] = ""
    available: bool
    fees: int
    address: Address = Address()
    slots_booked: Dict[str, List[str]] = {}


class DoctorProfile(DoctorPublic):
    email: str


class DoctorListResponse(BaseModel):
    success: bool = True
    doctors: List[DoctorPublic]


class DoctorAdminListResponse(BaseModel):
    success: bool = True
    doctors: List[DoctorProfile]


class DoctorProfileResponse(BaseModel):
    success: bool = True
    profile_data: DoctorProfile = Field(..., alias="profileData")
