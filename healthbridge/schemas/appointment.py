from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from healthbridge.schemas.common import CamelModel


class AppointmentResponse(CamelModel):
    id: str
    user_id: str
    doctor_id: str = Field(..., alias="docId")
    slot_date: str
    slot_time: str
    user_data: Dict[str, Any]
    doc_data: Dict[str, Any]
    amount: int
    created_at: Optional[datetime] = None
    cancelled: bool
    payment_settled: bool
    completed: bool


class AppointmentListResponse(BaseModel):
    success: bool = True
    appointments: List[AppointmentResponse]


class DashboardData(CamelModel):
    earnings: int
    appointments: int
    completed: int
    cancelled: int
    patients: int
    latest_appointments: List[AppointmentResponse]


class AdminDashboardData(DashboardData):
    doctors: int
    users: int


class DoctorDashboardResponse(BaseModel):
    success: bool = True
    dash_data: DashboardData = Field(..., alias="dashData")


class AdminDashboardResponse(BaseModel):
    success: bool = True
    dash_data: AdminDashboardData = Field(..., alias="dashData")
