"""
Admin API Routes

Doctor onboarding and oversight of every appointment.
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile

from healthbridge.api.admin.schemas import AdminLoginRequest, AdminAvailabilityRequest
from healthbridge.api.deps import get_current_admin, get_db
from healthbridge.api.user.schemas import AppointmentActionRequest
from healthbridge.core.security import Principal
from healthbridge.domain.appointments.service import AppointmentService, DashboardService
from healthbridge.domain.auth.service import AuthenticationService
from healthbridge.domain.doctors.service import DoctorService
from healthbridge.schemas.appointment import (
    AdminDashboardData, AdminDashboardResponse, AppointmentListResponse, AppointmentResponse
)
from healthbridge.schemas.common import MessageResponse, TokenResponse
from healthbridge.schemas.doctor import DoctorAdminListResponse, DoctorProfile

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(payload: AdminLoginRequest):
    return TokenResponse(token=AuthenticationService.authenticate_admin(payload.email, payload.password))


@router.post("/add-doctor", response_model=MessageResponse)
def add_doctor(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    speciality: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    about: Optional[str] = Form(None),
    fees: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db=Depends(get_db),
    current_admin: Principal = Depends(get_current_admin)
):
    """Onboard a doctor from a multipart form with an `image` file field"""
    DoctorService(db).create_doctor(
        name=name,
        email=email,
        password=password,
        speciality=speciality,
        degree=degree,
        experience=experience,
        about=about,
        fees=fees,
        address=address,
        image=image.file if image else None,
        image_filename=image.filename if image else None
    )
    return MessageResponse(message="Doctor Added")


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(db=Depends(get_db), current_admin: Principal = Depends(get_current_admin)):
    appointments = AppointmentService(db).get_appointments()
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments]
    )


@router.post("/cancel-appointment", response_model=MessageResponse)
def cancel_appointment(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    current_admin: Principal = Depends(get_current_admin)
):
    AppointmentService(db).cancel_appointment(payload.appointment_id, current_admin)
    return MessageResponse(message="Appointment Cancelled")


@router.get("/all-doctors", response_model=DoctorAdminListResponse)
def all_doctors(db=Depends(get_db), current_admin: Principal = Depends(get_current_admin)):
    doctors = DoctorService(db).list_doctors()
    return DoctorAdminListResponse(doctors=[DoctorProfile.model_validate(d) for d in doctors])


@router.post("/change-availability", response_model=MessageResponse)
def change_availability(
    payload: AdminAvailabilityRequest,
    db=Depends(get_db),
    current_admin: Principal = Depends(get_current_admin)
):
    service = DoctorService(db)
    if payload.available is None:
        service.toggle_availability(payload.doctor_id)
    else:
        service.set_availability(payload.doctor_id, payload.available)
    return MessageResponse(message="Availability Changed")


@router.get("/dashboard", response_model=AdminDashboardResponse)
def dashboard(db=Depends(get_db), current_admin: Principal = Depends(get_current_admin)):
    data = DashboardService(db).admin_dashboard()
    data["latest_appointments"] = [
        AppointmentResponse.model_validate(a) for a in data["latest_appointments"]
    ]
    return AdminDashboardResponse(dashData=AdminDashboardData.model_validate(data))
