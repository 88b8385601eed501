"""
Doctor API Routes

Public doctor listing plus the endpoints a signed-in doctor uses to manage
their own appointments, availability and profile.
"""

from typing import Optional
from fastapi import APIRouter, Body, Depends, Query

from healthbridge.api.deps import get_current_doctor, get_db
from healthbridge.api.doctor.schemas import (
    DoctorLoginRequest, ChangeAvailabilityRequest, DoctorProfileUpdateRequest
)
from healthbridge.api.user.schemas import AppointmentActionRequest
from healthbridge.core.security import Principal
from healthbridge.domain.appointments.service import AppointmentService, DashboardService
from healthbridge.domain.auth.service import AuthenticationService
from healthbridge.domain.doctors.service import DoctorService
from healthbridge.schemas.appointment import (
    AppointmentListResponse, AppointmentResponse, DoctorDashboardResponse, DashboardData
)
from healthbridge.schemas.common import MessageResponse, TokenResponse
from healthbridge.schemas.doctor import (
    DoctorListResponse, DoctorProfile, DoctorProfileResponse, DoctorPublic
)

router = APIRouter()


@router.get("/list", response_model=DoctorListResponse)
def list_doctors(available_only: bool = Query(False, alias="availableOnly"), db=Depends(get_db)):
    """Public doctor directory"""
    doctors = DoctorService(db).list_doctors(available_only=available_only)
    return DoctorListResponse(doctors=[DoctorPublic.model_validate(d) for d in doctors])


@router.post("/login", response_model=TokenResponse)
def login(payload: DoctorLoginRequest, db=Depends(get_db)):
    token = AuthenticationService(db).authenticate_doctor(payload.email, payload.password)
    return TokenResponse(token=token)


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(db=Depends(get_db), current_doctor: Principal = Depends(get_current_doctor)):
    appointments = DoctorService(db).list_appointments(current_doctor.id)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments]
    )


@router.post("/cancel-appointment", response_model=MessageResponse)
def cancel_appointment(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    current_doctor: Principal = Depends(get_current_doctor)
):
    AppointmentService(db).cancel_appointment(payload.appointment_id, current_doctor)
    return MessageResponse(message="Appointment Cancelled")


@router.post("/complete-appointment", response_model=MessageResponse)
def complete_appointment(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    current_doctor: Principal = Depends(get_current_doctor)
):
    AppointmentService(db).complete_appointment(payload.appointment_id, current_doctor.id)
    return MessageResponse(message="Appointment Completed")


@router.post("/change-availability", response_model=MessageResponse)
def change_availability(
    payload: Optional[ChangeAvailabilityRequest] = Body(None),
    db=Depends(get_db),
    current_doctor: Principal = Depends(get_current_doctor)
):
    service = DoctorService(db)
    if payload is not None and payload.available is not None:
        service.set_availability(current_doctor.id, payload.available)
    else:
        service.toggle_availability(current_doctor.id)
    return MessageResponse(message="Availability Changed")


@router.get("/dashboard", response_model=DoctorDashboardResponse)
def dashboard(db=Depends(get_db), current_doctor: Principal = Depends(get_current_doctor)):
    data = DashboardService(db).doctor_dashboard(current_doctor.id)
    data["latest_appointments"] = [
        AppointmentResponse.model_validate(a) for a in data["latest_appointments"]
    ]
    return DoctorDashboardResponse(dashData=DashboardData.model_validate(data))


@router.get("/profile", response_model=DoctorProfileResponse)
def profile(db=Depends(get_db), current_doctor: Principal = Depends(get_current_doctor)):
    doctor = DoctorService(db).get_doctor(current_doctor.id)
    return DoctorProfileResponse(profileData=DoctorProfile.model_validate(doctor))


@router.post("/update-profile", response_model=MessageResponse)
def update_profile(
    payload: DoctorProfileUpdateRequest,
    db=Depends(get_db),
    current_doctor: Principal = Depends(get_current_doctor)
):
    DoctorService(db).update_profile(
        current_doctor.id,
        fees=payload.fees,
        address=payload.address,
        available=payload.available,
        about=payload.about
    )
    return MessageResponse(message="Profile Updated")
