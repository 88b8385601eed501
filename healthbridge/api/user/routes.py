"""
User API Routes

Patient-facing endpoints: account, profile, booking and payments.
"""

from typing import Dict, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile

from healthbridge.api.deps import get_current_user, get_db, get_origin
from healthbridge.api.user.schemas import (
    RegisterRequest, LoginRequest, BookAppointmentRequest, AppointmentActionRequest,
    RazorpayVerifyRequest, StripeVerifyRequest, RazorpayOrderResponse, StripeSessionResponse
)
from healthbridge.core.exceptions import ValidationError
from healthbridge.core.security import Principal
from healthbridge.domain.appointments.service import AppointmentService
from healthbridge.domain.auth.service import AuthenticationService
from healthbridge.domain.payments.service import PaymentService
from healthbridge.domain.users.service import UserService
from healthbridge.schemas.appointment import AppointmentListResponse, AppointmentResponse
from healthbridge.schemas.common import MessageResponse, TokenResponse
from healthbridge.schemas.user import UserProfile, UserProfileResponse
from healthbridge.services.payment_gateway import PaymentGateway, RAZORPAY, STRIPE, get_payment_gateways

router = APIRouter()


@router.post("/register", response_model=TokenResponse)
def register(payload: RegisterRequest, db=Depends(get_db)):
    """Create a patient account and sign it in"""
    service = AuthenticationService(db)
    user = service.register_user(payload.name, payload.email, payload.password)
    return TokenResponse(token=service.issue_user_token(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db=Depends(get_db)):
    token = AuthenticationService(db).authenticate_user(payload.email, payload.password)
    return TokenResponse(token=token)


@router.get("/get-profile", response_model=UserProfileResponse)
def get_profile(db=Depends(get_db), current_user: Principal = Depends(get_current_user)):
    user = UserService(db).get_profile(current_user.id)
    return UserProfileResponse(userData=UserProfile.model_validate(user))


@router.post("/update-profile", response_model=MessageResponse)
def update_profile(
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    dob: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db=Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Update the caller's profile; an image, if sent, is uploaded first"""
    UserService(db).update_profile(
        current_user.id,
        name=name,
        phone=phone,
        dob=dob,
        gender=gender,
        address=address,
        image=image.file if image else None,
        image_filename=image.filename if image else None
    )
    return MessageResponse(message="Profile Updated")


@router.post("/book-appointment", response_model=MessageResponse)
def book_appointment(
    payload: BookAppointmentRequest,
    db=Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    AppointmentService(db).book_appointment(
        doctor_id=payload.doctor_id,
        user_id=current_user.id,
        slot_date=payload.slot_date,
        slot_time=payload.slot_time
    )
    return MessageResponse(message="Appointment Booked")


@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(db=Depends(get_db), current_user: Principal = Depends(get_current_user)):
    appointments = UserService(db).list_appointments(current_user.id)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments]
    )


@router.post("/cancel-appointment", response_model=MessageResponse)
def cancel_appointment(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    AppointmentService(db).cancel_appointment(payload.appointment_id, current_user)
    return MessageResponse(message="Appointment Cancelled")


# ==================== Payment Endpoints ====================

@router.post("/payment-razorpay", response_model=RazorpayOrderResponse)
def payment_razorpay(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    gateways: Dict[str, PaymentGateway] = Depends(get_payment_gateways),
    current_user: Principal = Depends(get_current_user)
):
    result = PaymentService(db, gateways).create_order(RAZORPAY, payload.appointment_id, current_user.id)
    return RazorpayOrderResponse(order=result["order"])


@router.post("/verifyRazorpay", response_model=MessageResponse)
def verify_razorpay(
    payload: RazorpayVerifyRequest,
    db=Depends(get_db),
    gateways: Dict[str, PaymentGateway] = Depends(get_payment_gateways),
    current_user: Principal = Depends(get_current_user)
):
    PaymentService(db, gateways).verify_order(
        RAZORPAY,
        payload.razorpay_order_id,
        payment_id=payload.razorpay_payment_id,
        signature=payload.razorpay_signature,
        user_id=current_user.id
    )
    return MessageResponse(message="Payment Successful")


@router.post("/payment-stripe", response_model=StripeSessionResponse)
def payment_stripe(
    payload: AppointmentActionRequest,
    db=Depends(get_db),
    origin: Optional[str] = Depends(get_origin),
    gateways: Dict[str, PaymentGateway] = Depends(get_payment_gateways),
    current_user: Principal = Depends(get_current_user)
):
    if not origin:
        raise ValidationError("Origin header is required", error_code="MISSING_ORIGIN")
    result = PaymentService(db, gateways).create_order(
        STRIPE, payload.appointment_id, current_user.id, origin=origin
    )
    return StripeSessionResponse(session_url=result["session_url"])


@router.post("/verifyStripe", response_model=MessageResponse)
def verify_stripe(
    payload: StripeVerifyRequest,
    db=Depends(get_db),
    gateways: Dict[str, PaymentGateway] = Depends(get_payment_gateways),
    current_user: Principal = Depends(get_current_user)
):
    PaymentService(db, gateways).verify_appointment(
        STRIPE, payload.appointment_id, payload.success, user_id=current_user.id
    )
    return MessageResponse(message="Payment Successful")
