from typing import Optional
from pydantic import BaseModel, Field

from healthbridge.schemas.common import CamelModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class BookAppointmentRequest(CamelModel):
    doctor_id: str = Field(..., alias="docId")
    slot_date: str
    slot_time: str


class AppointmentActionRequest(CamelModel):
    appointment_id: str


class RazorpayVerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class StripeVerifyRequest(CamelModel):
    appointment_id: str
    success: bool


class RazorpayOrderResponse(BaseModel):
    success: bool = True
    order: dict


class StripeSessionResponse(BaseModel):
    success: bool = True
    session_url: str
