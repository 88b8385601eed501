"""
Payment provider adapters.

Razorpay is the primary provider and Stripe the secondary one. Both expose the
same two calls: open an order for an appointment, and confirm that an order
was paid, reporting which appointment it settles.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import razorpay
import stripe
from loguru import logger

from healthbridge.core.config import settings
from healthbridge.core.exceptions import PaymentProviderError

RAZORPAY = "razorpay"
STRIPE = "stripe"


class PaymentGateway(ABC):
    """Common interface for payment providers"""

    name: str = ""

    @abstractmethod
    def create_order(self, appointment_id: str, amount: int, origin: Optional[str] = None) -> Dict[str, Any]:
        pass

    @abstractmethod
    def confirm_payment(self, reference: str) -> Optional[str]:
        """Return the paid appointment id for an order reference, or None if unpaid"""
        pass

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Providers without client-side signatures accept any; confirm_payment decides"""
        return True


class RazorpayGateway(PaymentGateway):
    name = RAZORPAY

    def __init__(self, key_id: Optional[str] = None, key_secret: Optional[str] = None, currency: Optional[str] = None):
        self.client = razorpay.Client(auth=(key_id or settings.RAZORPAY_KEY_ID or "", key_secret or settings.RAZORPAY_KEY_SECRET or ""))
        self.currency = currency or settings.CURRENCY

    def create_order(self, appointment_id: str, amount: int, origin: Optional[str] = None) -> Dict[str, Any]:
        options = {
            "amount": amount * 100,
            "currency": self.currency,
            "receipt": appointment_id,
        }
        try:
            order = self.client.order.create(data=options)
        except Exception as e:
            logger.error(f"Razorpay order creation failed for {appointment_id}: {e}")
            raise PaymentProviderError(details={"provider": self.name}) from e
        return {"reference": order["id"], "order": order}

    def confirm_payment(self, reference: str) -> Optional[str]:
        try:
            order = self.client.order.fetch(reference)
        except Exception as e:
            logger.error(f"Razorpay order fetch failed for {reference}: {e}")
            raise PaymentProviderError(details={"provider": self.name}) from e
        if order.get("status") == "paid":
            return order.get("receipt")
        return None

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
        except razorpay.errors.SignatureVerificationError:
            return False
        return True


class StripeGateway(PaymentGateway):
    name = STRIPE

    def __init__(self, api_key: Optional[str] = None, currency: Optional[str] = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.currency = (currency or settings.CURRENCY).lower()

    def create_order(self, appointment_id: str, amount: int, origin: Optional[str] = None) -> Dict[str, Any]:
        origin = (origin or "").rstrip("/")
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                success_url=f"{origin}/verify?success=true&appointmentId={appointment_id}",
                cancel_url=f"{origin}/verify?success=false&appointmentId={appointment_id}",
                line_items=[{
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": "Appointment Fees"},
                        "unit_amount": amount * 100,
                    },
                    "quantity": 1,
                }],
                mode="payment",
                client_reference_id=appointment_id,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe session creation failed for {appointment_id}: {e}")
            raise PaymentProviderError(details={"provider": self.name}) from e
        return {"reference": session.id, "session_url": session.url}

    def confirm_payment(self, reference: str) -> Optional[str]:
        try:
            session = stripe.checkout.Session.retrieve(reference, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe session fetch failed for {reference}: {e}")
            raise PaymentProviderError(details={"provider": self.name}) from e
        if session.payment_status == "paid":
            return session.client_reference_id
        return None


def get_payment_gateways() -> Dict[str, PaymentGateway]:
    """Dependency returning the configured providers keyed by name"""
    return {
        RAZORPAY: RazorpayGateway(),
        STRIPE: StripeGateway(),
    }
