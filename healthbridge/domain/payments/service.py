"""
Payments Service Layer

Opens provider orders for appointments and reconciles confirmed payments back
onto the appointment ledger. Provider calls happen outside any transaction;
only the resulting order reference or settlement flag is written.
"""

from typing import Dict, Any, Optional
import logging

from sqlalchemy.orm import Session

from healthbridge.core.exceptions import (
    AuthorizationError, BusinessLogicError, NotFoundError, PaymentVerificationError
)
from healthbridge.domain.appointments.models import Appointment
from healthbridge.domain.appointments.repository import AppointmentRepository
from healthbridge.infrastructure.database import run_versioned
from healthbridge.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for appointment payments"""

    def __init__(self, db: Session, gateways: Dict[str, PaymentGateway]):
        self.db = db
        self.gateways = gateways
        self.appointment_repo = AppointmentRepository(db)

    def _gateway(self, provider: str) -> PaymentGateway:
        gateway = self.gateways.get(provider)
        if gateway is None:
            raise BusinessLogicError(f"Unknown payment provider: {provider}", error_code="UNKNOWN_PROVIDER")
        return gateway

    def _payable(self, appointment_id: str, user_id: str) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment Cancelled or not found", error_code="APPOINTMENT_NOT_FOUND")
        if appointment.user_id != user_id:
            raise AuthorizationError()
        if appointment.cancelled:
            raise BusinessLogicError("Appointment Cancelled or not found", error_code="ALREADY_CANCELLED")
        if appointment.payment_settled:
            raise BusinessLogicError("Payment already completed", error_code="ALREADY_SETTLED")
        return appointment

    def create_order(
        self,
        provider: str,
        appointment_id: str,
        user_id: str,
        origin: Optional[str] = None
    ) -> Dict[str, Any]:
        """Open a provider order for the appointment's amount and remember its reference"""
        gateway = self._gateway(provider)
        appointment = self._payable(appointment_id, user_id)

        result = gateway.create_order(appointment.id, appointment.amount, origin=origin)

        def attempt() -> Appointment:
            current = self.appointment_repo.get_by_id(appointment_id, fresh=True)
            current.payment_order_id = result["reference"]
            return current

        run_versioned(self.db, attempt)
        logger.info(f"Opened {provider} order {result['reference']} for appointment {appointment_id}")
        return result

    def _settle(self, appointment_id: str) -> Appointment:
        def attempt() -> Appointment:
            appointment = self.appointment_repo.get_by_id(appointment_id, fresh=True)
            if not appointment:
                raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
            appointment.payment_settled = True
            return appointment

        appointment = run_versioned(self.db, attempt)
        logger.info(f"Payment settled for appointment {appointment_id}")
        return appointment

    def verify_order(
        self,
        provider: str,
        reference: str,
        payment_id: Optional[str] = None,
        signature: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> Appointment:
        """Settle the appointment an order belongs to once the provider reports it paid"""
        gateway = self._gateway(provider)
        if not reference:
            raise PaymentVerificationError()
        if payment_id and signature:
            if not gateway.verify_signature(reference, payment_id, signature):
                logger.warning(f"{provider} signature mismatch for order {reference}")
                raise PaymentVerificationError()

        appointment_id = gateway.confirm_payment(reference)
        if not appointment_id:
            logger.warning(f"{provider} order {reference} is not paid")
            raise PaymentVerificationError()

        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
        if user_id and appointment.user_id != user_id:
            raise AuthorizationError()
        if appointment.payment_order_id and appointment.payment_order_id != reference:
            raise PaymentVerificationError()
        return self._settle(appointment_id)

    def verify_appointment(
        self,
        provider: str,
        appointment_id: str,
        success: bool,
        user_id: Optional[str] = None
    ) -> Appointment:
        """Settle an appointment using the order reference stored on it"""
        gateway = self._gateway(provider)
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
        if user_id and appointment.user_id != user_id:
            raise AuthorizationError()
        if not success or not appointment.payment_order_id:
            raise PaymentVerificationError()

        paid_for = gateway.confirm_payment(appointment.payment_order_id)
        if paid_for != appointment.id:
            logger.warning(f"{provider} session {appointment.payment_order_id} is not paid")
            raise PaymentVerificationError()
        return self._settle(appointment.id)
