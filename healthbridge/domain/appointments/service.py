"""
Appointments Service Layer

Booking engine over the per-doctor slot ledger, plus the read-only dashboard
aggregations.

A slot moves Free -> Booked on book() and back to Free on cancel(). The
ledger write and the appointment write for one operation share a single
transaction, and both doctor and appointment rows carry a version counter:
when two operations touch the same row concurrently, the later commit fails
the version check and is replayed from a fresh read. Replaying a booking whose
slot was taken in the meantime yields SlotTakenError, so at most one of any
number of concurrent bookings for one slot succeeds.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from sqlalchemy.orm import Session

from healthbridge.core.exceptions import (
    AuthorizationError, BusinessLogicError, DoctorUnavailableError, NotFoundError
)
from healthbridge.core.security import Principal, PrincipalKind
from healthbridge.domain.appointments.models import Appointment
from healthbridge.domain.appointments.repository import AppointmentRepository
from healthbridge.domain.doctors import ledger
from healthbridge.domain.doctors.repository import DoctorRepository
from healthbridge.domain.users.repository import UserRepository
from healthbridge.infrastructure.database import run_versioned

logger = logging.getLogger(__name__)

LATEST_APPOINTMENTS = 5


class AppointmentService:
    """Service layer for booking, cancelling and completing appointments"""

    def __init__(self, db: Session):
        self.db = db
        self.appointment_repo = AppointmentRepository(db)
        self.doctor_repo = DoctorRepository(db)
        self.user_repo = UserRepository(db)

    def book_appointment(
        self,
        doctor_id: str,
        user_id: str,
        slot_date: str,
        slot_time: str
    ) -> Appointment:
        """Book a slot with a doctor and record the appointment"""
        slot_date = ledger.normalize_slot_date(slot_date)
        slot_time = ledger.normalize_slot_time(slot_time)

        def attempt() -> Appointment:
            doctor = self.doctor_repo.get_by_id(doctor_id, fresh=True)
            if not doctor:
                raise NotFoundError("Doctor not found", error_code="DOCTOR_NOT_FOUND")
            if not doctor.available:
                raise DoctorUnavailableError()

            user = self.user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found", error_code="USER_NOT_FOUND")

            doctor.slots_booked = ledger.add_slot(doctor.slots_booked, slot_date, slot_time)

            return self.appointment_repo.add({
                "user_id": user.id,
                "doctor_id": doctor.id,
                "slot_date": slot_date,
                "slot_time": slot_time,
                "user_data": user.to_snapshot(),
                "doc_data": doctor.to_snapshot(),
                "amount": doctor.fees,
                "cancelled": False,
                "payment_settled": False,
                "completed": False,
            })

        appointment = run_versioned(self.db, attempt)
        logger.info(
            f"Booked appointment {appointment.id}: doctor {doctor_id} "
            f"on {slot_date} at {slot_time} for user {user_id}"
        )
        return appointment

    def get_appointment(self, appointment_id: str) -> Appointment:
        """Get appointment by ID"""
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
        return appointment

    def get_appointments(
        self,
        user_id: Optional[str] = None,
        doctor_id: Optional[str] = None
    ) -> List[Appointment]:
        return self.appointment_repo.get_all(user_id=user_id, doctor_id=doctor_id)

    @staticmethod
    def _authorize(appointment: Appointment, requester: Principal) -> None:
        if requester.kind is PrincipalKind.ADMIN:
            return
        if requester.kind is PrincipalKind.USER and appointment.user_id == requester.id:
            return
        if requester.kind is PrincipalKind.DOCTOR and appointment.doctor_id == requester.id:
            return
        raise AuthorizationError()

    def cancel_appointment(self, appointment_id: str, requester: Principal) -> Appointment:
        """
        Cancel an appointment and free its slot.

        Cancelling an already cancelled appointment changes nothing; the slot
        may have been booked again since, so it is left alone.
        """
        def attempt() -> Appointment:
            appointment = self.appointment_repo.get_by_id(appointment_id, fresh=True)
            if not appointment:
                raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
            self._authorize(appointment, requester)
            if appointment.cancelled:
                return appointment

            appointment.cancelled = True

            doctor = self.doctor_repo.get_by_id(appointment.doctor_id, fresh=True)
            if doctor and ledger.is_booked(doctor.slots_booked, appointment.slot_date, appointment.slot_time):
                doctor.slots_booked = ledger.remove_slot(
                    doctor.slots_booked, appointment.slot_date, appointment.slot_time
                )
            return appointment

        appointment = run_versioned(self.db, attempt)
        logger.info(f"Appointment {appointment_id} cancelled by {requester.kind.value} {requester.id}")
        return appointment

    def complete_appointment(self, appointment_id: str, doctor_id: str) -> Appointment:
        """Mark an appointment completed; only its doctor may do this"""
        def attempt() -> Appointment:
            appointment = self.appointment_repo.get_by_id(appointment_id, fresh=True)
            if not appointment:
                raise NotFoundError("Appointment not found", error_code="APPOINTMENT_NOT_FOUND")
            if appointment.doctor_id != doctor_id:
                raise AuthorizationError("Mark Failed")
            if appointment.cancelled:
                raise BusinessLogicError("Appointment is cancelled", error_code="ALREADY_CANCELLED")
            appointment.completed = True
            return appointment

        appointment = run_versioned(self.db, attempt)
        logger.info(f"Appointment {appointment_id} completed by doctor {doctor_id}")
        return appointment


def summarize_appointments(appointments: List[Appointment]) -> Dict[str, Any]:
    """
    Aggregate figures over a set of appointments.

    Earnings count only appointments that are paid for and not cancelled.
    """
    earnings = sum(
        a.amount for a in appointments if not a.cancelled and a.payment_settled
    )
    latest = sorted(appointments, key=lambda a: a.created_at or datetime.min, reverse=True)[:LATEST_APPOINTMENTS]
    return {
        "earnings": earnings,
        "appointments": len(appointments),
        "completed": sum(1 for a in appointments if a.completed),
        "cancelled": sum(1 for a in appointments if a.cancelled),
        "patients": len({a.user_id for a in appointments}),
        "latest_appointments": latest,
    }


class DashboardService:
    """Read-only dashboards computed from the appointment ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.appointment_repo = AppointmentRepository(db)
        self.doctor_repo = DoctorRepository(db)
        self.user_repo = UserRepository(db)

    def doctor_dashboard(self, doctor_id: str) -> Dict[str, Any]:
        if not self.doctor_repo.get_by_id(doctor_id):
            raise NotFoundError("Doctor not found", error_code="DOCTOR_NOT_FOUND")
        return summarize_appointments(self.appointment_repo.get_all(doctor_id=doctor_id))

    def admin_dashboard(self) -> Dict[str, Any]:
        data = summarize_appointments(self.appointment_repo.get_all())
        data["doctors"] = self.doctor_repo.count()
        data["users"] = self.user_repo.count()
        return data
