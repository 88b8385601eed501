"""
Appointments Repository Layer

Provides data access operations for the appointment ledger.
"""

from typing import Optional, List

from sqlalchemy.orm import Session

from healthbridge.domain.appointments.models import Appointment


class AppointmentRepository:
    """Repository for appointment data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, appointment_data: dict) -> Appointment:
        """Stage a new appointment in the current transaction"""
        appointment = Appointment(**appointment_data)
        self.db.add(appointment)
        return appointment

    def get_by_id(self, appointment_id: str, fresh: bool = False) -> Optional[Appointment]:
        """Get appointment by ID"""
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if fresh:
            query = query.populate_existing()
        return query.first()

    def get_all(
        self,
        user_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
    ) -> List[Appointment]:
        """Get appointments, newest first"""
        query = self.db.query(Appointment)
        if user_id:
            query = query.filter(Appointment.user_id == user_id)
        if doctor_id:
            query = query.filter(Appointment.doctor_id == doctor_id)
        return query.order_by(Appointment.created_at.desc(), Appointment.id).all()
