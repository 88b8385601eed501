"""
Appointments Domain Models

An appointment is the booking record joining a user and a doctor. It keeps
copies of both profiles as they were at booking time; only the status flags
and the payment order reference change afterwards.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, JSON, Index
from datetime import datetime

from healthbridge.infrastructure.database import Base
from healthbridge.domain.users.models import gen_uuid
from healthbridge.domain.doctors.ledger import MAX_SLOT_TIME_LENGTH


class Appointment(Base):
    """Appointment model for patient-doctor bookings"""
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=gen_uuid)

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)

    # Scheduling
    slot_date = Column(String(10), nullable=False)
    slot_time = Column(String(MAX_SLOT_TIME_LENGTH), nullable=False)

    # Snapshots
    user_data = Column(JSON, nullable=False)
    doc_data = Column(JSON, nullable=False)
    amount = Column(Integer, nullable=False)

    # Status flags
    cancelled = Column(Boolean, default=False, nullable=False)
    payment_settled = Column(Boolean, default=False, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    payment_order_id = Column(String(255), index=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('ix_appointments_doctor_slot', 'doctor_id', 'slot_date', 'slot_time'),
    )
