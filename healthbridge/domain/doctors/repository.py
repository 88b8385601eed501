"""
Doctors Repository Layer

Data access for doctor profiles. The slot ledger lives on the doctor row, so
writes here go through the ORM's version check; callers handle StaleDataError.
"""

from typing import Optional, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from healthbridge.domain.doctors.models import Doctor


class DoctorRepository:
    """Repository for doctor data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, doctor_data: dict) -> Doctor:
        """Create a new doctor"""
        doctor = Doctor(**doctor_data)
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def get_by_id(self, doctor_id: str, fresh: bool = False) -> Optional[Doctor]:
        """Get doctor by ID; fresh re-reads the row over any identity-map copy"""
        query = self.db.query(Doctor).filter(Doctor.id == doctor_id)
        if fresh:
            query = query.populate_existing()
        return query.first()

    def get_by_email(self, email: str) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.email == email).first()

    def get_all(self, available_only: bool = False) -> List[Doctor]:
        query = self.db.query(Doctor)
        if available_only:
            query = query.filter(Doctor.available == True)
        return query.order_by(Doctor.created_at, Doctor.name).all()

    def count(self) -> int:
        return self.db.query(func.count(Doctor.id)).scalar()
