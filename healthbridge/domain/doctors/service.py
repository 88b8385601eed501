"""
Doctors Service Layer

Doctor directory: onboarding by the admin, public listing, availability and
profile updates. Doctor rows are versioned because they carry the slot
ledger, so every write goes through run_versioned.
"""

from typing import Optional, List, Dict, Any, BinaryIO, Union
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from healthbridge.core.exceptions import ConflictError, NotFoundError, ValidationError
from healthbridge.core.security import get_password_hash
from healthbridge.domain.appointments.models import Appointment
from healthbridge.domain.appointments.repository import AppointmentRepository
from healthbridge.domain.auth.service import validate_credentials
from healthbridge.domain.doctors.models import Doctor
from healthbridge.domain.doctors.repository import DoctorRepository
from healthbridge.domain.users.service import parse_address
from healthbridge.infrastructure.database import run_versioned
from healthbridge.services import cloudinary_service

logger = logging.getLogger(__name__)


def validate_fees(fees: Any) -> int:
    try:
        value = int(fees)
    except (TypeError, ValueError):
        raise ValidationError("Fees must be a whole number", error_code="INVALID_FEES")
    if value <= 0 or str(value) != str(fees).strip():
        raise ValidationError("Fees must be a positive whole number", error_code="INVALID_FEES")
    return value


class DoctorService:
    """Service layer for the doctor directory"""

    def __init__(self, db: Session):
        self.db = db
        self.doctor_repo = DoctorRepository(db)
        self.appointment_repo = AppointmentRepository(db)

    def create_doctor(
        self,
        name: str,
        email: str,
        password: str,
        speciality: str,
        degree: str,
        experience: str,
        about: str,
        fees: Any,
        address: Union[str, Dict[str, Any], None],
        image: Optional[BinaryIO],
        image_filename: Optional[str] = None
    ) -> Doctor:
        """Onboard a doctor; the image is uploaded before the record is written"""
        if not all([speciality, degree, experience, about, fees, address]):
            raise ValidationError("Missing Details", error_code="MISSING_DETAILS")
        email = validate_credentials(name, email, password)
        fee_value = validate_fees(fees)
        parsed_address = parse_address(address)
        if image is None:
            raise ValidationError("Image is required", error_code="MISSING_IMAGE")

        if self.doctor_repo.get_by_email(email):
            raise ConflictError("Doctor already exists", error_code="DUPLICATE_IDENTITY")

        image_url = cloudinary_service.upload_file(
            image, image_filename or f"doctor-{email}", folder="healthbridge/doctors"
        )

        try:
            doctor = self.doctor_repo.create({
                "name": name.strip(),
                "email": email,
                "password_hash": get_password_hash(password),
                "image": image_url,
                "speciality": speciality,
                "degree": degree,
                "experience": experience,
                "about": about,
                "fees": fee_value,
                "address": parsed_address,
                "available": True,
                "slots_booked": {},
            })
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Doctor already exists", error_code="DUPLICATE_IDENTITY")

        logger.info(f"Added doctor {doctor.id} ({doctor.speciality})")
        return doctor

    def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.doctor_repo.get_by_id(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found", error_code="DOCTOR_NOT_FOUND")
        return doctor

    def list_doctors(self, available_only: bool = False) -> List[Doctor]:
        return self.doctor_repo.get_all(available_only=available_only)

    def _update_fields(self, doctor_id: str, update_data: Dict[str, Any]) -> Doctor:
        def apply() -> Doctor:
            doctor = self.doctor_repo.get_by_id(doctor_id, fresh=True)
            if not doctor:
                raise NotFoundError("Doctor not found", error_code="DOCTOR_NOT_FOUND")
            for key, value in update_data.items():
                if value is not None:
                    setattr(doctor, key, value)
            return doctor

        return run_versioned(self.db, apply)

    def set_availability(self, doctor_id: str, available: bool) -> Doctor:
        doctor = self._update_fields(doctor_id, {"available": bool(available)})
        logger.info(f"Doctor {doctor_id} availability set to {doctor.available}")
        return doctor

    def toggle_availability(self, doctor_id: str) -> Doctor:
        def apply() -> Doctor:
            doctor = self.doctor_repo.get_by_id(doctor_id, fresh=True)
            if not doctor:
                raise NotFoundError("Doctor not found", error_code="DOCTOR_NOT_FOUND")
            doctor.available = not doctor.available
            return doctor

        doctor = run_versioned(self.db, apply)
        logger.info(f"Doctor {doctor_id} availability toggled to {doctor.available}")
        return doctor

    def update_profile(
        self,
        doctor_id: str,
        fees: Any = None,
        address: Union[str, Dict[str, Any], None] = None,
        available: Optional[bool] = None,
        about: Optional[str] = None
    ) -> Doctor:
        update_data = {
            "fees": validate_fees(fees) if fees is not None else None,
            "address": parse_address(address),
            "available": available,
            "about": about,
        }
        return self._update_fields(doctor_id, update_data)

    def list_appointments(self, doctor_id: str) -> List[Appointment]:
        return self.appointment_repo.get_all(doctor_id=doctor_id)
