from typing import Optional, List, Dict, Any, BinaryIO, Union
import json
import logging

from sqlalchemy.orm import Session

from healthbridge.core.exceptions import NotFoundError, ValidationError
from healthbridge.domain.appointments.models import Appointment
from healthbridge.domain.appointments.repository import AppointmentRepository
from healthbridge.domain.users.models import User
from healthbridge.domain.users.repository import UserRepository
from healthbridge.services import cloudinary_service

logger = logging.getLogger(__name__)


def parse_address(address: Union[str, Dict[str, Any], None]) -> Optional[Dict[str, str]]:
    """Accept an address as a mapping or a JSON string"""
    if address is None or address == "":
        return None
    if isinstance(address, str):
        try:
            address = json.loads(address)
        except json.JSONDecodeError:
            raise ValidationError("Address must be a JSON object", error_code="INVALID_ADDRESS")
    if not isinstance(address, dict):
        raise ValidationError("Address must be a JSON object", error_code="INVALID_ADDRESS")
    return {
        "line1": str(address.get("line1", "") or ""),
        "line2": str(address.get("line2", "") or ""),
    }


class UserService:
    """Profile operations for patients"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.appointment_repo = AppointmentRepository(db)

    def get_profile(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
        return user

    def update_profile(
        self,
        user_id: str,
        name: Optional[str],
        phone: Optional[str],
        dob: Optional[str],
        gender: Optional[str],
        address: Union[str, Dict[str, Any], None] = None,
        image: Optional[BinaryIO] = None,
        image_filename: Optional[str] = None
    ) -> User:
        """Update profile fields; a new image is uploaded before anything is saved"""
        if not name or not phone or not dob or not gender:
            raise ValidationError("Data Missing", error_code="MISSING_DETAILS")

        self.get_profile(user_id)

        update_data = {
            "name": name,
            "phone": phone,
            "dob": dob,
            "gender": gender,
            "address": parse_address(address),
        }
        if image is not None:
            update_data["image"] = cloudinary_service.upload_file(
                image, image_filename or f"user-{user_id}", folder="healthbridge/users"
            )

        user = self.user_repo.update(user_id, update_data)
        logger.info(f"Updated profile for user {user_id}")
        return user

    def list_appointments(self, user_id: str) -> List[Appointment]:
        return self.appointment_repo.get_all(user_id=user_id)
