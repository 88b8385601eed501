"""
Credential store and token issuing.

Users and doctors authenticate against bcrypt hashes stored on their rows.
The admin is a single credential pair from configuration and takes a
separate, simpler path.
"""

from typing import Optional
import logging

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from healthbridge.core.config import settings
from healthbridge.core.exceptions import (
    AuthenticationError, ConflictError, NotFoundError, ValidationError
)
from healthbridge.core.security import (
    PrincipalKind, create_access_token, get_password_hash, secrets_match, verify_password
)
from healthbridge.domain.doctors.repository import DoctorRepository
from healthbridge.domain.users.models import User
from healthbridge.domain.users.repository import UserRepository

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


def validate_credentials(name: Optional[str], email: Optional[str], password: Optional[str]) -> str:
    """Check registration input and return the normalized email"""
    if not name or not email or not password:
        raise ValidationError("Missing Details", error_code="MISSING_DETAILS")
    try:
        normalized = _email_adapter.validate_python(email.strip())
    except PydanticValidationError:
        raise ValidationError("Please enter a valid email", error_code="INVALID_EMAIL")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError("Please enter a strong password", error_code="WEAK_PASSWORD")
    return normalized.lower()


class AuthenticationService:
    """Service layer for registration and login of every principal kind"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.doctor_repo = DoctorRepository(db)

    def register_user(self, name: str, email: str, password: str) -> User:
        """Register a new user"""
        email = validate_credentials(name, email, password)

        if self.user_repo.get_by_email(email):
            raise ConflictError("User already exists", error_code="DUPLICATE_IDENTITY")

        try:
            user = self.user_repo.create({
                "name": name.strip(),
                "email": email,
                "password_hash": get_password_hash(password),
            })
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User already exists", error_code="DUPLICATE_IDENTITY")

        logger.info(f"Registered user {user.id}")
        return user

    def issue_user_token(self, user: User) -> str:
        return create_access_token(user.id, PrincipalKind.USER)

    def authenticate_user(self, email: str, password: str) -> str:
        """Authenticate user and return a user token"""
        user = self.user_repo.get_by_email((email or "").strip().lower())
        if not user:
            raise NotFoundError("User does not exist", error_code="USER_NOT_FOUND")

        if not verify_password(password or "", user.password_hash):
            raise AuthenticationError("Invalid credentials", error_code="INVALID_CREDENTIALS")

        logger.info(f"User {user.id} logged in")
        return self.issue_user_token(user)

    def authenticate_doctor(self, email: str, password: str) -> str:
        """Authenticate doctor and return a doctor token"""
        doctor = self.doctor_repo.get_by_email((email or "").strip().lower())
        if not doctor or not verify_password(password or "", doctor.password_hash):
            raise AuthenticationError("Invalid credentials", error_code="INVALID_CREDENTIALS")

        logger.info(f"Doctor {doctor.id} logged in")
        return create_access_token(doctor.id, PrincipalKind.DOCTOR)

    @staticmethod
    def authenticate_admin(email: str, password: str) -> str:
        """Compare against the configured admin pair and return an admin token"""
        if not settings.ADMIN_PASSWORD:
            raise AuthenticationError("Admin login is not configured", error_code="INVALID_CREDENTIALS")

        email_ok = secrets_match(email or "", settings.ADMIN_EMAIL)
        password_ok = secrets_match(password or "", settings.ADMIN_PASSWORD)
        if not (email_ok and password_ok):
            raise AuthenticationError("Invalid credentials", error_code="INVALID_CREDENTIALS")

        logger.info("Admin logged in")
        return create_access_token(settings.ADMIN_EMAIL, PrincipalKind.ADMIN)
