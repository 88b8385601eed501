from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, JSON, CheckConstraint
from sqlalchemy.sql import func

from healthbridge.infrastructure.database import Base
from healthbridge.domain.users.models import gen_uuid, empty_address


class Doctor(Base):
    """Doctor profile carrying its own slot ledger"""
    __tablename__ = "doctors"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    image = Column(String(1024), nullable=False)

    speciality = Column(String(100), nullable=False)
    degree = Column(String(100), nullable=False)
    experience = Column(String(50), nullable=False)
    about = Column(Text, default="")
    available = Column(Boolean, default=True, nullable=False)
    fees = Column(Integer, nullable=False)
    address = Column(JSON, default=empty_address)

    # ISO date -> list of booked time strings
    slots_booked = Column(JSON, default=dict, nullable=False)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=func.now())

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint('fees > 0', name='check_positive_fees'),
    )

    def to_snapshot(self) -> dict:
        """Public profile data copied onto appointments at booking time"""
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "speciality": self.speciality,
            "degree": self.degree,
            "experience": self.experience,
            "about": self.about,
            "fees": self.fees,
            "address": dict(self.address or {}),
        }
