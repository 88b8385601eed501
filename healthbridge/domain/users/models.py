from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
import uuid

from healthbridge.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


DEFAULT_USER_IMAGE = "https://res.cloudinary.com/healthbridge/image/upload/v1/defaults/profile.png"


def empty_address():
    return {"line1": "", "line2": ""}


class User(Base):
    """Patient account"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    image = Column(String(1024), default=DEFAULT_USER_IMAGE)
    phone = Column(String(32), default="0000000000")
    address = Column(JSON, default=empty_address)
    gender = Column(String(32), default="Not Selected")
    dob = Column(String(32), default="Not Selected")

    created_at = Column(DateTime, default=func.now())

    def to_snapshot(self) -> dict:
        """Profile data copied onto appointments at booking time"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "phone": self.phone,
            "address": dict(self.address or {}),
            "gender": self.gender,
            "dob": self.dob,
        }
