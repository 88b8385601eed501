from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from healthbridge.domain.users.models import User


class UserRepository:
    """Repository for user data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_data: dict) -> User:
        """Create a new user"""
        user = User(**user_data)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def count(self) -> int:
        return self.db.query(func.count(User.id)).scalar()

    def update(self, user_id: str, update_data: dict) -> Optional[User]:
        """Update user profile fields"""
        user = self.get_by_id(user_id)
        if user:
            for key, value in update_data.items():
                if hasattr(user, key) and value is not None:
                    setattr(user, key, value)
            self.db.commit()
            self.db.refresh(user)
        return user
