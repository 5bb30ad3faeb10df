"""
Account model - login identities for students, teachers and admins.

An account must be both active and verified to log in. Admin accounts
are created unverified and must be verified by a super-admin.
"""

import enum
import uuid
from sqlalchemy import Column, Text, Boolean, String
from gradebook.database import Base, utc_now_iso


class Role(str, enum.Enum):
    """Closed set of account roles; each maps to one dashboard."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class Account(Base):
    """SQLAlchemy model for the accounts table."""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique account identifier")
    username = Column(Text, nullable=False, unique=True,
                      doc="Login name, matched exactly")
    password_hash = Column(Text, nullable=False,
                           doc="bcrypt hash of the password")
    full_name = Column(Text, nullable=False,
                       doc="Display name")
    role = Column(String(16), nullable=False,
                  doc="student | teacher | admin")
    is_super_admin = Column(Boolean, nullable=False, default=False,
                            doc="Super-admins cannot be locked or deleted")
    is_verified = Column(Boolean, nullable=False, default=False,
                         doc="Unverified accounts cannot log in")
    is_active = Column(Boolean, nullable=False, default=True,
                       doc="False when the account is locked")
    verified_by = Column(String(36), nullable=True,
                         doc="Account id of the verifier")
    verification_timestamp = Column(Text, nullable=True,
                                    doc="ISO 8601 time of verification")
    created_at = Column(Text, nullable=False, default=utc_now_iso)
    updated_at = Column(Text, nullable=False, default=utc_now_iso)

    def summary(self) -> dict:
        """Public view of the account (never includes the password hash)."""
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
            "is_super_admin": self.is_super_admin,
            "is_verified": self.is_verified,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }

    def __repr__(self):
        return f"<Account(id={self.id}, username='{self.username}', role='{self.role}')>"
