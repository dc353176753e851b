"""Datenmodell für ein Benutzerprofil (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class UserStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserProfile(BaseModel):
    """Selbstregistrierte Lehrkraft. E-Mail ist der eindeutige Schlüssel."""

    id: str
    email: str
    name: str
    role: UserRole = UserRole.TEACHER
    status: UserStatus = UserStatus.PENDING
    avatar: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()
