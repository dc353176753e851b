"""Rollenbasierte Freischaltung von Operationen.

Die Rolle entscheidet nur, WELCHE Operationen erreichbar sind; der
Belegungs-Kern kennt keine Aufrufer.
"""

import hmac
from enum import Enum

from config.schema import AppConfig
from models.user import UserProfile, UserRole, UserStatus


class AccessDeniedError(PermissionError):
    """Operation für diese Rolle nicht freigegeben."""


class Capability(str, Enum):
    VIEW = "view"
    MANAGE_SCHEDULE = "manage_schedule"
    BOOK_MAKEUP = "book_makeup"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset({
        Capability.VIEW, Capability.MANAGE_SCHEDULE, Capability.MANAGE_USERS,
    }),
    UserRole.TEACHER: frozenset({Capability.VIEW, Capability.BOOK_MAKEUP}),
    UserRole.STUDENT: frozenset({Capability.VIEW}),
}


class AccessGate:
    """Prüft Admin-Passkey und Rollenrechte."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def check_admin(self, passkey: str) -> UserRole:
        """Gibt ADMIN zurück oder wirft AccessDeniedError."""
        if not hmac.compare_digest(passkey.encode(), self.config.admin_passkey.encode()):
            raise AccessDeniedError("Ungültiger Passkey. Bitte erneut versuchen.")
        return UserRole.ADMIN

    def teacher_role(self, user: UserProfile) -> UserRole:
        """Nur freigegebene Lehrkräfte erhalten die TEACHER-Rolle."""
        if user.status != UserStatus.APPROVED:
            raise AccessDeniedError(
                f"Zugang für {user.email} ist nicht freigegeben ({user.status.value})."
            )
        return UserRole.TEACHER

    @staticmethod
    def can(role: UserRole, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES[role]

    @classmethod
    def require(cls, role: UserRole, capability: Capability) -> None:
        if not cls.can(role, capability):
            raise AccessDeniedError(
                f"Rolle {role.value} darf '{capability.value}' nicht ausführen."
            )
