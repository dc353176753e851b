"""UserDirectory – Freigabe-Warteschlange für selbstregistrierte Lehrkräfte.

Statusübergänge: PENDING → APPROVED oder PENDING → REJECTED, nie zurück.
"""

import logging
import uuid
from enum import Enum
from typing import Optional

from models.user import UserProfile, UserRole, UserStatus

logger = logging.getLogger(__name__)


class InvalidTransitionError(ValueError):
    """Unzulässiger Statuswechsel oder unbekannter Benutzer."""


class LoginOutcome(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"
    REGISTERED = "registered"


LOGIN_MESSAGES = {
    LoginOutcome.APPROVED: "Willkommen zurück!",
    LoginOutcome.PENDING: (
        "Ihr Zugang wartet noch auf die Freigabe durch einen Admin. "
        "Bitte später erneut versuchen."
    ),
    LoginOutcome.REJECTED: "Ihre Zugangsanfrage wurde vom Admin abgelehnt.",
    LoginOutcome.REGISTERED: (
        "Anfrage gesendet! Bitte warten Sie auf die Freigabe durch einen Admin."
    ),
}


class UserDirectory:
    """Benutzerverzeichnis, Schlüssel ist die E-Mail-Adresse."""

    def __init__(self, users: Optional[list[UserProfile]] = None) -> None:
        self._users: list[UserProfile] = list(users or [])

    def all(self) -> list[UserProfile]:
        return list(self._users)

    def pending(self) -> list[UserProfile]:
        return [u for u in self._users if u.status == UserStatus.PENDING]

    def find_by_email(self, email: str) -> Optional[UserProfile]:
        key = email.strip().lower()
        return next((u for u in self._users if u.email == key), None)

    def get(self, user_id: str) -> Optional[UserProfile]:
        return next((u for u in self._users if u.id == user_id), None)

    def register(self, email: str, name: str) -> UserProfile:
        """Legt eine Lehrkraft als PENDING an; bekannte E-Mail → bestehendes Profil."""
        existing = self.find_by_email(email)
        if existing is not None:
            return existing
        if not email.strip() or not name.strip():
            raise ValueError("E-Mail und Name sind Pflichtfelder.")
        user = UserProfile(
            id=uuid.uuid4().hex[:12],
            email=email,
            name=name.strip(),
            role=UserRole.TEACHER,
            status=UserStatus.PENDING,
        )
        self._users.append(user)
        logger.info(f"Lehrkraft registriert (wartend): {user.email}")
        return user

    def login(self, email: str, name: str = "") -> tuple[LoginOutcome, UserProfile]:
        """Anmeldung per E-Mail. Unbekannte Adressen werden registriert."""
        user = self.find_by_email(email)
        if user is None:
            return LoginOutcome.REGISTERED, self.register(email, name)
        outcome = {
            UserStatus.APPROVED: LoginOutcome.APPROVED,
            UserStatus.PENDING: LoginOutcome.PENDING,
            UserStatus.REJECTED: LoginOutcome.REJECTED,
        }[user.status]
        return outcome, user

    def approve(self, user_id: str) -> UserProfile:
        return self._transition(user_id, UserStatus.APPROVED)

    def reject(self, user_id: str) -> UserProfile:
        return self._transition(user_id, UserStatus.REJECTED)

    def _transition(self, user_id: str, target: UserStatus) -> UserProfile:
        for idx, user in enumerate(self._users):
            if user.id != user_id:
                continue
            if user.status != UserStatus.PENDING:
                raise InvalidTransitionError(
                    f"Benutzer {user.email} ist bereits {user.status.value} – "
                    f"Wechsel zu {target.value} nicht erlaubt."
                )
            updated = user.model_copy(update={"status": target})
            self._users[idx] = updated
            logger.info(f"Benutzer {updated.email}: {target.value}")
            return updated
        raise InvalidTransitionError(f"Unbekannter Benutzer: {user_id}")

    def __len__(self) -> int:
        return len(self._users)
