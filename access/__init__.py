"""Zugangsmodell: Admin-Passkey, Freigabe-Warteschlange, Rollenrechte."""

from .gate import AccessDeniedError, AccessGate, Capability
from .users import InvalidTransitionError, LoginOutcome, UserDirectory

__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "Capability",
    "InvalidTransitionError",
    "LoginOutcome",
    "UserDirectory",
]
