"""Fehlerklassen der Buchungsprüfung.

Alle Fehler werden synchron VOR jeder Änderung am Store geworfen; die
Nachricht ist für die direkte Anzeige gedacht.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from models.schedule_item import ScheduleItem


class BookingError(ValueError):
    """Basisklasse: Buchung abgelehnt."""


class MissingFieldError(BookingError):
    """Pflichtfeld (Fach, Lehrkraft, ggf. Sektion) fehlt."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Pflichtfelder fehlen: {', '.join(fields)}.")


class InvalidTimeOrderError(BookingError):
    """Ende liegt nicht nach dem Beginn."""


class InvalidDateOrderError(BookingError):
    """Startdatum liegt nach dem Enddatum."""


class InvalidDayError(BookingError):
    """Datum fällt auf keinen Unterrichtstag (Sonntag)."""


class UnknownRoomError(BookingError):
    """Raum-ID existiert nicht im Katalog."""


class SchedulingConflictError(BookingError):
    """Überschneidung mit einem bestehenden Termin."""

    def __init__(self, message: str, conflicting: Optional["ScheduleItem"] = None) -> None:
        self.conflicting = conflicting
        super().__init__(message)
