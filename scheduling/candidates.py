"""Buchungsanfragen vor der Konfliktprüfung.

OHNE Reihenfolge-Validatoren: ungültige Zeit-/Datumsfolgen werden
erst vom ConflictDetector mit lesbarer Begründung abgelehnt.
"""

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel

from models.timeslot import Clock, Weekday
from scheduling.errors import MissingFieldError


class RecurringCandidate(BaseModel):
    """Wiederkehrender Kurs (Admin): fester Wochentag + Gültigkeitszeitraum."""

    room_id: str
    subject: str
    teacher: str
    section: Optional[str] = None
    day_of_week: Weekday
    start_time: Clock
    end_time: Clock
    start_date: date
    end_date: date

    def check_required(self) -> None:
        missing = [
            name for name, value in (("subject", self.subject), ("teacher", self.teacher))
            if not value.strip()
        ]
        if missing:
            raise MissingFieldError(missing)


class MakeupCandidate(BaseModel):
    """Nachholtermin (Lehrkraft): ein Kalendertag, Wochentag wird abgeleitet."""

    room_id: str
    subject: str
    teacher: str
    section: str
    booking_date: date
    start_time: Clock
    end_time: Clock

    @property
    def day_of_week(self) -> Optional[Weekday]:
        """Aus dem Datum abgeleitet; None für Sonntag."""
        return Weekday.from_date(self.booking_date)

    @property
    def start_date(self) -> date:
        return self.booking_date

    @property
    def end_date(self) -> date:
        return self.booking_date

    def check_required(self) -> None:
        missing = [
            name for name, value in (
                ("subject", self.subject),
                ("teacher", self.teacher),
                ("section", self.section),
            )
            if not value.strip()
        ]
        if missing:
            raise MissingFieldError(missing)


Candidate = Union[RecurringCandidate, MakeupCandidate]
