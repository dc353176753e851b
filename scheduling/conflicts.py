"""Konfliktprüfung für neue Buchungen.

Zwei Anfrageformen:
  - Wiederkehrender Kurs (Admin): Raum, Wochentag, Zeitfenster, Zeitraum.
  - Nachholtermin (Lehrkraft): Raum, Datum (Wochentag abgeleitet), Zeitfenster.

Ein bestehender Termin kollidiert, wenn Raum UND Wochentag übereinstimmen,
die Gültigkeitszeiträume sich überschneiden (inklusive Enden) und die
Zeitfenster sich überschneiden (halboffen: Berührung ist KEIN Konflikt).
"""

import logging
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from models.schedule_item import ScheduleItem
from models.timeslot import ClockTime
from scheduling.candidates import Candidate, MakeupCandidate, RecurringCandidate
from scheduling.errors import (
    BookingError,
    InvalidDateOrderError,
    InvalidDayError,
    InvalidTimeOrderError,
    SchedulingConflictError,
)

logger = logging.getLogger(__name__)


def time_ranges_overlap(
    a_start: ClockTime, a_end: ClockTime, b_start: ClockTime, b_end: ClockTime
) -> bool:
    """Halboffene Überschneidung [a_start, a_end) ∩ [b_start, b_end) ≠ ∅."""
    return a_start < b_end and a_end > b_start


def date_ranges_overlap(
    a_start: date, a_end: date, b_start: date, b_end: date
) -> bool:
    """Geschlossene Überschneidung, ein gemeinsamer Tag genügt."""
    return a_start <= b_end and a_end >= b_start


class ConflictKind(str, Enum):
    NONE = "none"
    INVALID_TIME_ORDER = "invalid_time_order"
    INVALID_DATE_ORDER = "invalid_date_order"
    INVALID_DAY = "invalid_day"
    CONFLICT = "conflict"


class ConflictCheck(BaseModel):
    """Ergebnis einer Prüfung. `reason` ist direkt anzeigbar."""

    accepted: bool
    kind: ConflictKind = ConflictKind.NONE
    reason: Optional[str] = None
    conflicting: Optional[ScheduleItem] = None

    @classmethod
    def ok(cls) -> "ConflictCheck":
        return cls(accepted=True)

    def raise_for_rejection(self) -> None:
        """Wirft den passenden BookingError, falls abgelehnt."""
        if self.accepted:
            return
        if self.kind == ConflictKind.INVALID_TIME_ORDER:
            raise InvalidTimeOrderError(self.reason)
        if self.kind == ConflictKind.INVALID_DATE_ORDER:
            raise InvalidDateOrderError(self.reason)
        if self.kind == ConflictKind.INVALID_DAY:
            raise InvalidDayError(self.reason)
        if self.kind == ConflictKind.CONFLICT:
            raise SchedulingConflictError(self.reason, self.conflicting)
        raise BookingError(self.reason)


_TIME_ORDER_MSG = "Endzeit muss nach der Startzeit liegen."
_DATE_ORDER_MSG = "Startdatum darf nicht nach dem Enddatum liegen."


class ConflictDetector:
    """Prüft Buchungsanfragen gegen die bestehende Terminliste."""

    def check(self, candidate: Candidate, items: Iterable[ScheduleItem]) -> ConflictCheck:
        if isinstance(candidate, MakeupCandidate):
            return self.check_makeup(candidate, items)
        return self.check_recurring(candidate, items)

    # ── Wiederkehrender Kurs ──────────────────────────────────────────────────

    def check_recurring(
        self, candidate: RecurringCandidate, items: Iterable[ScheduleItem]
    ) -> ConflictCheck:
        if candidate.end_time <= candidate.start_time:
            return ConflictCheck(
                accepted=False, kind=ConflictKind.INVALID_TIME_ORDER,
                reason=_TIME_ORDER_MSG,
            )
        if candidate.start_date > candidate.end_date:
            return ConflictCheck(
                accepted=False, kind=ConflictKind.INVALID_DATE_ORDER,
                reason=_DATE_ORDER_MSG,
            )

        for item in items:
            if item.room_id != candidate.room_id or item.day_of_week != candidate.day_of_week:
                continue
            if not date_ranges_overlap(
                candidate.start_date, candidate.end_date, item.start_date, item.end_date
            ):
                continue
            if not time_ranges_overlap(
                candidate.start_time, candidate.end_time, item.start_time, item.end_time
            ):
                continue
            shared_from = max(candidate.start_date, item.start_date)
            shared_to = min(candidate.end_date, item.end_date)
            reason = (
                f"Konflikt erkannt! Raum {candidate.room_id} ist {item.day_of_week.label}s "
                f"{item.time_label} bereits belegt durch '{item.subject}' ({item.teacher}) "
                f"im Zeitraum {shared_from.isoformat()} bis {shared_to.isoformat()}."
            )
            logger.info(f"Kurs abgelehnt: {reason}")
            return ConflictCheck(
                accepted=False, kind=ConflictKind.CONFLICT,
                reason=reason, conflicting=item,
            )
        return ConflictCheck.ok()

    # ── Nachholtermin ─────────────────────────────────────────────────────────

    def check_makeup(
        self, candidate: MakeupCandidate, items: Iterable[ScheduleItem]
    ) -> ConflictCheck:
        if candidate.end_time <= candidate.start_time:
            return ConflictCheck(
                accepted=False, kind=ConflictKind.INVALID_TIME_ORDER,
                reason=_TIME_ORDER_MSG,
            )
        day = candidate.day_of_week
        if day is None:
            return ConflictCheck(
                accepted=False, kind=ConflictKind.INVALID_DAY,
                reason=(
                    f"{candidate.booking_date.isoformat()} ist ein Sonntag – "
                    f"sonntags können keine Räume gebucht werden."
                ),
            )

        for item in items:
            if item.room_id != candidate.room_id or item.day_of_week != day:
                continue
            if not item.is_valid_on(candidate.booking_date):
                continue
            if not time_ranges_overlap(
                candidate.start_time, candidate.end_time, item.start_time, item.end_time
            ):
                continue
            reason = (
                f"Konflikt erkannt! Raum {candidate.room_id} ist am {day.label}, "
                f"{candidate.booking_date.isoformat()} zu dieser Zeit belegt "
                f"({item.time_label}, '{item.subject}')."
            )
            logger.info(f"Nachholtermin abgelehnt: {reason}")
            return ConflictCheck(
                accepted=False, kind=ConflictKind.CONFLICT,
                reason=reason, conflicting=item,
            )
        return ConflictCheck.ok()
