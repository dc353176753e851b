"""Zeitkontext: Wochentag, Uhrzeit und Datum des aktuellen Moments.

Sonntag wird auf einen konfigurierbaren Ersatz-Wochentag abgebildet
(Default Montag). Ohne Ersatz gilt das Gebäude sonntags als geschlossen
(`day is None`, kein Termin ist aktiv).
"""

import calendar
import logging
import time as _time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from models.timeslot import ClockTime, Weekday

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeContext:
    """Ein Zeitpunkt mit Minutenauflösung."""

    day: Optional[Weekday]
    time: ClockTime
    date: date

    @classmethod
    def from_datetime(
        cls, moment: datetime, sunday_fallback: Optional[Weekday] = Weekday.MONDAY
    ) -> "TimeContext":
        day = Weekday.from_date(moment.date())
        if day is None:
            day = sunday_fallback
        return cls(day=day, time=ClockTime.from_datetime(moment), date=moment.date())

    @property
    def is_closed(self) -> bool:
        return self.day is None

    def __str__(self) -> str:
        day = self.day.label if self.day else "geschlossen"
        return f"{day}, {self.date.isoformat()} {self.time}"


def add_months(start: date, months: int) -> date:
    """Addiert Kalendermonate; der Tag wird auf das Monatsende gekürzt."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_moment(raw: str) -> datetime:
    """Parst "YYYY-MM-DD HH:MM" (oder ISO mit "T")."""
    try:
        return datetime.strptime(raw.strip().replace("T", " "), "%Y-%m-%d %H:%M")
    except ValueError as e:
        raise ValueError(
            f"Ungültiger Zeitpunkt '{raw}' (erwartet YYYY-MM-DD HH:MM)"
        ) from e


class TimeContextProvider:
    """Liefert den aktuellen TimeContext und tastet die Uhr periodisch neu ab.

    Innerhalb eines Intervalls wird der zuletzt abgetastete Kontext
    zurückgegeben; keine Korrektur, wenn die Systemuhr springt.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        refresh_interval: float = 60,
        sunday_fallback: Optional[Weekday] = Weekday.MONDAY,
        monotonic: Callable[[], float] = _time.monotonic,
    ) -> None:
        self._clock = clock
        self._monotonic = monotonic
        self.refresh_interval = refresh_interval
        self.sunday_fallback = sunday_fallback
        self._current: Optional[TimeContext] = None
        self._sampled_at: float = 0.0

    def refresh(self) -> TimeContext:
        """Tastet die Uhr sofort neu ab."""
        self._current = TimeContext.from_datetime(self._clock(), self.sunday_fallback)
        self._sampled_at = self._monotonic()
        logger.debug(f"Zeitkontext aktualisiert: {self._current}")
        return self._current

    def current(self) -> TimeContext:
        """Aktueller Kontext; neu abgetastet, wenn das Intervall abgelaufen ist."""
        if self._current is None or self.is_stale():
            return self.refresh()
        return self._current

    def is_stale(self) -> bool:
        return self._monotonic() - self._sampled_at >= self.refresh_interval
