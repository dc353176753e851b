"""Wertetypen für Wochentag und Uhrzeit im Belegungsraster."""

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Annotated, Optional, Union

from pydantic import PlainSerializer, PlainValidator


class Weekday(str, Enum):
    """Unterrichtstage Montag bis Samstag.

    Sonntag ist KEIN Mitglied: ein gespeicherter Termin kann nie
    auf einen Sonntag fallen.
    """

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def index(self) -> int:
        """0=Montag ... 5=Samstag (wie date.weekday())."""
        return list(Weekday).index(self)

    @property
    def label(self) -> str:
        """Deutscher Tagesname."""
        return _DAY_LABELS[self.index]

    @property
    def short(self) -> str:
        """Abgekürzter Tagesname."""
        return _DAY_LABELS[self.index][:2]

    @classmethod
    def from_date(cls, value: date) -> Optional["Weekday"]:
        """Wochentag eines Kalenderdatums; None für Sonntag."""
        idx = value.weekday()
        if idx == 6:
            return None
        return list(cls)[idx]

    @classmethod
    def parse(cls, raw: Union[str, "Weekday"]) -> "Weekday":
        """Akzeptiert "Monday", "monday", "Mo", "Montag" usw."""
        if isinstance(raw, Weekday):
            return raw
        key = str(raw).strip().lower()
        if key in _DAY_ALIASES:
            return _DAY_ALIASES[key]
        raise ValueError(
            f"Unbekannter Wochentag: '{raw}' "
            f"(erlaubt: {', '.join(d.value for d in cls)})"
        )

    def __str__(self) -> str:
        return self.value


_DAY_LABELS = ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag"]

_DAY_ALIASES: dict[str, Weekday] = {}
for _day, _label in zip(Weekday, _DAY_LABELS):
    _DAY_ALIASES[_day.value.lower()] = _day
    _DAY_ALIASES[_day.value[:3].lower()] = _day
    _DAY_ALIASES[_label.lower()] = _day
    _DAY_ALIASES[_label[:2].lower()] = _day


@dataclass(frozen=True, order=True)
class ClockTime:
    """Uhrzeit mit Minutenauflösung ("HH:MM", 24h).

    Sekunden werden nirgends verglichen. Die Ordnung entspricht dem
    lexikographischen Vergleich der nullgefüllten Zeichenkette.
    """

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"Stunde außerhalb 0-23: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute außerhalb 0-59: {self.minute}")

    @classmethod
    def parse(cls, raw: Union[str, time, "ClockTime"]) -> "ClockTime":
        """Parst "HH:MM" (auch "H:MM" und "HH:MM:SS", Sekunden entfallen)."""
        if isinstance(raw, ClockTime):
            return raw
        if isinstance(raw, time):
            return cls(raw.hour, raw.minute)
        if not isinstance(raw, str):
            raise ValueError(f"Ungültige Uhrzeit: {raw!r}")
        parts = raw.strip().split(":")
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            raise ValueError(f"Ungültige Uhrzeit '{raw}' (erwartet HH:MM)")
        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def from_datetime(cls, value: datetime) -> "ClockTime":
        return cls(value.hour, value.minute)

    @property
    def minutes(self) -> int:
        """Minuten seit Mitternacht."""
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __repr__(self) -> str:
        return f"ClockTime({self})"


# Pydantic-Feldtyp: nimmt "HH:MM" entgegen, serialisiert wieder als "HH:MM"
Clock = Annotated[
    ClockTime,
    PlainValidator(ClockTime.parse),
    PlainSerializer(str, return_type=str),
]
