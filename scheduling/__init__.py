"""Belegungs-Kern: Konfliktprüfung, Belegungsauflösung, Zeitkontext."""

from .candidates import MakeupCandidate, RecurringCandidate
from .conflicts import ConflictCheck, ConflictDetector, ConflictKind
from .booking import BookingFactory
from .store import ScheduleStore
from .timecontext import TimeContext, TimeContextProvider
from .errors import (
    BookingError,
    InvalidDateOrderError,
    InvalidDayError,
    InvalidTimeOrderError,
    MissingFieldError,
    SchedulingConflictError,
    UnknownRoomError,
)

__all__ = [
    "MakeupCandidate",
    "RecurringCandidate",
    "ConflictCheck",
    "ConflictDetector",
    "ConflictKind",
    "BookingFactory",
    "ScheduleStore",
    "TimeContext",
    "TimeContextProvider",
    "BookingError",
    "InvalidDateOrderError",
    "InvalidDayError",
    "InvalidTimeOrderError",
    "MissingFieldError",
    "SchedulingConflictError",
    "UnknownRoomError",
]
