"""Erzeugt ScheduleItems aus bereits geprüften Buchungsanfragen."""

import random
import uuid
from typing import Callable, Optional

from config.schema import AppConfig
from models.schedule_item import ScheduleItem
from scheduling.candidates import Candidate, MakeupCandidate, RecurringCandidate


def new_item_id() -> str:
    return uuid.uuid4().hex[:12]


class BookingFactory:
    """Baut Termine. Kann nach bestandener Konfliktprüfung nicht fehlschlagen."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = new_item_id,
    ) -> None:
        self.config = config or AppConfig()
        self._rng = rng or random.Random()
        self._new_id = id_factory

    def build(self, candidate: Candidate) -> ScheduleItem:
        if isinstance(candidate, MakeupCandidate):
            return self.build_makeup(candidate)
        return self.build_recurring(candidate)

    def build_recurring(self, candidate: RecurringCandidate) -> ScheduleItem:
        """Regulärer Kurs: Farbe zufällig aus der Palette (nicht reproduzierbar)."""
        return ScheduleItem(
            id=self._new_id(),
            room_id=candidate.room_id,
            subject=candidate.subject.strip(),
            section=(candidate.section or "").strip() or None,
            teacher=candidate.teacher.strip(),
            day_of_week=candidate.day_of_week,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            start_date=candidate.start_date,
            end_date=candidate.end_date,
            color=self._rng.choice(self.config.class_colors),
        )

    def build_makeup(self, candidate: MakeupCandidate) -> ScheduleItem:
        """Nachholtermin: Markierung im Fach, reservierte Farbe, ein Tag Gültigkeit."""
        return ScheduleItem(
            id=self._new_id(),
            room_id=candidate.room_id,
            subject=f"{candidate.subject.strip()} {self.config.makeup_marker}",
            section=candidate.section.strip(),
            teacher=candidate.teacher.strip(),
            day_of_week=candidate.day_of_week,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            start_date=candidate.booking_date,
            end_date=candidate.booking_date,
            color=self.config.makeup_color,
        )
