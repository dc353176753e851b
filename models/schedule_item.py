"""Datenmodell für einen Belegungseintrag (Pydantic v2)."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from models.timeslot import Clock, Weekday


class ScheduleItem(BaseModel):
    """Ein wiederkehrender oder einmaliger Belegungstermin eines Raums.

    Gilt an jedem `day_of_week` zwischen `start_date` und `end_date`
    (beide inklusive) im halboffenen Zeitfenster [start_time, end_time).
    Nachholtermine haben start_date == end_date.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    room_id: str
    subject: str
    section: Optional[str] = None
    teacher: str
    day_of_week: Weekday
    start_time: Clock
    end_time: Clock
    start_date: date
    end_date: date
    color: str = ""   # rein kosmetisch

    @model_validator(mode="after")
    def _check_ranges(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Termin {self.id}: Ende ({self.end_time}) muss nach Beginn "
                f"({self.start_time}) liegen."
            )
        if self.start_date > self.end_date:
            raise ValueError(
                f"Termin {self.id}: Startdatum {self.start_date} liegt nach "
                f"Enddatum {self.end_date}."
            )
        return self

    @property
    def time_label(self) -> str:
        return f"{self.start_time}–{self.end_time}"

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    def is_valid_on(self, day: date) -> bool:
        """Liegt `day` im Gültigkeitszeitraum (beide Enden inklusive)?"""
        return self.start_date <= day <= self.end_date

    def has_marker(self, marker: str) -> bool:
        return marker in self.subject
