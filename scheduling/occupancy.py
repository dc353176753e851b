"""Belegungsauflösung: welche Termine sind zu einem Zeitpunkt aktiv?

Reine Lesefunktionen über eine Terminliste, ohne Seiteneffekte.
Zeitfenster sind halboffen: ein Termin bis 10:30 ist um 10:30 nicht
mehr aktiv. Gültigkeitszeiträume sind an beiden Enden inklusive.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from models.room import Room
from models.schedule_item import ScheduleItem
from models.timeslot import ClockTime, Weekday


def is_active_at(
    item: ScheduleItem, day: Optional[Weekday], time: ClockTime, on: date
) -> bool:
    """True gdw. gleicher Wochentag, start <= time < end und on im Zeitraum."""
    return (
        day is not None
        and item.day_of_week == day
        and item.start_time <= time < item.end_time
        and item.is_valid_on(on)
    )


def occupants_now(
    items: Iterable[ScheduleItem], day: Optional[Weekday], time: ClockTime, on: date
) -> list[ScheduleItem]:
    """Alle zum Zeitpunkt aktiven Termine (Reihenfolge wie Eingabe)."""
    return [item for item in items if is_active_at(item, day, time, on)]


def is_room_free(
    room_id: str,
    items: Iterable[ScheduleItem],
    day: Optional[Weekday],
    time: ClockTime,
    on: date,
) -> bool:
    return all(item.room_id != room_id for item in occupants_now(items, day, time, on))


def current_occupant(
    room_id: str,
    items: Iterable[ScheduleItem],
    day: Optional[Weekday],
    time: ClockTime,
    on: date,
) -> Optional[ScheduleItem]:
    """Erster aktiver Termin des Raums oder None."""
    for item in items:
        if item.room_id == room_id and is_active_at(item, day, time, on):
            return item
    return None


def next_upcoming(
    room_id: str,
    items: Iterable[ScheduleItem],
    day: Optional[Weekday],
    time: ClockTime,
    on: date,
) -> Optional[ScheduleItem]:
    """Nächster Termin des Raums am selben Tag, der nach `time` beginnt.

    Bei gleicher Startzeit gewinnt der erste Eintrag (bei eingehaltener
    Überschneidungsfreiheit kann das nicht vorkommen).
    """
    if day is None:
        return None
    upcoming = [
        item for item in items
        if item.room_id == room_id
        and item.day_of_week == day
        and item.start_time > time
        and item.is_valid_on(on)
    ]
    if not upcoming:
        return None
    return min(upcoming, key=lambda item: item.start_time)


def occupancy_map(
    rooms: Iterable[Room],
    items: list[ScheduleItem],
    day: Optional[Weekday],
    time: ClockTime,
    on: date,
) -> dict[str, Optional[ScheduleItem]]:
    """Raum-ID → aktueller Termin (None = frei), in Katalogreihenfolge."""
    return {room.id: current_occupant(room.id, items, day, time, on) for room in rooms}


@dataclass(frozen=True)
class RoomStatus:
    """Anzeige-Status eines Raums für Dashboard und Raumliste."""

    room: Room
    current: Optional[ScheduleItem]
    upcoming: Optional[ScheduleItem]

    @property
    def is_free(self) -> bool:
        return self.current is None
