"""ScheduleStore – hält Räume und Termine und bündelt alle Änderungen.

Einziger Schreibzugang: add_schedule() und remove_schedule(). Die Abfolge
"prüfen, dann anhängen" ist NICHT atomar gegenüber parallelen Schreibern;
für Mehrbenutzerbetrieb müssen beide Methoden hinter eine Sperre oder
Transaktion.
"""

import logging
from collections import Counter
from datetime import date
from typing import Optional

from config.schema import AppConfig
from models.room import Room
from models.schedule_item import ScheduleItem
from models.snapshot import StateSnapshot
from models.timeslot import ClockTime, Weekday
from models.user import UserProfile
from scheduling import occupancy
from scheduling.booking import BookingFactory
from scheduling.candidates import Candidate
from scheduling.conflicts import ConflictCheck, ConflictDetector
from scheduling.errors import UnknownRoomError
from scheduling.occupancy import RoomStatus
from scheduling.timecontext import TimeContext

logger = logging.getLogger(__name__)


class ScheduleStore:
    """In-Memory-Store für einen Einzelprozess mit einer Sitzung."""

    def __init__(
        self,
        rooms: list[Room],
        schedule: Optional[list[ScheduleItem]] = None,
        config: Optional[AppConfig] = None,
        detector: Optional[ConflictDetector] = None,
        factory: Optional[BookingFactory] = None,
    ) -> None:
        ids = [r.id for r in rooms]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Doppelte Raum-IDs im Katalog: {sorted(ids)}")
        self.config = config or AppConfig()
        self._rooms: list[Room] = list(rooms)
        self._room_index: dict[str, Room] = {r.id: r for r in rooms}
        self._items: list[ScheduleItem] = list(schedule or [])
        self._detector = detector or ConflictDetector()
        self._factory = factory or BookingFactory(self.config)

    # ─── Lesen ───

    def list_rooms(self) -> list[Room]:
        """Räume in Katalogreihenfolge."""
        return list(self._rooms)

    def list_schedule(self) -> list[ScheduleItem]:
        """Termine in Einfügereihenfolge (Sortierung ist Sache der Anzeige)."""
        return list(self._items)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._room_index.get(room_id)

    def get_item(self, item_id: str) -> Optional[ScheduleItem]:
        return next((i for i in self._items if i.id == item_id), None)

    # ─── Schreiben ───

    def check(self, candidate: Candidate) -> ConflictCheck:
        """Konfliktprüfung ohne Änderung am Store."""
        if candidate.room_id not in self._room_index:
            raise UnknownRoomError(f"Unbekannter Raum: '{candidate.room_id}'.")
        return self._detector.check(candidate, self._items)

    def add_schedule(self, candidate: Candidate) -> ScheduleItem:
        """Prüft und legt einen Termin an.

        Raises:
            BookingError: Pflichtfeld fehlt, Raum unbekannt, Zeit-/Datumsfolge
                ungültig oder Konflikt. Der Store bleibt dann unverändert.
        """
        candidate.check_required()
        result = self.check(candidate)
        result.raise_for_rejection()

        item = self._factory.build(candidate)
        self._items.append(item)
        logger.info(
            f"Termin {item.id} angelegt: {item.subject} in {item.room_id}, "
            f"{item.day_of_week.value} {item.time_label} "
            f"({item.start_date.isoformat()} bis {item.end_date.isoformat()})"
        )
        return item

    def remove_schedule(self, item_id: str) -> None:
        """Entfernt einen Termin. Unbekannte ID ist kein Fehler (idempotent)."""
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        if len(self._items) < before:
            logger.info(f"Termin {item_id} entfernt")
        else:
            logger.debug(f"Termin {item_id} nicht vorhanden – nichts zu tun")

    # ─── Belegung ───

    def occupancy_query(
        self, day: Optional[Weekday], time: ClockTime, on: date
    ) -> dict[str, Optional[ScheduleItem]]:
        """Raum-ID → aktiver Termin oder None (frei)."""
        return occupancy.occupancy_map(self._rooms, self._items, day, time, on)

    def next_upcoming(
        self, room_id: str, day: Optional[Weekday], time: ClockTime, on: date
    ) -> Optional[ScheduleItem]:
        return occupancy.next_upcoming(room_id, self._items, day, time, on)

    def is_room_free(self, room_id: str, ctx: TimeContext) -> bool:
        return occupancy.is_room_free(room_id, self._items, ctx.day, ctx.time, ctx.date)

    def room_status(self, ctx: TimeContext) -> list[RoomStatus]:
        """Status aller Räume: aktueller und nächster Termin."""
        current = self.occupancy_query(ctx.day, ctx.time, ctx.date)
        return [
            RoomStatus(
                room=room,
                current=current[room.id],
                upcoming=self.next_upcoming(room.id, ctx.day, ctx.time, ctx.date),
            )
            for room in self._rooms
        ]

    def available_rooms(self, ctx: TimeContext) -> list[Room]:
        """Aktuell freie Räume."""
        current = self.occupancy_query(ctx.day, ctx.time, ctx.date)
        return [room for room in self._rooms if current[room.id] is None]

    def active_sessions(self, ctx: TimeContext) -> list[ScheduleItem]:
        """Laufende Termine, früh endende zuerst."""
        active = occupancy.occupants_now(self._items, ctx.day, ctx.time, ctx.date)
        return sorted(active, key=lambda i: i.end_time)

    # ─── Übersichten ───

    def filter_schedule(
        self,
        day: Weekday,
        room_id: Optional[str] = None,
        section: Optional[str] = None,
    ) -> list[ScheduleItem]:
        """Stundenplan eines Tages, optional nach Raum/Sektion, nach Beginn sortiert."""
        return sorted(
            (
                i for i in self._items
                if i.day_of_week == day
                and (room_id is None or i.room_id == room_id)
                and (section is None or i.section == section)
            ),
            key=lambda i: i.start_time,
        )

    def sections(self) -> list[str]:
        return sorted({i.section for i in self._items if i.section})

    def makeup_bookings(self) -> list[ScheduleItem]:
        """Nachholtermine, neuestes Datum zuerst."""
        marker = self.config.makeup_marker
        return sorted(
            (i for i in self._items if i.has_marker(marker)),
            key=lambda i: i.start_date,
            reverse=True,
        )

    def utilization(self) -> dict[str, int]:
        """Raumname → Anzahl Termine (alle Räume, auch ohne Termin)."""
        counts = Counter(i.room_id for i in self._items)
        return {room.name: counts.get(room.id, 0) for room in self._rooms}

    def search_rooms(self, term: str) -> list[Room]:
        if not term.strip():
            return self.list_rooms()
        return [room for room in self._rooms if room.matches(term)]

    def stats(self, ctx: TimeContext) -> dict[str, int]:
        """Kennzahlen des Dashboards."""
        return {
            "total_rooms": len(self._rooms),
            "total_classes": len(self._items),
            "occupied_now": len(
                occupancy.occupants_now(self._items, ctx.day, ctx.time, ctx.date)
            ),
        }

    # ─── Schnappschuss ───

    def to_snapshot(self, users: Optional[list[UserProfile]] = None) -> StateSnapshot:
        return StateSnapshot(rooms=self._rooms, schedule=self._items, users=users or [])

    @classmethod
    def from_snapshot(
        cls, snapshot: StateSnapshot, config: Optional[AppConfig] = None
    ) -> "ScheduleStore":
        """Baut einen Store aus einem Schnappschuss. Termine mit unbekanntem
        Raum werden verworfen (Raumreferenz ist eine Store-Invariante)."""
        room_ids = {r.id for r in snapshot.rooms}
        schedule = []
        for item in snapshot.schedule:
            if item.room_id not in room_ids:
                logger.warning(
                    f"Termin {item.id} verweist auf unbekannten Raum "
                    f"'{item.room_id}' – verworfen"
                )
                continue
            schedule.append(item)
        return cls(snapshot.rooms, schedule, config=config)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ScheduleStore({len(self._rooms)} rooms, {len(self._items)} items)"
