"""Gemeinsamer Renderer für die Terminal-Anzeige (Rich).

Die render_*-Funktionen liefern reine Tabellenzeilen (testbar ohne
Terminal); build_table() baut daraus eine Rich-Tabelle.
"""

from typing import TYPE_CHECKING, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from models.room import Room
    from models.schedule_item import ScheduleItem
    from scheduling.occupancy import RoomStatus


def _room_name(room_id: str, rooms: list["Room"]) -> str:
    return escape(next((r.name for r in rooms if r.id == room_id), room_id))


def render_room_status_rows(statuses: list["RoomStatus"]) -> list[list[str]]:
    """Zeile je Raum: [Raum, Plätze, Status, Aktuell, Als Nächstes]."""
    rows: list[list[str]] = []
    for st in statuses:
        room = st.room
        if st.current is None:
            status = "[green]FREI[/green]"
            current = "—"
        else:
            status = "[red]BELEGT[/red]"
            current = (
                f"{escape(st.current.subject)}\n"
                f"{escape(st.current.teacher)} bis {st.current.end_time}"
            )
        if st.upcoming is None:
            upcoming = "—"
        else:
            upcoming = f"ab {st.upcoming.start_time}: {escape(st.upcoming.subject)}"
        rows.append([escape(room.name), str(room.capacity), status, current, upcoming])
    return rows


def render_room_rows(rooms: list["Room"]) -> list[list[str]]:
    """Zeile je Raum: [Raum, Gebäude, Plätze, Ausstattung]."""
    return [
        [
            escape(r.name),
            escape(r.building),
            str(r.capacity),
            escape(", ".join(sorted(r.features))),
        ]
        for r in rooms
    ]


def render_schedule_rows(
    items: list["ScheduleItem"], rooms: list["Room"], show_day: bool = False
) -> list[list[str]]:
    """Zeile je Termin: [ID, (Tag,) Zeit, Raum, Fach, Sektion, Lehrkraft, Gültig]."""
    rows: list[list[str]] = []
    for item in items:
        cells = [escape(item.id)]
        if show_day:
            cells.append(item.day_of_week.short)
        validity = (
            item.start_date.isoformat()
            if item.is_single_day
            else f"{item.start_date.isoformat()} – {item.end_date.isoformat()}"
        )
        cells.extend([
            item.time_label,
            _room_name(item.room_id, rooms),
            escape(item.subject),
            escape(item.section or "—"),
            escape(item.teacher),
            validity,
        ])
        rows.append(cells)
    return rows


def render_utilization_rows(utilization: dict[str, int], width: int = 20) -> list[list[str]]:
    """Zeile je Raum: [Raum, Anzahl, Balken] – Balken relativ zum Maximum."""
    peak = max(utilization.values(), default=0)
    rows = []
    for name, count in utilization.items():
        bar_len = round(count / peak * width) if peak else 0
        rows.append([escape(name), str(count), "█" * bar_len])
    return rows


def build_table(
    title: str, columns: list[str], rows: list[list[str]], caption: Optional[str] = None
) -> Table:
    table = Table(title=title, caption=caption, box=box.ROUNDED, show_lines=True)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    return table


ROOM_STATUS_COLUMNS = ["Raum", "Plätze", "Status", "Aktuell", "Als Nächstes"]
ROOM_COLUMNS = ["Raum", "Gebäude", "Plätze", "Ausstattung"]
SCHEDULE_COLUMNS = ["ID", "Zeit", "Raum", "Fach", "Sektion", "Lehrkraft", "Gültig"]
SCHEDULE_COLUMNS_WITH_DAY = ["ID", "Tag", "Zeit", "Raum", "Fach", "Sektion", "Lehrkraft", "Gültig"]
UTILIZATION_COLUMNS = ["Raum", "Termine", ""]
