"""Diagnose-Prüfung einer gespeicherten Belegung.

Die Überschneidungsfreiheit wird bei jeder Buchung erzwungen; diese
Prüfung läuft nie automatisch, sondern nur auf Anforderung
(`python main.py validate`) als Sicherheitsnetz, z.B. nach Handänderungen
am JSON-Schnappschuss.
"""

from collections import Counter, defaultdict
from itertools import combinations
from typing import Literal, Optional

from pydantic import BaseModel

from models.room import Room
from models.schedule_item import ScheduleItem
from scheduling.conflicts import date_ranges_overlap, time_ranges_overlap


RULE_LABELS = {
    "unknown_room": "Unbekannter Raum",
    "room_double_booking": "Doppelbelegung",
    "duplicate_id": "Doppelte ID",
    "makeup_multi_day": "Mehrtägiger Nachholtermin",
}


class ValidationViolation(BaseModel):
    """Eine einzelne Verletzung, verortet nach Raum und Wochentag."""

    severity: Literal["error", "warning"]
    constraint: str                  # z.B. "room_double_booking"
    description: str
    room_id: Optional[str] = None
    day: Optional[str] = None        # Wochentag-Label, z.B. "Montag"
    items: list[str] = []            # beteiligte Termin-IDs

    @property
    def location(self) -> tuple[str, str]:
        return (self.room_id or "—", self.day or "—")


class ValidationReport(BaseModel):
    """Ergebnis der Prüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def counts_by_rule(self) -> dict[str, int]:
        return dict(Counter(v.constraint for v in self.violations))

    def print_rich(self) -> None:
        """Gibt den Report nach Raum und Wochentag gruppiert aus."""
        from rich.console import Console
        from rich.markup import escape
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        for rule, count in sorted(self.counts_by_rule().items()):
            lines.append(f"  {RULE_LABELS.get(rule, rule)}: {count}")
        console.print(Panel("\n".join(lines), title="Belegungs-Prüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.SIMPLE_HEAVY, show_lines=False)
        table.add_column("Raum", style="bold", width=8)
        table.add_column("Tag", width=10)
        table.add_column("Regel", width=18)
        table.add_column("Termine", width=14)
        table.add_column("Beschreibung")

        previous: Optional[tuple[str, str]] = None
        for v in sorted(self.violations, key=lambda v: v.location):
            room, day = v.location
            if previous is not None and previous[0] != room:
                table.add_section()
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                escape(room) if previous is None or previous[0] != room else "",
                day if previous != v.location else "",
                f"[{color}]{RULE_LABELS.get(v.constraint, v.constraint)}[/{color}]",
                escape(", ".join(v.items)),
                escape(v.description),
            )
            previous = v.location
        console.print(table)


class ScheduleValidator:
    """Prüft eine Terminliste gegen den Raumkatalog."""

    def __init__(self, makeup_marker: str = "(Makeup)") -> None:
        self.makeup_marker = makeup_marker

    def validate(self, rooms: list[Room], items: list[ScheduleItem]) -> ValidationReport:
        violations: list[ValidationViolation] = []
        violations.extend(self._check_room_references(rooms, items))
        violations.extend(self._check_room_double_booking(items))
        violations.extend(self._check_duplicate_ids(items))
        violations.extend(self._check_makeup_window(items))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_room_references(
        self, rooms: list[Room], items: list[ScheduleItem]
    ) -> list[ValidationViolation]:
        """Jeder Termin muss auf einen existierenden Raum zeigen."""
        room_ids = {r.id for r in rooms}
        return [
            ValidationViolation(
                severity="error",
                constraint="unknown_room",
                room_id=item.room_id,
                day=item.day_of_week.label,
                items=[item.id],
                description=f"'{item.subject}' verweist auf einen Raum außerhalb des Katalogs.",
            )
            for item in items
            if item.room_id not in room_ids
        ]

    def _check_room_double_booking(
        self, items: list[ScheduleItem]
    ) -> list[ValidationViolation]:
        """Gleicher Raum + Wochentag + überlappender Zeitraum → Zeitfenster disjunkt."""
        violations: list[ValidationViolation] = []
        groups: dict[tuple, list[ScheduleItem]] = defaultdict(list)
        for item in items:
            groups[(item.room_id, item.day_of_week)].append(item)

        for (room_id, day), group in groups.items():
            for a, b in combinations(group, 2):
                if not date_ranges_overlap(a.start_date, a.end_date, b.start_date, b.end_date):
                    continue
                if not time_ranges_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
                    continue
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="room_double_booking",
                    room_id=room_id,
                    day=day.label,
                    items=[a.id, b.id],
                    description=(
                        f"'{a.subject}' ({a.time_label}) überschneidet "
                        f"'{b.subject}' ({b.time_label})."
                    ),
                ))
        return violations

    def _check_duplicate_ids(self, items: list[ScheduleItem]) -> list[ValidationViolation]:
        by_id: dict[str, list[ScheduleItem]] = defaultdict(list)
        for item in items:
            by_id[item.id].append(item)
        violations = []
        for item_id, dupes in by_id.items():
            if len(dupes) < 2:
                continue
            rooms = sorted({d.room_id for d in dupes})
            violations.append(ValidationViolation(
                severity="error",
                constraint="duplicate_id",
                room_id=rooms[0] if len(rooms) == 1 else None,
                items=[item_id],
                description=f"Termin-ID kommt {len(dupes)}× vor (Räume: {', '.join(rooms)}).",
            ))
        return violations

    def _check_makeup_window(self, items: list[ScheduleItem]) -> list[ValidationViolation]:
        """Nachholtermine gelten normalerweise genau einen Tag."""
        return [
            ValidationViolation(
                severity="warning",
                constraint="makeup_multi_day",
                room_id=item.room_id,
                day=item.day_of_week.label,
                items=[item.id],
                description=(
                    f"Nachholtermin '{item.subject}' gilt {item.start_date} bis "
                    f"{item.end_date} statt eines einzelnen Tages."
                ),
            )
            for item in items
            if item.has_marker(self.makeup_marker) and not item.is_single_day
        ]
