"""Raumbelegung: Haupt-CLI.

Verwendung:
  python main.py rooms [--at "YYYY-MM-DD HH:MM"]   Raumstatus (frei/belegt)
  python main.py available                          Aktuell freie Räume
  python main.py in-use                             Laufende Veranstaltungen
  python main.py watch                              Live-Anzeige (60s-Takt)
  python main.py schedule --day Monday              Stundenplan eines Tages
  python main.py stats                              Kennzahlen + Auslastung
  python main.py add-class ...                      Kurs anlegen (Admin)
  python main.py remove <id>                        Termin löschen (Admin)
  python main.py book-makeup ...                    Nachholtermin (Lehrkraft)
  python main.py cancel <id> --email ...            Nachholtermin stornieren
  python main.py bookings                           Alle Nachholtermine
  python main.py users register|login|list|approve|reject
  python main.py ask "Ist CC101 frei?"              KI-Assistent fragen
  python main.py validate                           Belegung prüfen
  python main.py config show|init                   Konfiguration
  python main.py reset                              Schnappschuss verwerfen
"""

import logging
import sys
import time
from datetime import date
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


# ─── ZUSTAND ──────────────────────────────────────────────────────────────────

class AppState:
    """Konfiguration, Store und Benutzerverzeichnis einer CLI-Sitzung."""

    def __init__(self, config, store, users, state_path: Path) -> None:
        self.config = config
        self.store = store
        self.users = users
        self.state_path = state_path

    def save(self) -> None:
        self.store.to_snapshot(self.users.all()).save_json(self.state_path)


def _load_config():
    from config.manager import ConfigManager
    try:
        return ConfigManager().load_or_default()
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


def _load_state(ctx: click.Context) -> AppState:
    """Lädt den JSON-Schnappschuss oder startet mit Katalog + Demo-Belegung."""
    if ctx.obj.get("state") is not None:
        return ctx.obj["state"]

    from access.users import UserDirectory
    from config.defaults import default_rooms, initial_schedule
    from models.snapshot import StateSnapshot
    from scheduling.store import ScheduleStore

    config = _load_config()
    state_path = Path(ctx.obj.get("state_file") or config.state_path)
    if state_path.exists():
        snapshot = StateSnapshot.load_json(state_path)
        store = ScheduleStore.from_snapshot(snapshot, config=config)
        users = UserDirectory(snapshot.users)
    else:
        store = ScheduleStore(default_rooms(), initial_schedule(), config=config)
        users = UserDirectory()

    state = AppState(config, store, users, state_path)
    ctx.obj["state"] = state
    return state


def _resolve_context(config, at: Optional[str]):
    """Zeitkontext: expliziter Zeitpunkt oder Wanduhr."""
    from scheduling.timecontext import TimeContext, TimeContextProvider, parse_moment

    if at:
        try:
            moment = parse_moment(at)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--at")
        return TimeContext.from_datetime(moment, config.sunday_fallback)
    provider = TimeContextProvider(
        refresh_interval=config.refresh_interval_seconds,
        sunday_fallback=config.sunday_fallback,
    )
    return provider.current()


def _parse_day(ctx, param, value):
    if value is None:
        return None
    from models.timeslot import Weekday
    try:
        return Weekday.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _abort(message: str) -> None:
    console.print(f"[red bold]✗[/red bold] [red]{escape(message)}[/red]")
    sys.exit(1)


def _validation_message(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in err.errors()
    )


def _require_admin(state: AppState, passkey: str, capability) -> None:
    from access.gate import AccessDeniedError, AccessGate
    gate = AccessGate(state.config)
    try:
        role = gate.check_admin(passkey)
        gate.require(role, capability)
    except AccessDeniedError as e:
        _abort(str(e))


at_option = click.option(
    "--at", "at", default=None,
    help='Zeitpunkt "YYYY-MM-DD HH:MM" statt der aktuellen Uhrzeit.',
)
passkey_option = click.option(
    "--passkey", prompt="Admin-Passkey", hide_input=True,
    help="Admin-Passkey.",
)


# ─── ANZEIGE ──────────────────────────────────────────────────────────────────

def _room_status_table(state: AppState, tctx, search: str = "") -> Table:
    from dashboard.renderer import ROOM_STATUS_COLUMNS, build_table, render_room_status_rows

    visible = {r.id for r in state.store.search_rooms(search)}
    statuses = [s for s in state.store.room_status(tctx) if s.room.id in visible]
    return build_table(
        f"Raumstatus – {escape(state.config.building_name)}",
        ROOM_STATUS_COLUMNS,
        render_room_status_rows(statuses),
        caption=str(tctx),
    )


def _stats_panel(state: AppState, tctx) -> Panel:
    stats = state.store.stats(tctx)
    return Panel(
        f"Räume: [bold]{stats['total_rooms']}[/bold]  |  "
        f"Termine: [bold]{stats['total_classes']}[/bold]  |  "
        f"Jetzt belegt: [bold green]{stats['occupied_now']}[/bold green]",
        title="Übersicht",
        border_style="cyan",
    )


@click.command("rooms")
@at_option
@click.option("--search", "-s", default="", help="Filter auf Raumname oder Gebäude.")
@click.pass_context
def cmd_rooms(ctx, at: Optional[str], search: str):
    """Zeigt alle Räume mit aktuellem und nächstem Termin."""
    state = _load_state(ctx)
    tctx = _resolve_context(state.config, at)
    console.print(_stats_panel(state, tctx))
    console.print(_room_status_table(state, tctx, search))


@click.command("available")
@at_option
@click.pass_context
def cmd_available(ctx, at: Optional[str]):
    """Listet die aktuell freien Räume."""
    from dashboard.renderer import ROOM_COLUMNS, build_table, render_room_rows

    state = _load_state(ctx)
    tctx = _resolve_context(state.config, at)
    rooms = state.store.available_rooms(tctx)
    if not rooms:
        console.print("[yellow]Alle Räume sind aktuell belegt.[/yellow]")
        return
    console.print(build_table(
        f"Freie Räume ({tctx})", ROOM_COLUMNS, render_room_rows(rooms)
    ))


@click.command("in-use")
@at_option
@click.pass_context
def cmd_in_use(ctx, at: Optional[str]):
    """Listet laufende Veranstaltungen (früh endende zuerst)."""
    from dashboard.renderer import SCHEDULE_COLUMNS, build_table, render_schedule_rows

    state = _load_state(ctx)
    tctx = _resolve_context(state.config, at)
    sessions = state.store.active_sessions(tctx)
    if not sessions:
        console.print("[dim]Aktuell finden keine Veranstaltungen statt.[/dim]")
        return
    console.print(build_table(
        f"Räume in Benutzung ({tctx})",
        SCHEDULE_COLUMNS,
        render_schedule_rows(sessions, state.store.list_rooms()),
    ))


@click.command("watch")
@click.option("--interval", type=int, default=None,
              help="Aktualisierung in Sekunden (Default aus Config).")
@click.pass_context
def cmd_watch(ctx, interval: Optional[int]):
    """Live-Raumstatus; Abbruch mit Strg+C."""
    from scheduling.timecontext import TimeContextProvider

    state = _load_state(ctx)
    refresh = interval or state.config.refresh_interval_seconds
    provider = TimeContextProvider(
        refresh_interval=refresh, sunday_fallback=state.config.sunday_fallback,
    )

    def _render():
        tctx = provider.current()
        return Group(_stats_panel(state, tctx), _room_status_table(state, tctx))

    try:
        with Live(_render(), console=console, refresh_per_second=1) as live:
            while True:
                time.sleep(refresh)
                live.update(_render())
    except KeyboardInterrupt:
        console.print("[dim]Live-Anzeige beendet.[/dim]")


@click.command("schedule")
@click.option("--day", callback=_parse_day, default=None,
              help="Wochentag (Default: heute).")
@click.option("--room", "room_id", default=None, help="Nur diesen Raum.")
@click.option("--section", default=None, help="Nur diese Sektion.")
@click.pass_context
def cmd_schedule(ctx, day, room_id: Optional[str], section: Optional[str]):
    """Stundenplan eines Tages, nach Beginn sortiert."""
    from dashboard.renderer import SCHEDULE_COLUMNS, build_table, render_schedule_rows
    from models.timeslot import Weekday

    state = _load_state(ctx)
    if day is None:
        day = _resolve_context(state.config, None).day or Weekday.MONDAY
    items = state.store.filter_schedule(day, room_id=room_id, section=section)
    if not items:
        console.print(f"[dim]Keine Termine am {day.label}.[/dim]")
        return
    console.print(build_table(
        f"Stundenplan {day.label}",
        SCHEDULE_COLUMNS,
        render_schedule_rows(items, state.store.list_rooms()),
    ))


@click.command("stats")
@at_option
@click.pass_context
def cmd_stats(ctx, at: Optional[str]):
    """Kennzahlen und Raumauslastung."""
    from dashboard.renderer import UTILIZATION_COLUMNS, build_table, render_utilization_rows

    state = _load_state(ctx)
    tctx = _resolve_context(state.config, at)
    console.print(_stats_panel(state, tctx))
    console.print(build_table(
        "Raumauslastung (Termine je Raum)",
        UTILIZATION_COLUMNS,
        render_utilization_rows(state.store.utilization()),
    ))
    sections = state.store.sections()
    if sections:
        console.print(f"[bold]Sektionen:[/bold] {escape(', '.join(sections))}")


# ─── ADMIN ────────────────────────────────────────────────────────────────────

@click.command("add-class")
@passkey_option
@click.option("--room", "room_id", required=True, help="Raum-ID, z.B. cc101.")
@click.option("--day", callback=_parse_day, required=True, help="Wochentag.")
@click.option("--start", "start_time", default="09:00", show_default=True)
@click.option("--end", "end_time", default="10:30", show_default=True)
@click.option("--start-date", default=None, help="YYYY-MM-DD (Default: heute).")
@click.option("--end-date", default=None,
              help="YYYY-MM-DD (Default: heute + semester_months).")
@click.option("--subject", required=True)
@click.option("--teacher", required=True)
@click.option("--section", default=None)
@click.pass_context
def cmd_add_class(ctx, passkey, room_id, day, start_time, end_time,
                  start_date, end_date, subject, teacher, section):
    """Legt einen wiederkehrenden Kurs an (Admin)."""
    from access.gate import Capability
    from scheduling.candidates import RecurringCandidate
    from scheduling.errors import BookingError
    from scheduling.timecontext import add_months

    state = _load_state(ctx)
    _require_admin(state, passkey, Capability.MANAGE_SCHEDULE)

    today = date.today()
    try:
        candidate = RecurringCandidate(
            room_id=room_id,
            subject=subject,
            teacher=teacher,
            section=section,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            start_date=start_date or today,
            end_date=end_date or add_months(today, state.config.semester_months),
        )
        item = state.store.add_schedule(candidate)
    except ValidationError as e:
        _abort(f"Ungültige Eingabe: {_validation_message(e)}")
    except BookingError as e:
        _abort(str(e))

    state.save()
    console.print(
        f"[green]✓[/green] Kurs angelegt: [bold]{escape(item.subject)}[/bold] "
        f"({item.day_of_week.label} {item.time_label}, {escape(item.room_id)}) – ID {item.id}"
    )


@click.command("remove")
@click.argument("item_id")
@passkey_option
@click.pass_context
def cmd_remove(ctx, item_id: str, passkey: str):
    """Löscht einen Termin (Admin). Unbekannte IDs sind kein Fehler."""
    from access.gate import Capability

    state = _load_state(ctx)
    _require_admin(state, passkey, Capability.MANAGE_SCHEDULE)
    existed = state.store.get_item(item_id) is not None
    state.store.remove_schedule(item_id)
    state.save()
    if existed:
        console.print(f"[green]✓[/green] Termin {escape(item_id)} gelöscht.")
    else:
        console.print(f"[dim]Termin {escape(item_id)} existiert nicht – nichts zu tun.[/dim]")


# ─── LEHRKRÄFTE ───────────────────────────────────────────────────────────────

def _approved_teacher(state: AppState, email: str):
    from access.gate import AccessDeniedError, AccessGate, Capability

    user = state.users.find_by_email(email)
    if user is None:
        _abort(f"Unbekannte E-Mail {email}. Zuerst 'users register' ausführen.")
    gate = AccessGate(state.config)
    try:
        role = gate.teacher_role(user)
        gate.require(role, Capability.BOOK_MAKEUP)
    except AccessDeniedError as e:
        _abort(str(e))
    return user


@click.command("book-makeup")
@click.option("--email", required=True, help="E-Mail der freigegebenen Lehrkraft.")
@click.option("--room", "room_id", required=True)
@click.option("--date", "booking_date", default=None, help="YYYY-MM-DD (Default: heute).")
@click.option("--start", "start_time", default="09:00", show_default=True)
@click.option("--end", "end_time", default="10:30", show_default=True)
@click.option("--subject", required=True)
@click.option("--section", required=True)
@click.pass_context
def cmd_book_makeup(ctx, email, room_id, booking_date, start_time, end_time,
                    subject, section):
    """Bucht einen Raum für einen Nachholtermin (ein Tag, Lehrkraft = Profilname)."""
    from scheduling.candidates import MakeupCandidate
    from scheduling.errors import BookingError

    state = _load_state(ctx)
    user = _approved_teacher(state, email)
    try:
        candidate = MakeupCandidate(
            room_id=room_id,
            subject=subject,
            section=section,
            teacher=user.name,
            booking_date=booking_date or date.today(),
            start_time=start_time,
            end_time=end_time,
        )
        item = state.store.add_schedule(candidate)
    except ValidationError as e:
        _abort(f"Ungültige Eingabe: {_validation_message(e)}")
    except BookingError as e:
        _abort(str(e))

    state.save()
    console.print(
        f"[green]✓[/green] Raum erfolgreich für den Nachholtermin gebucht: "
        f"{escape(item.room_id)}, {item.day_of_week.label} {item.start_date.isoformat()} "
        f"{item.time_label} – ID {item.id}"
    )


@click.command("cancel")
@click.argument("item_id")
@click.option("--email", required=True, help="E-Mail der buchenden Lehrkraft.")
@click.pass_context
def cmd_cancel(ctx, item_id: str, email: str):
    """Storniert einen eigenen Nachholtermin."""
    state = _load_state(ctx)
    user = _approved_teacher(state, email)
    item = state.store.get_item(item_id)
    if item is None:
        console.print(f"[dim]Buchung {escape(item_id)} existiert nicht – nichts zu tun.[/dim]")
        return
    if not item.has_marker(state.config.makeup_marker) or item.teacher != user.name:
        _abort(f"Termin {item_id} ist kein eigener Nachholtermin.")
    state.store.remove_schedule(item_id)
    state.save()
    console.print(f"[green]✓[/green] Buchung {escape(item_id)} storniert.")


@click.command("bookings")
@click.pass_context
def cmd_bookings(ctx):
    """Alle Nachholtermine, neueste zuerst."""
    from dashboard.renderer import SCHEDULE_COLUMNS_WITH_DAY, build_table, render_schedule_rows

    state = _load_state(ctx)
    items = state.store.makeup_bookings()
    if not items:
        console.print("[dim]Keine Nachholtermine vorhanden.[/dim]")
        return
    console.print(build_table(
        "Nachholtermine",
        SCHEDULE_COLUMNS_WITH_DAY,
        render_schedule_rows(items, state.store.list_rooms(), show_day=True),
    ))


# ─── BENUTZER ─────────────────────────────────────────────────────────────────

@click.group("users")
def cmd_users():
    """Lehrkräfte registrieren und freigeben."""


@cmd_users.command("register")
@click.option("--email", required=True)
@click.option("--name", required=True)
@click.pass_context
def users_register(ctx, email: str, name: str):
    """Registriert eine Lehrkraft (wartet auf Freigabe)."""
    _users_login(ctx, email, name)


@cmd_users.command("login")
@click.option("--email", required=True)
@click.option("--name", default="")
@click.pass_context
def users_login(ctx, email: str, name: str):
    """Anmeldung per E-Mail; unbekannte Adressen werden registriert."""
    _users_login(ctx, email, name)


def _users_login(ctx, email: str, name: str) -> None:
    from access.users import LOGIN_MESSAGES, LoginOutcome

    state = _load_state(ctx)
    try:
        outcome, user = state.users.login(email, name)
    except ValueError as e:
        _abort(str(e))
    state.save()
    color = {
        LoginOutcome.APPROVED: "green",
        LoginOutcome.REGISTERED: "green",
        LoginOutcome.PENDING: "yellow",
        LoginOutcome.REJECTED: "red",
    }[outcome]
    console.print(f"[{color}]{LOGIN_MESSAGES[outcome]}[/{color}] ({escape(user.email)}, ID {user.id})")


@cmd_users.command("list")
@click.option("--pending", is_flag=True, default=False, help="Nur wartende Anfragen.")
@click.pass_context
def users_list(ctx, pending: bool):
    """Listet Benutzer."""
    state = _load_state(ctx)
    users = state.users.pending() if pending else state.users.all()
    if not users:
        console.print("[dim]Keine Benutzer vorhanden.[/dim]")
        return
    table = Table(title="Benutzer", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("E-Mail")
    table.add_column("Status")
    for u in users:
        table.add_row(u.id, escape(u.name), escape(u.email), u.status.value)
    console.print(table)


def _decide_user(ctx, user_id: str, passkey: str, approve: bool) -> None:
    from access.gate import Capability
    from access.users import InvalidTransitionError

    state = _load_state(ctx)
    _require_admin(state, passkey, Capability.MANAGE_USERS)
    try:
        user = state.users.approve(user_id) if approve else state.users.reject(user_id)
    except InvalidTransitionError as e:
        _abort(str(e))
    state.save()
    console.print(f"[green]✓[/green] {escape(user.email)}: {user.status.value}")


@cmd_users.command("approve")
@click.argument("user_id")
@passkey_option
@click.pass_context
def users_approve(ctx, user_id: str, passkey: str):
    """Gibt eine wartende Lehrkraft frei (Admin)."""
    _decide_user(ctx, user_id, passkey, approve=True)


@cmd_users.command("reject")
@click.argument("user_id")
@passkey_option
@click.pass_context
def users_reject(ctx, user_id: str, passkey: str):
    """Lehnt eine wartende Lehrkraft ab (Admin)."""
    _decide_user(ctx, user_id, passkey, approve=False)


# ─── ASSISTENT ────────────────────────────────────────────────────────────────

@click.command("ask")
@click.argument("question", required=False, default="")
@click.pass_context
def cmd_ask(ctx, question: str):
    """Fragt den KI-Assistenten (liest nur die aktuelle Belegung).

    Ohne Frage wird nur die Begrüßung angezeigt.
    """
    from assistant.client import GREETING, AssistantClient

    if not question.strip():
        console.print(Panel(GREETING, title="RoomSync AI", border_style="magenta"))
        return

    state = _load_state(ctx)
    client = AssistantClient(state.config.assistant)
    with console.status("Assistent denkt nach..."):
        answer = client.ask(question, state.store.list_rooms(), state.store.list_schedule())
    console.print(Panel(escape(answer), title="RoomSync AI", border_style="magenta"))


# ─── PRÜFUNG ──────────────────────────────────────────────────────────────────

@click.command("validate")
@click.pass_context
def cmd_validate(ctx):
    """Prüft die gespeicherte Belegung auf Überschneidungen."""
    from analysis.schedule_validator import ScheduleValidator

    state = _load_state(ctx)
    snapshot = state.store.to_snapshot(state.users.all())
    console.print(Panel(snapshot.summary(), title="Bestand", border_style="dim"))
    report = ScheduleValidator(state.config.makeup_marker).validate(
        state.store.list_rooms(), state.store.list_schedule()
    )
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    config = _load_config()
    fallback = config.sunday_fallback.label if config.sunday_fallback else "geschlossen"
    console.print(Panel(
        f"[bold]{escape(config.building_name)}[/bold]  |  Sonntag → {fallback}  |  "
        f"Aktualisierung {config.refresh_interval_seconds}s",
        title="Konfiguration",
        border_style="cyan",
    ))
    table = Table(box=box.SIMPLE)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    for k, v in config.model_dump(exclude={"admin_passkey", "class_colors"}).items():
        table.add_row(k, escape(str(v)))
    table.add_row("class_colors", f"{len(config.class_colors)} Farben")
    console.print(table)


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
def config_init(force: bool):
    """Schreibt die Standard-Konfiguration als YAML."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        return
    mgr.save(default_app_config())


@click.command("reset")
@click.confirmation_option(prompt="Schnappschuss wirklich verwerfen?")
@click.pass_context
def cmd_reset(ctx):
    """Verwirft den JSON-Schnappschuss (Katalog + Demo-Belegung beim nächsten Start)."""
    config = _load_config()
    path = Path(ctx.obj.get("state_file") or config.state_path)
    if path.exists():
        path.unlink()
        console.print(f"[green]✓[/green] {escape(str(path))} gelöscht.")
    else:
        console.print("[dim]Kein Schnappschuss vorhanden.[/dim]")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--state-file", default=None, type=click.Path(path_type=Path),
              help="JSON-Schnappschuss (Default aus Config).")
@click.option("--verbose", "-v", count=True, help="Logging (-v INFO, -vv DEBUG).")
@click.pass_context
def cli(ctx, state_file: Optional[Path], verbose: int):
    """Raumbelegung für ein Gebäude: Raumstatus, Kurse, Nachholtermine.

    Starten Sie mit: python main.py rooms
    """
    ctx.ensure_object(dict)
    ctx.obj["state_file"] = state_file
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_rooms)
cli.add_command(cmd_available)
cli.add_command(cmd_in_use)
cli.add_command(cmd_watch)
cli.add_command(cmd_schedule)
cli.add_command(cmd_stats)
cli.add_command(cmd_add_class)
cli.add_command(cmd_remove)
cli.add_command(cmd_book_makeup)
cli.add_command(cmd_cancel)
cli.add_command(cmd_bookings)
cli.add_command(cmd_users)
cli.add_command(cmd_ask)
cli.add_command(cmd_validate)
cli.add_command(cmd_config)
cli.add_command(cmd_reset)


if __name__ == "__main__":
    main()
