"""Tests für den Belegungs-Kern: Konfliktprüfung, Belegung, Zeitkontext."""

import random
from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from config.schema import AppConfig
from models.room import Room
from models.schedule_item import ScheduleItem
from models.timeslot import ClockTime, Weekday
from scheduling.booking import BookingFactory
from scheduling.candidates import MakeupCandidate, RecurringCandidate
from scheduling.conflicts import (
    ConflictDetector,
    ConflictKind,
    date_ranges_overlap,
    time_ranges_overlap,
)
from scheduling.errors import (
    InvalidDateOrderError,
    InvalidDayError,
    InvalidTimeOrderError,
    MissingFieldError,
    SchedulingConflictError,
    UnknownRoomError,
)
from scheduling import occupancy
from scheduling.store import ScheduleStore
from scheduling.timecontext import TimeContext, TimeContextProvider, add_months, parse_moment


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

YEAR_START = date(2026, 1, 1)
YEAR_END = date(2026, 12, 31)
MONDAY = date(2026, 10, 19)
SATURDAY = date(2026, 10, 17)
SUNDAY = date(2026, 10, 18)


def _t(raw: str) -> ClockTime:
    return ClockTime.parse(raw)


def _room(room_id: str) -> Room:
    return Room(id=room_id, name=room_id.upper(), capacity=40, building="Comscie Building")


def _item(
    item_id: str = "s1",
    room_id: str = "cc101",
    day: Weekday = Weekday.MONDAY,
    start: str = "09:00",
    end: str = "10:30",
    start_date: date = YEAR_START,
    end_date: date = YEAR_END,
    subject: str = "Intro to Programming",
) -> ScheduleItem:
    return ScheduleItem(
        id=item_id, room_id=room_id, subject=subject, section="BSCS 1-A",
        teacher="Dr. Smith", day_of_week=day, start_time=_t(start), end_time=_t(end),
        start_date=start_date, end_date=end_date,
    )


def _recurring(
    room_id: str = "cc101",
    day: Weekday = Weekday.MONDAY,
    start: str = "09:00",
    end: str = "10:30",
    start_date: date = YEAR_START,
    end_date: date = YEAR_END,
    subject: str = "Data Structures",
    teacher: str = "Prof. Johnson",
) -> RecurringCandidate:
    return RecurringCandidate(
        room_id=room_id, subject=subject, teacher=teacher, day_of_week=day,
        start_time=start, end_time=end, start_date=start_date, end_date=end_date,
    )


def _makeup(
    room_id: str = "cc101",
    on: date = MONDAY,
    start: str = "09:00",
    end: str = "10:30",
    subject: str = "Algorithms",
    section: str = "BSCS 2-A",
) -> MakeupCandidate:
    return MakeupCandidate(
        room_id=room_id, subject=subject, teacher="Dr. Emily", section=section,
        booking_date=on, start_time=start, end_time=end,
    )


def _store(*items: ScheduleItem) -> ScheduleStore:
    rooms = [_room(r) for r in ("cc101", "cc102", "cc201")]
    return ScheduleStore(rooms, list(items), factory=BookingFactory(rng=random.Random(7)))


# ─── WERTETYPEN ───────────────────────────────────────────────────────────────

class TestValueTypes:
    def test_clock_parse_and_format(self):
        assert str(_t("9:05")) == "09:05"
        assert str(_t("23:59:59")) == "23:59"

    def test_clock_ordering_matches_string_ordering(self):
        times = ["00:00", "07:35", "09:00", "10:30", "12:00", "23:59"]
        parsed = [_t(s) for s in times]
        assert parsed == sorted(parsed)
        assert _t("09:00") < _t("10:30")

    @pytest.mark.parametrize("raw", ["24:00", "12:60", "noon", "12", ""])
    def test_clock_invalid(self, raw):
        with pytest.raises(ValueError):
            ClockTime.parse(raw)

    def test_weekday_parse_aliases(self):
        assert Weekday.parse("monday") is Weekday.MONDAY
        assert Weekday.parse("Mo") is Weekday.MONDAY
        assert Weekday.parse("Samstag") is Weekday.SATURDAY
        assert Weekday.parse("Sat") is Weekday.SATURDAY

    def test_weekday_has_no_sunday(self):
        assert len(list(Weekday)) == 6
        with pytest.raises(ValueError):
            Weekday.parse("Sunday")

    def test_weekday_from_date(self):
        assert Weekday.from_date(MONDAY) is Weekday.MONDAY
        assert Weekday.from_date(SATURDAY) is Weekday.SATURDAY
        assert Weekday.from_date(SUNDAY) is None

    def test_schedule_item_rejects_inverted_times(self):
        with pytest.raises(ValidationError):
            _item(start="10:30", end="09:00")

    def test_schedule_item_rejects_inverted_dates(self):
        with pytest.raises(ValidationError):
            _item(start_date=YEAR_END, end_date=YEAR_START)

    def test_schedule_item_rejects_sunday(self):
        with pytest.raises(ValidationError):
            ScheduleItem(
                id="x", room_id="cc101", subject="S", teacher="T", day_of_week="Sunday",
                start_time="09:00", end_time="10:00",
                start_date=YEAR_START, end_date=YEAR_END,
            )

    def test_schedule_item_json_keeps_hhmm(self):
        data = _item().model_dump(mode="json")
        assert data["start_time"] == "09:00"
        assert data["day_of_week"] == "Monday"
        assert data["start_date"] == "2026-01-01"
        assert ScheduleItem.model_validate(data) == _item()


# ─── ÜBERSCHNEIDUNGS-PRIMITIVE ────────────────────────────────────────────────

class TestOverlapPrimitives:
    def test_touching_times_do_not_overlap(self):
        assert not time_ranges_overlap(_t("10:30"), _t("12:00"), _t("09:00"), _t("10:30"))
        assert not time_ranges_overlap(_t("08:00"), _t("09:00"), _t("09:00"), _t("10:30"))

    def test_identical_times_overlap(self):
        assert time_ranges_overlap(_t("09:00"), _t("10:30"), _t("09:00"), _t("10:30"))

    def test_contained_times_overlap(self):
        assert time_ranges_overlap(_t("09:30"), _t("10:00"), _t("09:00"), _t("10:30"))

    def test_single_shared_day_overlaps(self):
        assert date_ranges_overlap(date(2026, 3, 1), date(2026, 3, 31),
                                   date(2026, 3, 31), date(2026, 4, 30))

    def test_adjacent_date_ranges_do_not_overlap(self):
        assert not date_ranges_overlap(date(2026, 3, 1), date(2026, 3, 30),
                                       date(2026, 3, 31), date(2026, 4, 30))


# ─── BELEGUNG ─────────────────────────────────────────────────────────────────

class TestOccupancy:
    def test_active_inside_window(self):
        assert occupancy.is_active_at(_item(), Weekday.MONDAY, _t("09:00"), MONDAY)
        assert occupancy.is_active_at(_item(), Weekday.MONDAY, _t("10:29"), MONDAY)

    def test_not_active_at_end_time(self):
        assert not occupancy.is_active_at(_item(), Weekday.MONDAY, _t("10:30"), MONDAY)

    def test_not_active_other_day(self):
        assert not occupancy.is_active_at(_item(), Weekday.TUESDAY, _t("09:30"), MONDAY)

    def test_not_active_outside_validity(self):
        item = _item(start_date=date(2026, 1, 1), end_date=date(2026, 6, 30))
        assert not occupancy.is_active_at(item, Weekday.MONDAY, _t("09:30"), MONDAY)

    def test_validity_inclusive_on_both_ends(self):
        item = _item(start_date=MONDAY, end_date=MONDAY)
        assert occupancy.is_active_at(item, Weekday.MONDAY, _t("09:30"), MONDAY)

    def test_closed_day_nothing_active(self):
        assert not occupancy.is_active_at(_item(), None, _t("09:30"), MONDAY)

    def test_occupancy_query_marks_room(self):
        store = _store(_item())
        result = store.occupancy_query(Weekday.MONDAY, _t("10:00"), MONDAY)
        assert result["cc101"].id == "s1"
        assert result["cc102"] is None
        assert list(result) == ["cc101", "cc102", "cc201"]

    def test_occupancy_query_free_at_end(self):
        store = _store(_item())
        result = store.occupancy_query(Weekday.MONDAY, _t("10:30"), MONDAY)
        assert all(v is None for v in result.values())

    def test_is_room_free(self):
        items = [_item()]
        assert not occupancy.is_room_free("cc101", items, Weekday.MONDAY, _t("09:15"), MONDAY)
        assert occupancy.is_room_free("cc102", items, Weekday.MONDAY, _t("09:15"), MONDAY)

    def test_current_occupant(self):
        items = [_item(), _item("x", room_id="cc102")]
        assert occupancy.current_occupant("cc101", items, Weekday.MONDAY, _t("09:00"), MONDAY).id == "s1"
        assert occupancy.current_occupant("cc201", items, Weekday.MONDAY, _t("09:00"), MONDAY) is None

    def test_next_upcoming_picks_earliest(self):
        store = _store(
            _item("late", start="14:00", end="15:00"),
            _item("early", start="11:00", end="12:30"),
            _item("past", start="07:00", end="08:00"),
        )
        nxt = store.next_upcoming("cc101", Weekday.MONDAY, _t("10:45"), MONDAY)
        assert nxt.id == "early"

    def test_next_upcoming_requires_strictly_later_start(self):
        store = _store(_item(start="11:00", end="12:00"))
        assert store.next_upcoming("cc101", Weekday.MONDAY, _t("11:00"), MONDAY) is None

    def test_next_upcoming_respects_validity(self):
        store = _store(_item(start="11:00", end="12:00",
                             start_date=YEAR_START, end_date=date(2026, 6, 30)))
        assert store.next_upcoming("cc101", Weekday.MONDAY, _t("08:00"), MONDAY) is None

    def test_next_upcoming_none_when_closed(self):
        store = _store(_item(start="11:00", end="12:00"))
        assert store.next_upcoming("cc101", None, _t("08:00"), MONDAY) is None

    def test_room_status_and_available(self):
        store = _store(_item(), _item("s2", start="11:00", end="12:30"))
        ctx = TimeContext(day=Weekday.MONDAY, time=_t("09:30"), date=MONDAY)
        statuses = {s.room.id: s for s in store.room_status(ctx)}
        assert not statuses["cc101"].is_free
        assert statuses["cc101"].upcoming.id == "s2"
        assert statuses["cc102"].is_free
        assert [r.id for r in store.available_rooms(ctx)] == ["cc102", "cc201"]

    def test_active_sessions_sorted_by_end(self):
        store = _store(
            _item("a", room_id="cc101", start="09:00", end="11:00"),
            _item("b", room_id="cc102", start="08:00", end="10:00"),
        )
        ctx = TimeContext(day=Weekday.MONDAY, time=_t("09:30"), date=MONDAY)
        assert [i.id for i in store.active_sessions(ctx)] == ["b", "a"]

    def test_stats(self):
        store = _store(_item(), _item("s2", room_id="cc102"))
        ctx = TimeContext(day=Weekday.MONDAY, time=_t("09:30"), date=MONDAY)
        assert store.stats(ctx) == {"total_rooms": 3, "total_classes": 2, "occupied_now": 2}


# ─── KONFLIKTPRÜFUNG: WIEDERKEHRENDE KURSE ────────────────────────────────────

class TestRecurringConflicts:
    """Szenario: cc101 Montag 09:00–10:30, gültig 01.01.–31.12."""

    def setup_method(self):
        self.detector = ConflictDetector()
        self.items = [_item()]

    def test_touching_boundary_accepted(self):
        check = self.detector.check(_recurring(start="10:30", end="12:00"), self.items)
        assert check.accepted

    def test_overlap_rejected(self):
        check = self.detector.check(_recurring(start="10:00", end="11:00"), self.items)
        assert not check.accepted
        assert check.kind == ConflictKind.CONFLICT
        assert check.conflicting.id == "s1"
        assert "Montags" in check.reason
        assert "cc101" in check.reason

    def test_identical_range_rejected(self):
        check = self.detector.check(_recurring(), self.items)
        assert not check.accepted

    def test_other_room_accepted(self):
        assert self.detector.check(_recurring(room_id="cc102"), self.items).accepted

    def test_other_day_accepted(self):
        assert self.detector.check(_recurring(day=Weekday.TUESDAY), self.items).accepted

    def test_one_shared_day_rejected(self):
        items = [_item(start_date=date(2026, 1, 1), end_date=date(2026, 3, 31))]
        cand = _recurring(start_date=date(2026, 3, 31), end_date=date(2026, 6, 30))
        check = self.detector.check(cand, items)
        assert not check.accepted
        assert "2026-03-31 bis 2026-03-31" in check.reason

    def test_date_range_ending_day_before_accepted(self):
        items = [_item(start_date=date(2026, 4, 1), end_date=date(2026, 6, 30))]
        cand = _recurring(start_date=date(2026, 1, 1), end_date=date(2026, 3, 31))
        assert self.detector.check(cand, items).accepted

    def test_invalid_time_order(self):
        check = self.detector.check(_recurring(start="10:30", end="10:30"), self.items)
        assert check.kind == ConflictKind.INVALID_TIME_ORDER
        assert "Endzeit" in check.reason

    def test_invalid_date_order(self):
        cand = _recurring(room_id="cc201", start_date=YEAR_END, end_date=YEAR_START)
        check = self.detector.check(cand, [])
        assert check.kind == ConflictKind.INVALID_DATE_ORDER

    def test_time_order_checked_before_conflicts(self):
        cand = _recurring(start="10:00", end="09:30")
        assert self.detector.check(cand, self.items).kind == ConflictKind.INVALID_TIME_ORDER


# ─── KONFLIKTPRÜFUNG: NACHHOLTERMINE ──────────────────────────────────────────

class TestMakeupConflicts:
    def setup_method(self):
        self.detector = ConflictDetector()

    def test_day_derived_from_date(self):
        assert _makeup(on=MONDAY).day_of_week is Weekday.MONDAY
        assert _makeup(on=SATURDAY).day_of_week is Weekday.SATURDAY

    def test_saturday_never_matches_monday_item(self):
        items = [_item()]
        for start, end in [("09:00", "10:30"), ("08:00", "18:00"), ("10:00", "10:15")]:
            assert self.detector.check(_makeup(on=SATURDAY, start=start, end=end), items).accepted

    def test_overlap_on_monday_rejected(self):
        check = self.detector.check(_makeup(start="10:00", end="11:00"), [_item()])
        assert not check.accepted
        assert "2026-10-19" in check.reason
        assert "Montag" in check.reason

    def test_touching_boundary_accepted(self):
        assert self.detector.check(_makeup(start="10:30", end="11:30"), [_item()]).accepted

    def test_date_outside_item_validity_accepted(self):
        items = [_item(start_date=YEAR_START, end_date=date(2026, 6, 30))]
        assert self.detector.check(_makeup(), items).accepted

    def test_existing_makeup_same_day_rejected(self):
        items = [_item(start_date=MONDAY, end_date=MONDAY)]
        assert not self.detector.check(_makeup(), items).accepted
        next_week = MONDAY + timedelta(days=7)
        assert self.detector.check(_makeup(on=next_week), items).accepted

    def test_validity_boundaries_are_inclusive(self):
        first, last = date(2026, 3, 2), date(2026, 6, 29)
        items = [_item(start_date=first, end_date=last)]
        assert not self.detector.check(_makeup(on=first), items).accepted
        assert not self.detector.check(_makeup(on=last), items).accepted
        assert self.detector.check(_makeup(on=first - timedelta(days=7)), items).accepted
        assert self.detector.check(_makeup(on=last + timedelta(days=7)), items).accepted

    def test_day_after_end_date_accepted(self):
        items = [_item(day=Weekday.TUESDAY, start_date=YEAR_START, end_date=date(2026, 10, 19))]
        tuesday = date(2026, 10, 20)
        assert self.detector.check(_makeup(on=tuesday), items).accepted
        store = _store(*items)
        store.add_schedule(_makeup(on=tuesday))
        assert len(store) == 2

    def test_invalid_time_order(self):
        check = self.detector.check(_makeup(start="11:00", end="10:00"), [])
        assert check.kind == ConflictKind.INVALID_TIME_ORDER

    def test_sunday_rejected(self):
        check = self.detector.check(_makeup(on=SUNDAY), [])
        assert check.kind == ConflictKind.INVALID_DAY
        assert "Sonntag" in check.reason


# ─── BUCHUNG ──────────────────────────────────────────────────────────────────

class TestBookingFactory:
    def test_recurring_color_from_palette(self):
        config = AppConfig()
        factory = BookingFactory(config, rng=random.Random(1))
        item = factory.build(_recurring())
        assert item.color in config.class_colors
        assert item.subject == "Data Structures"
        assert item.day_of_week is Weekday.MONDAY

    def test_makeup_marker_color_and_window(self):
        config = AppConfig()
        item = BookingFactory(config).build(_makeup())
        assert item.subject == "Algorithms (Makeup)"
        assert item.color == config.makeup_color
        assert item.start_date == item.end_date == MONDAY
        assert item.day_of_week is Weekday.MONDAY

    def test_ids_unique(self):
        factory = BookingFactory()
        ids = {factory.build(_recurring()).id for _ in range(50)}
        assert len(ids) == 50

    def test_blank_section_becomes_none(self):
        cand = _recurring().model_copy(update={"section": "  "})
        assert BookingFactory().build(cand).section is None


# ─── STORE ────────────────────────────────────────────────────────────────────

class TestScheduleStore:
    def test_add_schedule_appends(self):
        store = _store(_item())
        item = store.add_schedule(_recurring(start="10:30", end="12:00"))
        assert store.list_schedule()[-1] == item
        assert len(store) == 2

    def test_add_conflict_raises_and_leaves_store(self):
        store = _store(_item())
        with pytest.raises(SchedulingConflictError) as exc:
            store.add_schedule(_recurring(start="10:00", end="11:00"))
        assert exc.value.conflicting.id == "s1"
        assert len(store) == 1

    def test_add_invalid_time_raises(self):
        with pytest.raises(InvalidTimeOrderError):
            _store().add_schedule(_recurring(start="12:00", end="11:00"))

    def test_add_invalid_date_raises(self):
        with pytest.raises(InvalidDateOrderError):
            _store().add_schedule(_recurring(start_date=YEAR_END, end_date=YEAR_START))

    def test_add_sunday_makeup_raises(self):
        with pytest.raises(InvalidDayError):
            _store().add_schedule(_makeup(on=SUNDAY))

    def test_add_unknown_room_raises(self):
        with pytest.raises(UnknownRoomError):
            _store().add_schedule(_recurring(room_id="xx999"))

    def test_missing_fields_raise(self):
        with pytest.raises(MissingFieldError) as exc:
            _store().add_schedule(_recurring(subject=" ", teacher=""))
        assert exc.value.fields == ["subject", "teacher"]

    def test_makeup_requires_section(self):
        with pytest.raises(MissingFieldError):
            _store().add_schedule(_makeup(section=""))

    def test_remove_idempotent(self):
        store = _store(_item(), _item("s2", room_id="cc102"))
        store.remove_schedule("s1")
        once = store.list_schedule()
        store.remove_schedule("s1")
        assert store.list_schedule() == once
        assert [i.id for i in once] == ["s2"]

    def test_remove_unknown_is_noop(self):
        store = _store(_item())
        store.remove_schedule("does-not-exist")
        assert len(store) == 1

    def test_list_schedule_insertion_order(self):
        store = _store()
        a = store.add_schedule(_recurring(start="14:00", end="15:00"))
        b = store.add_schedule(_recurring(start="08:00", end="09:00"))
        assert [i.id for i in store.list_schedule()] == [a.id, b.id]

    def test_list_schedule_is_a_copy(self):
        store = _store(_item())
        store.list_schedule().clear()
        assert len(store) == 1

    def test_duplicate_room_ids_rejected(self):
        with pytest.raises(ValueError):
            ScheduleStore([_room("cc101"), _room("cc101")])

    def test_filter_schedule_sorted(self):
        store = _store(
            _item("late", start="14:00", end="15:00"),
            _item("early", start="08:00", end="09:00"),
            _item("tue", day=Weekday.TUESDAY),
        )
        assert [i.id for i in store.filter_schedule(Weekday.MONDAY)] == ["early", "late"]
        assert store.filter_schedule(Weekday.MONDAY, room_id="cc102") == []

    def test_makeup_bookings_newest_first(self):
        store = _store()
        store.add_schedule(_makeup(on=MONDAY))
        store.add_schedule(_makeup(on=MONDAY + timedelta(days=7)))
        bookings = store.makeup_bookings()
        assert [b.start_date for b in bookings] == [MONDAY + timedelta(days=7), MONDAY]

    def test_utilization_and_sections(self):
        store = _store(_item(), _item("s2", start="11:00", end="12:00"))
        assert store.utilization() == {"CC101": 2, "CC102": 0, "CC201": 0}
        assert store.sections() == ["BSCS 1-A"]

    def test_search_rooms(self):
        store = _store()
        assert [r.id for r in store.search_rooms("cc2")] == ["cc201"]
        assert len(store.search_rooms("comscie")) == 3
        assert len(store.search_rooms("")) == 3

    def test_snapshot_roundtrip(self, tmp_path):
        store = _store(_item())
        path = tmp_path / "state.json"
        store.to_snapshot().save_json(path)
        from models.snapshot import StateSnapshot
        loaded = ScheduleStore.from_snapshot(StateSnapshot.load_json(path))
        assert loaded.list_schedule() == store.list_schedule()
        assert loaded.list_rooms() == store.list_rooms()

    def test_from_snapshot_drops_unknown_rooms(self):
        from models.snapshot import StateSnapshot
        snapshot = StateSnapshot(rooms=[_room("cc101")], schedule=[_item(), _item("x", room_id="zz1")])
        assert [i.id for i in ScheduleStore.from_snapshot(snapshot).list_schedule()] == ["s1"]


# ─── INVARIANTE (ZUFALLSTEST) ─────────────────────────────────────────────────

class TestNoOverlapInvariant:
    def _manual_conflict(self, cand: RecurringCandidate, items: list[ScheduleItem]) -> bool:
        for it in items:
            if it.room_id != cand.room_id or it.day_of_week != cand.day_of_week:
                continue
            if cand.start_date > it.end_date or cand.end_date < it.start_date:
                continue
            if cand.start_time.minutes < it.end_time.minutes and cand.end_time.minutes > it.start_time.minutes:
                return True
        return False

    def test_random_candidates_match_manual_overlap(self):
        rng = random.Random(2026)
        store = _store(
            _item("a", start="09:00", end="10:30"),
            _item("b", start="13:00", end="14:00", start_date=date(2026, 3, 1), end_date=date(2026, 5, 31)),
            _item("c", room_id="cc102", day=Weekday.TUESDAY, start="10:00", end="12:00"),
        )
        fixed = store.list_schedule()
        detector = ConflictDetector()
        for _ in range(400):
            start = rng.randrange(7 * 60, 18 * 60, 15)
            length = rng.choice([15, 30, 45, 60, 90, 120])
            d1 = YEAR_START + timedelta(days=rng.randrange(0, 365))
            d2 = d1 + timedelta(days=rng.randrange(0, 120))
            cand = _recurring(
                room_id=rng.choice(["cc101", "cc102"]),
                day=rng.choice([Weekday.MONDAY, Weekday.TUESDAY]),
                start=f"{start // 60:02d}:{start % 60:02d}",
                end=f"{(start + length) // 60:02d}:{(start + length) % 60:02d}",
                start_date=d1,
                end_date=d2,
            )
            check = detector.check(cand, fixed)
            assert check.accepted == (not self._manual_conflict(cand, fixed))

    def test_accepted_bookings_never_overlap(self):
        rng = random.Random(99)
        store = _store()
        for _ in range(300):
            start = rng.randrange(7 * 60, 18 * 60, 30)
            length = rng.choice([30, 60, 90])
            d1 = YEAR_START + timedelta(days=rng.randrange(0, 300))
            cand = _recurring(
                room_id=rng.choice(["cc101", "cc102", "cc201"]),
                day=rng.choice(list(Weekday)),
                start=f"{start // 60:02d}:{start % 60:02d}",
                end=f"{(start + length) // 60:02d}:{(start + length) % 60:02d}",
                start_date=d1,
                end_date=d1 + timedelta(days=rng.randrange(0, 60)),
            )
            try:
                store.add_schedule(cand)
            except SchedulingConflictError:
                pass

        from analysis.schedule_validator import ScheduleValidator
        report = ScheduleValidator().validate(store.list_rooms(), store.list_schedule())
        assert report.is_valid, [v.description for v in report.violations]
        assert len(store) > 10

    def test_invalid_candidates_never_stored(self):
        rng = random.Random(7)
        store = _store(_item("a"))
        for _ in range(200):
            start = rng.randrange(8 * 60, 18 * 60, 15)
            d1 = YEAR_START + timedelta(days=rng.randrange(1, 300))
            if rng.random() < 0.5:
                end = start - rng.choice([0, 15, 60])
                d2 = d1 + timedelta(days=rng.randrange(0, 30))
                expected = InvalidTimeOrderError
            else:
                end = start + rng.choice([15, 30, 60])
                d2 = d1 - timedelta(days=rng.randrange(1, 30))
                expected = InvalidDateOrderError
            cand = _recurring(
                room_id=rng.choice(["cc101", "cc102"]),
                start=f"{start // 60:02d}:{start % 60:02d}",
                end=f"{end // 60:02d}:{end % 60:02d}",
                start_date=d1,
                end_date=d2,
            )
            with pytest.raises(expected):
                store.add_schedule(cand)
            assert len(store) == 1


# ─── ZEITKONTEXT ──────────────────────────────────────────────────────────────

class TestTimeContext:
    def test_from_datetime_weekday(self):
        ctx = TimeContext.from_datetime(datetime(2026, 10, 19, 9, 5, 59))
        assert ctx.day is Weekday.MONDAY
        assert str(ctx.time) == "09:05"
        assert ctx.date == MONDAY

    def test_sunday_falls_back_to_monday(self):
        ctx = TimeContext.from_datetime(datetime(2026, 10, 18, 10, 0))
        assert ctx.day is Weekday.MONDAY
        assert ctx.date == SUNDAY

    def test_sunday_closed_without_fallback(self):
        ctx = TimeContext.from_datetime(datetime(2026, 10, 18, 10, 0), sunday_fallback=None)
        assert ctx.is_closed
        store = _store(_item())
        assert store.stats(ctx)["occupied_now"] == 0

    def test_sunday_fallback_sees_monday_classes(self):
        ctx = TimeContext.from_datetime(datetime(2026, 10, 18, 9, 30))
        assert not _store(_item()).is_room_free("cc101", ctx)

    def test_provider_caches_within_interval(self):
        now = [datetime(2026, 10, 19, 9, 0)]
        tick = [0.0]
        provider = TimeContextProvider(
            clock=lambda: now[0], refresh_interval=60, monotonic=lambda: tick[0],
        )
        first = provider.current()
        now[0] = datetime(2026, 10, 19, 9, 0, 30)
        tick[0] = 30.0
        assert provider.current() is first
        now[0] = datetime(2026, 10, 19, 9, 1)
        tick[0] = 60.0
        assert str(provider.current().time) == "09:01"

    def test_add_months_clamps(self):
        assert add_months(date(2026, 10, 31), 4) == date(2027, 2, 28)
        assert add_months(date(2026, 1, 15), 4) == date(2026, 5, 15)

    def test_parse_moment(self):
        assert parse_moment("2026-10-19 09:30") == datetime(2026, 10, 19, 9, 30)
        assert parse_moment("2026-10-19T09:30") == datetime(2026, 10, 19, 9, 30)
        with pytest.raises(ValueError):
            parse_moment("19.10.2026")
