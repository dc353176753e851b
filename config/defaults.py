from datetime import date
from typing import Optional

from config.schema import AppConfig
from models.room import Room
from models.schedule_item import ScheduleItem
from models.timeslot import ClockTime, Weekday


CLASS_COLORS: list[str] = [
    "bg-blue-100 border-blue-300 text-blue-800",
    "bg-green-100 border-green-300 text-green-800",
    "bg-purple-100 border-purple-300 text-purple-800",
    "bg-yellow-100 border-yellow-300 text-yellow-800",
    "bg-red-100 border-red-300 text-red-800",
    "bg-indigo-100 border-indigo-300 text-indigo-800",
    "bg-orange-100 border-orange-300 text-orange-800",
    "bg-teal-100 border-teal-300 text-teal-800",
    "bg-pink-100 border-pink-300 text-pink-800",
    "bg-cyan-100 border-cyan-300 text-cyan-800",
]

SECTIONS: list[str] = [
    f"BSCS {year}-{block}"
    for year in range(1, 5)
    for block in "ABCD"
]

_BUILDING = "Comscie Building"
_IMG = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=400&q=80"


def default_app_config() -> AppConfig:
    """Standard-Konfiguration (ein Gebäude, Sonntag → Montag)."""
    return AppConfig()


def default_rooms() -> list[Room]:
    """Fester Raumkatalog des Gebäudes, drei Etagen à drei Räume.

    1. OG  CC101-CC103  Labore / Hörsaal
    2. OG  CC201-CC203  Seminarräume
    3. OG  CC301-CC303  Netzwerk-, Hardware-, Forschungslabor
    """
    catalog = [
        # (id, Kapazität, Ausstattung, Bild)
        ("cc101", 45, ["Computer Lab", "Smart Projector", "AC"], "1517694712202-14dd9538aa97"),
        ("cc102", 45, ["Computer Lab", "Whiteboard", "AC"], "1531482615713-2afd69097998"),
        ("cc103", 60, ["Lecture Hall", "Audio System", "AC"], "1515378791036-0648a3ef77b2"),
        ("cc201", 40, ["Lecture Room", "Projector", "Whiteboard"], "1516321318423-f06f85e504b3"),
        ("cc202", 40, ["Lecture Room", "Smart TV", "AC"], "1581091226825-a6a2a5aee158"),
        ("cc203", 35, ["Seminar Room", "Round Tables", "AC"], "1498050108023-c5249f4df085"),
        ("cc301", 30, ["Networking Lab", "Server Racks", "AC"], "1550751827-4bd374c3f58b"),
        ("cc302", 30, ["Hardware Lab", "Workbenches"], "1593642632823-8f785e67ac73"),
        ("cc303", 25, ["Research Lab", "Meeting Area", "AC"], "1526374965328-7f61d4dc18c5"),
    ]
    return [
        Room(
            id=room_id,
            name=room_id.upper(),
            capacity=capacity,
            building=_BUILDING,
            features=frozenset(features),
            image=_IMG.format(photo),
        )
        for room_id, capacity, features, photo in catalog
    ]


def initial_schedule(year: Optional[int] = None) -> list[ScheduleItem]:
    """Demo-Belegung; Gültigkeit = gesamtes Kalenderjahr `year` (Default: aktuelles)."""
    year = year or date.today().year
    sem_start = date(year, 1, 1)
    sem_end = date(year, 12, 31)

    rows = [
        ("s1", "cc101", "Intro to Programming", "BSCS 1-A", "Dr. Smith",
         Weekday.MONDAY, "09:00", "10:30", 0),
        ("s2", "cc101", "Data Structures", "BSCS 2-B", "Prof. Johnson",
         Weekday.MONDAY, "11:00", "12:30", 1),
        ("s3", "cc201", "Web Development", "BSCS 3-A", "Dr. Emily",
         Weekday.TUESDAY, "14:00", "16:00", 2),
        ("s4", "cc301", "Computer Networks", "BSCS 3-C", "Mr. Brown",
         Weekday.WEDNESDAY, "09:00", "11:00", 3),
        ("s5", "cc102", "Database Systems", "BSCS 2-A", "Prof. Davis",
         Weekday.TUESDAY, "10:00", "12:00", 4),
        ("s6", "cc202", "Software Engineering", "BSCS 4-A", "Dr. Wilson",
         Weekday.THURSDAY, "13:00", "14:30", 5),
        ("s7", "cc303", "Thesis Defense", "BSCS 4-D", "Panel A",
         Weekday.FRIDAY, "09:00", "12:00", 6),
        ("s8", "cc103", "Intro to CS", "BSCS 1-C", "Prof. Allen",
         Weekday.WEDNESDAY, "13:00", "15:00", 0),
        ("s9", "cc201", "Advanced Programming (Makeup)", "BSCS 3-B", "Dr. Smith",
         Weekday.SATURDAY, "08:00", "12:00", 7),
    ]
    return [
        ScheduleItem(
            id=item_id,
            room_id=room_id,
            subject=subject,
            section=section,
            teacher=teacher,
            day_of_week=day,
            start_time=ClockTime.parse(start),
            end_time=ClockTime.parse(end),
            start_date=sem_start,
            end_date=sem_end,
            color=CLASS_COLORS[color_idx],
        )
        for item_id, room_id, subject, section, teacher, day, start, end, color_idx in rows
    ]
