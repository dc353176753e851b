from models.timeslot import ClockTime, Weekday
from models.room import Room
from models.schedule_item import ScheduleItem
from models.user import UserProfile, UserRole, UserStatus
from models.snapshot import StateSnapshot

__all__ = [
    "ClockTime",
    "Weekday",
    "Room",
    "ScheduleItem",
    "UserProfile",
    "UserRole",
    "UserStatus",
    "StateSnapshot",
]
