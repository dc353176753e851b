"""StateSnapshot: Räume, Belegung und Benutzer als JSON-Schnappschuss (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.room import Room
from models.schedule_item import ScheduleItem
from models.user import UserProfile


class StateSnapshot(BaseModel):
    """Kompletter Zustand einer Sitzung. Keine Dauerhaftigkeitsgarantie."""

    rooms: list[Room]
    schedule: list[ScheduleItem]
    users: list[UserProfile] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    def summary(self) -> str:
        """Kurze Übersicht über den Schnappschuss."""
        pending = sum(1 for u in self.users if u.status.value == "PENDING")
        lines = [
            f"Räume: {len(self.rooms)}",
            f"Termine: {len(self.schedule)}",
            f"Benutzer: {len(self.users)} ({pending} wartend)" if self.users else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den Schnappschuss als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "StateSnapshot":
        """Lädt einen Schnappschuss aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
