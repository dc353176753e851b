"""Datenmodell für einen Raum (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, Field


class Room(BaseModel):
    """Repräsentiert einen Raum im Gebäude. Nach dem Anlegen unveränderlich."""

    model_config = ConfigDict(frozen=True)

    id: str                          # "cc101"
    name: str                        # "CC101"
    capacity: int = Field(gt=0)      # Sitzplätze
    building: str                    # "Comscie Building"
    features: frozenset[str] = frozenset()
    image: str = ""                  # Bild-Referenz (opak)

    def matches(self, term: str) -> bool:
        """Suchtreffer auf Name oder Gebäude (Groß-/Kleinschreibung egal)."""
        needle = term.strip().lower()
        return needle in self.name.lower() or needle in self.building.lower()
