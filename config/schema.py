from pydantic import BaseModel, Field, field_validator
from typing import Optional

from models.timeslot import Weekday


# ─── KI-ASSISTENT ───

class AssistantConfig(BaseModel):
    """Anbindung an den externen Chat-Assistenten (Gemini REST-API)."""
    # Assistent global an/aus
    enabled: bool = Field(True,
        description="Chat-Assistent aktiv")
    # Modellname für generateContent
    model: str = Field("gemini-2.5-flash",
        description="Modellname")
    # Basis-URL der API; {model} wird ersetzt
    api_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        description="Endpunkt (mit Platzhalter {model})")
    # Name der Umgebungsvariable mit dem API-Schlüssel
    api_key_env: str = Field("API_KEY",
        description="Umgebungsvariable für den API-Schlüssel")
    # Netzwerk-Timeout in Sekunden
    timeout_seconds: float = Field(20.0, gt=0, le=120,
        description="HTTP-Timeout (Sekunden)")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Raumbelegung."""
    # Name des Gebäudes (nur Anzeige)
    building_name: str = Field("Comscie Building",
        description="Name des Gebäudes")
    # Gemeinsamer Admin-Passkey (keine echte Authentifizierung)
    admin_passkey: str = Field("admin123",
        description="Admin-Passkey")
    # Ersatz-Wochentag, wenn die Uhr Sonntag zeigt.
    # None = Gebäude sonntags geschlossen (kein Termin aktiv).
    sunday_fallback: Optional[Weekday] = Field(Weekday.MONDAY,
        description="Ersatz-Wochentag für Sonntag (null = geschlossen)")
    # Aktualisierungsintervall der Live-Anzeige
    refresh_interval_seconds: int = Field(60, ge=1, le=3600,
        description="Aktualisierung der Live-Belegung (Sekunden)")
    # Default-Laufzeit neuer Kurse ab heute
    semester_months: int = Field(4, ge=1, le=12,
        description="Default-Laufzeit neuer Kurse (Monate)")
    # Markierung für Nachholtermine im Fach-Titel
    makeup_marker: str = Field("(Makeup)",
        description="Markierung für Nachholtermine")
    # Reservierte Farbe für Nachholtermine
    makeup_color: str = Field("bg-pink-100 border-pink-300 text-pink-800",
        description="Farbe für Nachholtermine")
    # Farbpalette für reguläre Kurse (Zufallsauswahl)
    class_colors: list[str] = Field(
        default_factory=lambda: list(_default_palette()),
        description="Farbpalette für reguläre Kurse")
    # Pfad für den JSON-Schnappschuss der CLI
    state_path: str = Field("output/roomsync_state.json",
        description="JSON-Schnappschuss (Räume, Termine, Benutzer)")
    # Chat-Assistent
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)

    @field_validator("class_colors")
    @classmethod
    def _palette_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("class_colors darf nicht leer sein.")
        return v

    @field_validator("makeup_marker")
    @classmethod
    def _marker_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("makeup_marker darf nicht leer sein.")
        return v.strip()


def _default_palette() -> list[str]:
    from config.defaults import CLASS_COLORS
    return CLASS_COLORS
