"""Chat-Assistent: leitet Fragen samt Raum-/Terminübersicht an ein externes LLM.

Schlägt nie nach außen fehl: fehlende Konfiguration, Netzwerk- und
API-Fehler werden zu einer Entschuldigung als Antworttext. Der Assistent
liest nur einen Schnappschuss und verändert keine Belegungsdaten.
"""

import json
import logging
import os
from typing import Optional

import requests

from config.schema import AssistantConfig
from models.room import Room
from models.schedule_item import ScheduleItem

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MSG = "Der KI-Assistent ist nicht konfiguriert (API-Schlüssel fehlt)."
UNAVAILABLE_MSG = (
    "Entschuldigung, der Assistent ist gerade nicht erreichbar. "
    "Bitte später erneut versuchen."
)
EMPTY_ANSWER_MSG = "Diese Anfrage konnte ich leider nicht verarbeiten."

GREETING = (
    "Hallo! Ich bin RoomSync AI. Frag mich nach freien Räumen, "
    "Stundenplänen von Lehrkräften oder der Ausstattung der Räume."
)

_SYSTEM_PROMPT = """\
You are RoomSync AI, a helpful assistant for a university classroom scheduling app.

Here is the current database of rooms and schedules in JSON format:
{context}

Rules:
1. Answer users' questions about where a class is, if a room is free, or who teaches a subject.
2. If a user asks to book a room, politely inform them that you cannot perform actions, only the Admin can via the dashboard.
3. Be concise and friendly.
4. If the data doesn't contain the answer, say you don't know based on the current schedule.
"""


def build_context(rooms: list[Room], schedule: list[ScheduleItem]) -> dict:
    """Reduzierte Sicht auf Räume und Termine für den Prompt."""
    names = {r.id: r.name for r in rooms}
    return {
        "rooms": [
            {"id": r.id, "name": r.name, "capacity": r.capacity, "building": r.building}
            for r in rooms
        ],
        "schedule": [
            {
                "subject": s.subject,
                "teacher": s.teacher,
                "room": names.get(s.room_id, s.room_id),
                "day": s.day_of_week.value,
                "time": f"{s.start_time}-{s.end_time}",
            }
            for s in schedule
        ],
    }


class AssistantClient:
    """Dünner HTTP-Client für die Gemini-generateContent-API."""

    def __init__(
        self,
        config: AssistantConfig,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self._api_key = api_key if api_key is not None else os.environ.get(config.api_key_env)
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return self.config.enabled and bool(self._api_key)

    def ask(self, question: str, rooms: list[Room], schedule: list[ScheduleItem]) -> str:
        """Stellt eine Frage. Gibt IMMER einen Text zurück."""
        if not self.is_configured:
            return NOT_CONFIGURED_MSG
        if not question.strip():
            return EMPTY_ANSWER_MSG

        context = json.dumps(build_context(rooms, schedule), ensure_ascii=False)
        payload = {
            "systemInstruction": {"parts": [{"text": _SYSTEM_PROMPT.format(context=context)}]},
            "contents": [{"role": "user", "parts": [{"text": question}]}],
            # Niedrige Latenz bevorzugt
            "generationConfig": {"thinkingConfig": {"thinkingBudget": 0}},
        }
        url = self.config.api_url.format(model=self.config.model)
        headers = {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}

        try:
            response = self._session.post(
                url, json=payload, headers=headers, timeout=self.config.timeout_seconds
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Assistent nicht erreichbar: {e}")
            return UNAVAILABLE_MSG

        if response.status_code != 200:
            logger.error(f"Assistent-API-Fehler: {response.status_code} - {response.text[:200]}")
            return UNAVAILABLE_MSG

        try:
            text = self._extract_text(response.json())
        except ValueError as e:
            logger.error(f"Assistent-Antwort nicht lesbar: {e}")
            return UNAVAILABLE_MSG
        return text or EMPTY_ANSWER_MSG

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Text aller Parts des ersten Kandidaten."""
        def expect(value, kind, what):
            if not isinstance(value, kind):
                raise ValueError(f"unerwartetes Format für {what}: {type(value).__name__}")
            return value

        expect(data, dict, "Antwort")
        candidates = expect(data.get("candidates") or [], list, "candidates")
        if not candidates:
            return ""
        candidate = expect(candidates[0], dict, "candidates[0]")
        content = expect(candidate.get("content") or {}, dict, "content")
        parts = expect(content.get("parts") or [], list, "parts")
        texts = []
        for part in parts:
            text = expect(part, dict, "part").get("text") or ""
            texts.append(expect(text, str, "text"))
        return "".join(texts).strip()
