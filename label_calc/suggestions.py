"""Frequency ranked suggestions for free text form fields."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

DEFAULT_FIELDS = ("part_code", "batch_number", "notes")


@dataclass
class Suggestion:
    value: str
    frequency: int
    last_used: datetime


class SuggestionCache:
    """Per-field values ranked by how often and how recently they were used."""

    def __init__(self, fields: Iterable[str] = DEFAULT_FIELDS, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError("Capacity must be at least 1.")
        self.capacity = capacity
        self._entries: Dict[str, Dict[str, Suggestion]] = {field: {} for field in fields}

    def _field(self, field: str) -> Dict[str, Suggestion]:
        try:
            return self._entries[field]
        except KeyError as exc:
            raise KeyError(f"Unknown suggestion field '{field}'.") from exc

    def record(self, field: str, value: str, now: Optional[datetime] = None) -> None:
        entries = self._field(field)
        value = value.strip()
        if not value:
            return
        now = now or datetime.now()
        entry = entries.get(value)
        if entry is None:
            if len(entries) >= self.capacity:
                # Least frequent first, oldest among equals.
                victim = min(entries.values(), key=lambda s: (s.frequency, s.last_used))
                del entries[victim.value]
            entries[value] = Suggestion(value=value, frequency=1, last_used=now)
        else:
            entry.frequency += 1
            entry.last_used = now

    def suggest(self, field: str, text: str, limit: int = 10) -> List[Suggestion]:
        needle = text.strip().lower()
        matches = [
            entry for entry in self._field(field).values() if needle in entry.value.lower()
        ]
        matches.sort(
            key=lambda s: (
                not s.value.lower().startswith(needle),
                -s.frequency,
                -s.last_used.timestamp(),
            )
        )
        return matches[:limit]
