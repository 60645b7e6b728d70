"""Offline keyword recognizer producing LUIS-shaped intent results."""
import re
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .entity_extractor import PARTY_SIZE_ENTITY, TIME_ENTITY, find_clock, find_date, parse_party_size
from .schemas import IntentResult
from .services.recognizer import IntentRecognizer

SPECIALTIES_LABEL = "TodaysSpeciality"
RESERVATION_LABEL = "ReserveTable"
NONE_LABEL = "None"


class KeywordRecognizer(IntentRecognizer):
    def __init__(self, today: Callable[[], date] = date.today):
        self.today = today
        self.intent_keywords = {
            SPECIALTIES_LABEL: ["special", "specials", "speciality", "specialty", "specialties",
                                "dish of the day", "today's menu", "todays menu"],
            RESERVATION_LABEL: ["book", "booking", "reserve", "reservation", "table for"],
        }

    async def recognize(self, text: str) -> Optional[IntentResult]:
        return self.parse(text)

    def parse(self, text: str) -> Optional[IntentResult]:
        """Classify the text and pull out party size and time entities"""
        lowered = (text or "").lower().strip()
        if not lowered:
            return None

        label, confidence = NONE_LABEL, 0.9
        best = 0
        for intent, keywords in self.intent_keywords.items():
            hits = sum(1 for k in keywords if re.search(rf"\b{re.escape(k)}\b", lowered))
            if hits > best:
                label, best = intent, hits
                # One keyword is a decent signal, two or more a strong one
                confidence = 0.95 if hits > 1 else 0.8

        return IntentResult(label=label, confidence=confidence, entities=self._entities(lowered))

    def _entities(self, text: str) -> Dict[str, List[Any]]:
        entities: Dict[str, List[Any]] = {}
        size = parse_party_size(text)
        if size is not None:
            entities[PARTY_SIZE_ENTITY] = [str(size)]
        timex = self._timex(text)
        if timex:
            entities[TIME_ENTITY] = [{"type": "datetime" if "-" in timex else "time", "timex": [timex]}]
        return entities

    def _timex(self, text: str) -> Optional[str]:
        day = find_date(text, self.today())
        clock = find_clock(text)
        if clock is None:
            return day.isoformat() if day else None
        clock_part = f"T{clock.hour:02d}:{clock.minute:02d}"
        return f"{day.isoformat()}{clock_part}" if day else clock_part
