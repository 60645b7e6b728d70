"""Tests for the offline keyword recognizer."""

from datetime import date

import pytest

from tablebot.entity_extractor import extract_party_size, extract_time
from tablebot.nlp_service import KeywordRecognizer

TODAY = date(2026, 10, 19)


@pytest.fixture
def nlp() -> KeywordRecognizer:
    return KeywordRecognizer(today=lambda: TODAY)


class TestKeywordRecognizer:
    def test_empty_text_has_no_intent(self, nlp) -> None:
        assert nlp.parse("") is None
        assert nlp.parse("   ") is None

    def test_reservation_with_entities(self, nlp) -> None:
        result = nlp.parse("Can I book a table for 4 people at 7pm?")
        assert result.label == "ReserveTable"
        assert result.confidence > 0.5
        assert result.entities["AmountPeople"] == ["4"]
        assert result.entities["datetime"] == [{"type": "time", "timex": ["T19:00"]}]
        assert extract_party_size(result.entities) == 4
        assert extract_time(result.entities, TODAY) == "October 19 at 07:00 PM"

    def test_dated_reservation_timex(self, nlp) -> None:
        result = nlp.parse("reservation tomorrow at 8.30pm")
        assert result.entities["datetime"][0]["timex"] == ["2026-10-20T20:30"]

    def test_clock_time_is_not_a_party_size(self, nlp) -> None:
        result = nlp.parse("book a table for 8.30pm")
        assert result.label == "ReserveTable"
        assert "AmountPeople" not in result.entities
        assert result.entities["datetime"] == [{"type": "time", "timex": ["T20:30"]}]

    def test_specialties(self, nlp) -> None:
        result = nlp.parse("What are today's specials?")
        assert result.label == "TodaysSpeciality"
        assert result.confidence > 0.5

    def test_unmatched_text_is_none_label(self, nlp) -> None:
        result = nlp.parse("Do you have parking?")
        assert result.label == "None"
        assert result.entities == {}

    @pytest.mark.asyncio
    async def test_recognize_is_async_parse(self, nlp) -> None:
        assert (await nlp.recognize("book a table")).label == "ReserveTable"
