from __future__ import annotations

from datetime import date
from unittest import TestCase

from ..boundaries import Phase, ValidationError
from ..records import (
    NewSession,
    SessionRecord,
    loadRecord,
    newSessionFromJSON,
    parseDate,
    recordToJSON,
    saveRecord,
)


class ParseDateTests(TestCase):
    def test_valid(self) -> None:
        self.assertEqual(parseDate("2024-02-29"), date(2024, 2, 29))

    def test_invalid(self) -> None:
        """
        Only real calendar dates written as YYYY-MM-DD are accepted.
        """
        for bad in ["2023-02-29", "20240101", "2024-1-1", "2024-01-01T00:00", "", 20240101, None]:
            with self.assertRaises(ValidationError):
                parseDate(bad)

    def test_name(self) -> None:
        """
        The error names the field that was wrong.
        """
        with self.assertRaises(ValidationError) as raised:
            parseDate("tomorrow", "startDate")
        self.assertIn("startDate", str(raised.exception))


class NewSessionFromJSONTests(TestCase):
    def test_complete(self) -> None:
        self.assertEqual(
            newSessionFromJSON(
                {
                    "sessionType": "long_break",
                    "duration": 15,
                    "wasCompleted": False,
                    "date": "2024-01-01",
                }
            ),
            NewSession(Phase.LongBreak, 15, date(2024, 1, 1), False),
        )

    def test_completedByDefault(self) -> None:
        self.assertTrue(
            newSessionFromJSON(
                {"sessionType": "work", "duration": 25, "date": "2024-01-01"}
            ).wasCompleted
        )

    def test_rejected(self) -> None:
        valid = {"sessionType": "work", "duration": 25, "date": "2024-01-01"}
        for bad in [
            [],
            "work",
            {"duration": 25, "date": "2024-01-01"},
            {"sessionType": "work", "date": "2024-01-01"},
            {"sessionType": "work", "duration": 25},
            {**valid, "sessionType": "nap"},
            {**valid, "sessionType": ["work"]},
            {**valid, "duration": 0},
            {**valid, "duration": -25},
            {**valid, "duration": "25"},
            {**valid, "duration": 25.5},
            {**valid, "duration": True},
            {**valid, "date": "01/01/2024"},
            {**valid, "wasCompleted": "yes"},
        ]:
            with self.subTest(body=bad), self.assertRaises(ValidationError):
                newSessionFromJSON(bad)


class RecordTests(TestCase):
    record = SessionRecord(
        id="abc",
        sessionType=Phase.Work,
        duration=25,
        wasCompleted=True,
        date=date(2024, 1, 1),
        completedAt=1704067200.0,
    )

    def test_qualifies(self) -> None:
        """
        Only completed work sessions count towards goals and streaks.
        """
        self.assertTrue(self.record.qualifies)
        for sessionType in [Phase.Break, Phase.LongBreak]:
            self.assertFalse(
                SessionRecord("x", sessionType, 5, True, date(2024, 1, 1), 0).qualifies
            )
        self.assertFalse(
            SessionRecord("x", Phase.Work, 25, False, date(2024, 1, 1), 0).qualifies
        )

    def test_toJSON(self) -> None:
        self.assertEqual(
            recordToJSON(self.record),
            {
                "id": "abc",
                "sessionType": "work",
                "duration": 25,
                "wasCompleted": True,
                "date": "2024-01-01",
                "completedAt": "2024-01-01T00:00:00+00:00",
            },
        )

    def test_saveAndLoad(self) -> None:
        self.assertEqual(loadRecord(saveRecord(self.record)), self.record)
