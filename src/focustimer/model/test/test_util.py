from datetime import date
from unittest import TestCase
from zoneinfo import ZoneInfo

from twisted.internet.task import Clock

from ..boundaries import CompletionEvent, Phase
from ..records import NewSession
from ..util import (
    completionMessage,
    formatCountdown,
    intervalSummary,
    localDate,
    todayFrom,
    toneFrequency,
)


class UtilTests(TestCase):
    def test_formatCountdown(self) -> None:
        self.assertEqual(formatCountdown(1500), "25:00")
        self.assertEqual(formatCountdown(59), "00:59")
        self.assertEqual(formatCountdown(3600), "60:00")

    def test_intervalSummary(self) -> None:
        self.assertEqual(intervalSummary(25 * 60), "25 minutes")
        self.assertEqual(intervalSummary(60), "1 minute")
        self.assertEqual(intervalSummary(61), "1 minute and 1 second")
        self.assertEqual(intervalSummary(3600 + 120 + 5), "1 hour, 2 minutes and 5 seconds")
        self.assertEqual(intervalSummary(0), "0 seconds")

    def test_localDate(self) -> None:
        """
        Dates are computed in the user's own time zone.
        """
        self.assertEqual(localDate(0, ZoneInfo("UTC")), date(1970, 1, 1))
        self.assertEqual(
            localDate(0, ZoneInfo("America/Los_Angeles")), date(1969, 12, 31)
        )

    def test_todayFrom(self) -> None:
        clock = Clock()
        today = todayFrom(clock, ZoneInfo("UTC"))
        self.assertEqual(today(), date(1970, 1, 1))
        clock.advance(86400)
        self.assertEqual(today(), date(1970, 1, 2))

    def test_completionMessage(self) -> None:
        day = date(2024, 1, 1)
        self.assertEqual(
            completionMessage(
                CompletionEvent(NewSession(Phase.Work, 25, day), Phase.Break)
            ),
            "Work session complete! Time for a short break.",
        )
        self.assertEqual(
            completionMessage(
                CompletionEvent(NewSession(Phase.Work, 25, day), Phase.LongBreak)
            ),
            "Work session complete! Time for a long break.",
        )
        finishedBreak = CompletionEvent(NewSession(Phase.LongBreak, 15, day), Phase.Work)
        self.assertEqual(
            completionMessage(finishedBreak),
            "Break time's over! Ready for another focus session?",
        )
        self.assertEqual(toneFrequency(finishedBreak), 600)
        self.assertEqual(
            toneFrequency(CompletionEvent(NewSession(Phase.Work, 25, day), Phase.Break)),
            800,
        )
