# -*- test-case-name: focustimer.model.test.test_util -*-
from __future__ import annotations

from datetime import date
from typing import Callable
from zoneinfo import ZoneInfo

from datetype import DateTime
from dateutil.relativedelta import relativedelta
from twisted.internet.interfaces import IReactorTime

from .boundaries import CompletionEvent, Phase


def localDate(timestamp: float, zone: ZoneInfo) -> date:
    """
    The calendar date in C{zone} at the given POSIX timestamp.
    """
    moment: DateTime[ZoneInfo] = DateTime.fromtimestamp(timestamp, zone)
    return moment.date()


def todayFrom(clock: IReactorTime, zone: ZoneInfo) -> Callable[[], date]:
    """
    Make a function that returns today's date according to C{clock}.
    """
    return lambda: localDate(clock.seconds(), zone)


def formatCountdown(seconds: int) -> str:
    """
    Format a number of seconds as C{MM:SS}.
    """
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def intervalSummary(seconds: int) -> str:
    """
    Produce a human-readable summary for a number of seconds.
    """
    delta = relativedelta(seconds=seconds).normalized()
    segments = [
        "%d %s" % (value, attr if value > 1 else attr[:-1])
        for attr in [
            "days",
            "hours",
            "minutes",
            "seconds",
        ]
        if (value := getattr(delta, attr))
    ]
    if not segments:
        segments = ["0 seconds"]
    if len(segments) > 1:
        segments[-2:] = [f"{segments[-2]} and {segments[-1]}"]
    return ", ".join(segments)


def completionMessage(event: CompletionEvent) -> str:
    """
    What to tell the user when a phase finishes.
    """
    if event.finishedWork:
        size = "long" if event.nextPhase is Phase.LongBreak else "short"
        return f"Work session complete! Time for a {size} break."
    return "Break time's over! Ready for another focus session?"


def toneFrequency(event: CompletionEvent) -> int:
    """
    Pitch, in Hz, of the chime for a finished phase: higher when a break is
    starting, lower when it is time to get back to work.
    """
    return 800 if event.finishedWork else 600
