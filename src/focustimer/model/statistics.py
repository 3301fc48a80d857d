# -*- test-case-name: focustimer.model.test.test_statistics -*-
"""
Statistics derived from a collection of L{SessionRecord}s.

Everything here is a pure function.  Windows are anchored on a C{today}
argument, which callers compute at the moment they ask, so nothing is cached
across a change of date.

A I{qualifying} session is a completed work session; those are what count
towards streaks, goals and trends.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from fractions import Fraction
from math import floor
from typing import Iterable, Sequence

from dateutil.relativedelta import SU, relativedelta

from .boundaries import Phase
from .records import SessionRecord

CONSISTENCY_WINDOW = 30
MOVING_AVERAGE_WINDOW = 7
WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def roundHalfUp(value: Fraction | int, places: int = 0) -> Fraction:
    """
    Round a non-negative rational to C{places} decimal places, with halves
    rounding away from zero.
    """
    scale = 10**places
    return Fraction(floor(Fraction(value) * scale + Fraction(1, 2)), scale)


def percent(part: int, whole: int) -> int:
    """
    C{part} as a whole-number percentage of C{whole}, or 0 if C{whole} is 0.
    """
    if whole == 0:
        return 0
    return int(roundHalfUp(Fraction(100 * part, whole)))


def qualifying(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    return [each for each in records if each.qualifies]


def weekStart(day: date) -> date:
    """
    The Sunday on or before C{day}.
    """
    result: date = day + relativedelta(weekday=SU(-1))
    return result


def daysBetween(startDate: date, endDate: date) -> list[date]:
    """
    Every day from C{startDate} to C{endDate}, inclusive.
    """
    return [
        startDate + timedelta(days=offset)
        for offset in range((endDate - startDate).days + 1)
    ]


@dataclass(frozen=True)
class DayCount:
    """
    How much qualifying work happened on one day.
    """

    date: date
    sessions: int
    minutes: int


def dailyCounts(
    records: Iterable[SessionRecord], startDate: date, endDate: date
) -> list[DayCount]:
    """
    One L{DayCount} for every day in the window, including empty days, in
    chronological order.
    """
    sessions: Counter[date] = Counter()
    minutes: Counter[date] = Counter()
    for record in qualifying(records):
        sessions[record.date] += 1
        minutes[record.date] += record.duration
    return [
        DayCount(day, sessions[day], minutes[day])
        for day in daysBetween(startDate, endDate)
    ]


def weeklyCounts(records: Iterable[SessionRecord], today: date) -> list[DayCount]:
    """
    Sunday through Saturday of the week containing C{today}.
    """
    start = weekStart(today)
    return dailyCounts(records, start, start + timedelta(days=6))


def monthlyCounts(records: Iterable[SessionRecord], today: date) -> list[DayCount]:
    """
    The thirty days ending with C{today}.
    """
    return dailyCounts(
        records, today - timedelta(days=CONSISTENCY_WINDOW - 1), today
    )


def dailyStreak(records: Iterable[SessionRecord], today: date) -> int:
    """
    The number of consecutive days, ending today, with at least one
    qualifying session.

    A day that hasn't produced a session yet doesn't break the streak: if
    today is empty the count starts from yesterday instead.  This is
    intentional; do not change it to return 0 until the first session of the
    day, which would show every streak as broken each morning.
    """
    activeDays = {record.date for record in qualifying(records)}
    day = today if today in activeDays else today - timedelta(days=1)
    streak = 0
    while day in activeDays:
        streak += 1
        day -= timedelta(days=1)
    return streak


def bestDay(counts: Sequence[DayCount]) -> DayCount | None:
    """
    The day in C{counts} with the most sessions; on a tie, the earliest.
    """
    best: DayCount | None = None
    for each in counts:
        if best is None or each.sessions > best.sessions:
            best = each
    return best


def movingAverage(
    counts: Sequence[DayCount], window: int = MOVING_AVERAGE_WINDOW
) -> list[float]:
    """
    For each day, the mean number of sessions over that day and the
    preceding days, up to C{window} days in total, to one decimal place.
    """
    result = []
    for index in range(len(counts)):
        trailing = counts[max(0, index - window + 1) : index + 1]
        mean = Fraction(sum(each.sessions for each in trailing), len(trailing))
        result.append(float(roundHalfUp(mean, 1)))
    return result


def consistencyPercentage(records: Iterable[SessionRecord], today: date) -> int:
    """
    Percentage of the last thirty days (today included) with at least one
    qualifying session.
    """
    activeDays = sum(
        1 for each in monthlyCounts(records, today) if each.sessions > 0
    )
    return percent(activeDays, CONSISTENCY_WINDOW)


def completionRate(records: Iterable[SessionRecord]) -> int:
    """
    Percentage of work sessions that were completed rather than skipped.
    """
    work = [each for each in records if each.sessionType is Phase.Work]
    return percent(sum(1 for each in work if each.wasCompleted), len(work))


def averageSessionLength(records: Iterable[SessionRecord]) -> int:
    """
    Mean length of the qualifying sessions, in whole minutes.
    """
    sessions = qualifying(records)
    if not sessions:
        return 0
    total = sum(each.duration for each in sessions)
    return int(roundHalfUp(Fraction(total, len(sessions))))


def goalPercent(completed: int, dailyGoal: int) -> int:
    return min(100, percent(completed, dailyGoal))


def goalProgress(
    records: Iterable[SessionRecord], today: date, dailyGoal: int
) -> int:
    """
    Percentage of C{dailyGoal} achieved today, capped at 100.
    """
    return goalPercent(
        sum(1 for each in qualifying(records) if each.date == today), dailyGoal
    )


def dailyTrend(records: Iterable[SessionRecord], today: date) -> int:
    """
    Today's qualifying sessions minus yesterday's.
    """
    yesterday, now = dailyCounts(records, today - timedelta(days=1), today)
    return now.sessions - yesterday.sessions


def weeklyTrend(records: Iterable[SessionRecord], today: date) -> int:
    """
    This week's qualifying sessions minus last week's.
    """
    records = list(records)
    thisWeek = sum(each.sessions for each in weeklyCounts(records, today))
    lastWeek = sum(
        each.sessions
        for each in weeklyCounts(records, today - timedelta(days=7))
    )
    return thisWeek - lastWeek


def bestWeekday(records: Iterable[SessionRecord]) -> tuple[str, int]:
    """
    The day of the week with the most qualifying sessions, and how many.
    Weeks start on Sunday, which also wins a tie.
    """
    # date.weekday() counts Monday as 0
    perDay = Counter((each.date.weekday() + 1) % 7 for each in qualifying(records))
    best = max(range(7), key=lambda index: (perDay[index], -index))
    return WEEKDAY_NAMES[best], perDay[best]


def hoursByType(records: Iterable[SessionRecord]) -> dict[Phase, float]:
    """
    Hours spent in completed sessions of each type, to one decimal place.
    """
    minutes: Counter[Phase] = Counter()
    for each in records:
        if each.wasCompleted:
            minutes[each.sessionType] += each.duration
    return {
        phase: float(roundHalfUp(Fraction(minutes[phase], 60), 1))
        for phase in Phase
    }


@dataclass(frozen=True)
class Insights:
    """
    A summary of recent productivity, for display.
    """

    today: int
    dailyGoal: int
    goalProgress: int
    streak: int
    dailyTrend: int
    weeklyTrend: int
    averageSessionLength: int
    consistency: int
    completionRate: int
    bestDay: DayCount | None
    bestWeekday: tuple[str, int]
    totalHours: float
    hoursByType: dict[Phase, float]
    weekly: list[DayCount]
    "Sunday through Saturday of the current week."
    monthly: list[DayCount]
    "The thirty days ending today."
    movingAverage: list[float]
    "The trailing seven-day average for each day of C{monthly}."


def summarize(
    records: Iterable[SessionRecord], today: date, dailyGoal: int
) -> Insights:
    """
    Compute all the statistics for the records of the last month.
    """
    records = list(records)
    month = monthlyCounts(records, today)
    todayCount = month[-1].sessions
    return Insights(
        today=todayCount,
        dailyGoal=dailyGoal,
        goalProgress=goalPercent(todayCount, dailyGoal),
        streak=dailyStreak(records, today),
        dailyTrend=dailyTrend(records, today),
        weeklyTrend=weeklyTrend(records, today),
        averageSessionLength=averageSessionLength(records),
        consistency=consistencyPercentage(records, today),
        completionRate=completionRate(records),
        bestDay=bestDay(month),
        bestWeekday=bestWeekday(records),
        totalHours=float(
            roundHalfUp(Fraction(sum(each.minutes for each in month), 60), 1)
        ),
        hoursByType=hoursByType(records),
        weekly=weeklyCounts(records, today),
        monthly=month,
        movingAverage=movingAverage(month),
    )
