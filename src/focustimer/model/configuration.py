# -*- test-case-name: focustimer.model.test.test_configuration -*-
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date
from typing import Mapping

from .boundaries import ConfigurationError, Phase
from .schema import SavedAppState, SavedConfiguration

CYCLE_LENGTH = 4
"""
Every fourth work session of the day is followed by a long break rather than
a short one.
"""


@dataclass(frozen=True)
class Bounds:
    minimum: int
    maximum: int

    def check(self, name: str, value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} must be a whole number")
        if not (self.minimum <= value <= self.maximum):
            raise ConfigurationError(
                f"{name} must be between {self.minimum} and {self.maximum}"
            )
        return value


limits: dict[str, Bounds] = {
    "workMinutes": Bounds(1, 60),
    "breakMinutes": Bounds(1, 30),
    "longBreakMinutes": Bounds(5, 60),
    "dailyGoal": Bounds(1, 20),
}


@dataclass(frozen=True)
class TimerConfiguration:
    """
    The user's timer preferences.  Never edited in place; a new one replaces
    the old wholesale.
    """

    workMinutes: int = 25
    breakMinutes: int = 5
    longBreakMinutes: int = 15
    dailyGoal: int = 8
    soundEnabled: bool = True
    autoStart: bool = False
    """
    Should the next phase begin counting down as soon as the previous one
    finishes, rather than waiting for the user to start it?
    """

    def minutesFor(self, phase: Phase) -> int:
        return {
            Phase.Work: self.workMinutes,
            Phase.Break: self.breakMinutes,
            Phase.LongBreak: self.longBreakMinutes,
        }[phase]

    def secondsFor(self, phase: Phase) -> int:
        return self.minutesFor(phase) * 60

    def validated(self) -> TimerConfiguration:
        """
        @return: C{self}, if every setting is in range.

        @raise ConfigurationError: otherwise.
        """
        for name, bounds in limits.items():
            bounds.check(name, getattr(self, name))
        for name in ("soundEnabled", "autoStart"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be true or false")
        return self

    def toJSON(self) -> SavedConfiguration:
        return {
            "workMinutes": self.workMinutes,
            "breakMinutes": self.breakMinutes,
            "longBreakMinutes": self.longBreakMinutes,
            "dailyGoal": self.dailyGoal,
            "soundEnabled": self.soundEnabled,
            "autoStart": self.autoStart,
        }


def configurationFromJSON(saved: Mapping[str, object]) -> TimerConfiguration:
    """
    Build a configuration from saved or user-supplied values, using defaults
    for anything missing.

    @raise ConfigurationError: if any supplied value is out of range.
    """
    known = {each.name for each in fields(TimerConfiguration)}
    unknown = set(saved) - known
    if unknown:
        raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")
    return TimerConfiguration(**saved).validated()  # type:ignore[arg-type]


_truthy = {"1", "true", "yes", "on"}
_falsy = {"0", "false", "no", "off"}


def updatedFromText(
    configuration: TimerConfiguration, name: str, text: str
) -> TimerConfiguration:
    """
    Apply a single setting typed by the user, e.g. C{("workMinutes", "30")}.

    @raise ConfigurationError: if the name is unknown or the value does not
        parse or is out of range.
    """
    if name in limits:
        try:
            value: object = int(text)
        except ValueError:
            raise ConfigurationError(f"{name} must be a whole number")
    elif name in ("soundEnabled", "autoStart"):
        lowered = text.lower()
        if lowered in _truthy:
            value = True
        elif lowered in _falsy:
            value = False
        else:
            raise ConfigurationError(f"{name} must be on or off")
    else:
        raise ConfigurationError(f"unknown setting {name!r}")
    return replace(configuration, **{name: value}).validated()


@dataclass
class AppState:
    """
    Everything about the timer that outlives a single run of the program.
    """

    date: date
    "The last calendar day on which the counters were updated."

    configuration: TimerConfiguration = field(default_factory=TimerConfiguration)
    completedWorkSessionsToday: int = 0
    totalCompletedToday: int = 0

    def rolloverTo(self, today: date) -> bool:
        """
        If C{today} is a different day from the saved one, zero the daily
        counters.

        @return: whether the counters were reset.
        """
        if today == self.date:
            return False
        self.date = today
        self.completedWorkSessionsToday = 0
        self.totalCompletedToday = 0
        return True

    def toJSON(self) -> SavedAppState:
        return {
            "configuration": self.configuration.toJSON(),
            "date": self.date.isoformat(),
            "completedWorkSessionsToday": self.completedWorkSessionsToday,
            "totalCompletedToday": self.totalCompletedToday,
        }


def appStateFromJSON(saved: SavedAppState) -> AppState:
    """
    Load an L{AppState}.

    @raise ConfigurationError: if the saved configuration is out of range.
    @raise KeyError: if the document is missing required keys.
    """
    return AppState(
        date=date.fromisoformat(saved["date"]),
        configuration=configurationFromJSON(saved["configuration"]),
        completedWorkSessionsToday=int(saved["completedWorkSessionsToday"]),
        totalCompletedToday=int(saved["totalCompletedToday"]),
    )
