from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol, Sequence, TypeAlias

if TYPE_CHECKING:
    from twisted.internet.defer import Deferred
    from twisted.python.failure import Failure

    from .configuration import AppState, TimerConfiguration
    from .engine import TimerEngine
    from .records import NewSession, SessionRecord


class Phase(Enum):
    """
    The countdown mode the timer is currently in.
    """

    label: str

    Work = "work"
    Break = "break"
    LongBreak = "long_break"


Phase.Work.label = "focus"
Phase.Break.label = "short break"
Phase.LongBreak.label = "long break"


class FocusTimerError(Exception):
    """
    Base class for all errors raised deliberately by this package.
    """


class ValidationError(FocusTimerError):
    """
    A session payload was malformed and has been rejected.
    """


class PersistenceError(FocusTimerError):
    """
    A store could not be read from or written to.
    """


class ConfigurationError(FocusTimerError):
    """
    A timer setting was outside of its permitted range.
    """


@dataclass(frozen=True)
class CompletionEvent:
    """
    A phase counted all the way down to zero.
    """

    session: NewSession
    """
    The record that should be persisted for the phase that just finished.
    """

    nextPhase: Phase
    "The phase the engine moved into."

    @property
    def finishedWork(self) -> bool:
        """
        Was the phase that just finished a work phase?  Presenters use this to
        pick a tone and a message.
        """
        return self.session.sessionType is Phase.Work


class SessionStore(Protocol):
    """
    Persistence for finished sessions.
    """

    def createSession(
        self, newSession: NewSession
    ) -> SessionRecord | Deferred[SessionRecord]:
        """
        Persist C{newSession}, returning the stored record.

        @raise ValidationError: if the session is malformed.
        @raise PersistenceError: if the record could not be written.
        """

    def querySessionsByDateRange(
        self, startDate: date, endDate: date
    ) -> Sequence[SessionRecord]:
        """
        All records whose date falls between C{startDate} and C{endDate}
        inclusive, most recently completed first.
        """

    def querySessionsByDate(self, day: date) -> Sequence[SessionRecord]:
        """
        All records for a single day.
        """

    def querySessionsLast30Days(self) -> Sequence[SessionRecord]:
        """
        Records from thirty days ago through today.
        """

    def querySessionsThisWeek(self) -> Sequence[SessionRecord]:
        """
        Records from the most recent Sunday through today.
        """


class PreferencesStore(Protocol):
    """
    Somewhere to keep an L{AppState} between runs.
    """

    def saveAppState(self, appState: AppState) -> None:
        """
        Overwrite the saved state with C{appState}.

        @raise PersistenceError: if it could not be saved.
        """


class TickSource(Protocol):
    """
    Something that calls a function once per second while it is running.
    """

    def startTicking(self, tick: Callable[[], None]) -> None:
        """
        Begin calling C{tick} every second.  No-op if already ticking.
        """

    def stopTicking(self) -> None:
        """
        Stop calling the tick function.  No-op if not ticking.
        """


class UIEventListener(Protocol):
    """
    The presentation layer consumes engine state but never mutates it.
    """

    def countdown(self, phase: Phase, secondsRemaining: int, secondsTotal: int) -> None:
        """
        The visible countdown changed.
        """

    def runningChanged(self, isRunning: bool) -> None:
        """
        The timer was started or paused.
        """

    def sessionCompleted(self, event: CompletionEvent) -> None:
        """
        A phase finished; play a tone and show a notification.
        """

    def settingsApplied(self, configuration: TimerConfiguration) -> None:
        """
        The user's settings were replaced.
        """

    def persistenceFailed(self, failure: Failure) -> None:
        """
        Something could not be saved.  This must be shown without blocking
        the timer.
        """


@dataclass
class NoUserInterface(UIEventListener):
    """
    Do-nothing implementation of a user interface.
    """

    def countdown(self, phase: Phase, secondsRemaining: int, secondsTotal: int) -> None:
        ...

    def runningChanged(self, isRunning: bool) -> None:
        ...

    def sessionCompleted(self, event: CompletionEvent) -> None:
        ...

    def settingsApplied(self, configuration: TimerConfiguration) -> None:
        ...

    def persistenceFailed(self, failure: Failure) -> None:
        ...


UserInterfaceFactory: TypeAlias = "Callable[[TimerEngine], UIEventListener]"
