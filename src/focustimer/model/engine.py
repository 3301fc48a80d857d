# -*- test-case-name: focustimer.model.test.test_engine -*-
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from twisted.internet.defer import maybeDeferred
from twisted.logger import Logger
from twisted.python.failure import Failure

from .boundaries import (
    CompletionEvent,
    NoUserInterface,
    Phase,
    PreferencesStore,
    SessionStore,
    TickSource,
    UIEventListener,
    UserInterfaceFactory,
)
from .configuration import CYCLE_LENGTH, AppState, TimerConfiguration
from .records import NewSession, SessionRecord
from .statistics import goalPercent

log = Logger()

_theNoUserInterface: UIEventListener = NoUserInterface()


def noUserInterface(engine: TimerEngine) -> UIEventListener:
    return _theNoUserInterface


@dataclass
class TimerEngine:
    """
    The single source of truth for what phase the user is in and how much
    time is left in it.

    The engine is driven by a L{TickSource} while running.  When a phase
    counts down to zero it records a session with the L{SessionStore}, tells
    the user interface, and moves on to the next phase of the cycle.
    """

    _appState: AppState
    "Settings and daily counters; saved to C{_preferences} when they change."

    _store: SessionStore
    "Where finished sessions are recorded."

    _ticks: TickSource
    "Calls L{TimerEngine.tick} once per second while we are running."

    _today: Callable[[], date]
    "Returns the user's current calendar date."

    _preferences: PreferencesStore | None = None

    _interfaceFactory: UserInterfaceFactory = noUserInterface
    "A factory to create a user interface once the engine exists."

    _userInterface: UIEventListener | None = None

    _autoStartThisRun: bool = False
    """
    Start each phase as soon as the previous one finishes, whatever the saved
    configuration says.  Never persisted.
    """

    _phase: Phase = field(default=Phase.Work, init=False)
    _secondsRemaining: int = field(default=0, init=False)
    _isRunning: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self._secondsRemaining = self.secondsTotal

    @property
    def userInterface(self) -> UIEventListener:
        """
        build the user interface on demand
        """
        if self._userInterface is None:
            self._userInterface = self._interfaceFactory(self)
            self._showCountdown()
        return self._userInterface

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def secondsRemaining(self) -> int:
        return self._secondsRemaining

    @property
    def secondsTotal(self) -> int:
        """
        The configured length of the current phase.
        """
        return self.configuration.secondsFor(self._phase)

    @property
    def progress(self) -> float:
        """
        How far through the current phase we are, from 0.0 to 1.0.
        """
        total = self.secondsTotal
        return (total - self._secondsRemaining) / total

    @property
    def isRunning(self) -> bool:
        return self._isRunning

    @property
    def configuration(self) -> TimerConfiguration:
        return self._appState.configuration

    @property
    def autoStart(self) -> bool:
        """
        Will the next phase begin counting down as soon as this one ends?
        """
        return self._autoStartThisRun or self.configuration.autoStart

    @property
    def completedWorkSessionsToday(self) -> int:
        return self._appState.completedWorkSessionsToday

    @property
    def totalCompletedToday(self) -> int:
        return self._appState.totalCompletedToday

    @property
    def goalProgress(self) -> int:
        """
        Percentage of today's goal achieved so far, capped at 100.
        """
        return goalPercent(
            self._appState.totalCompletedToday,
            self._appState.configuration.dailyGoal,
        )

    def start(self) -> None:
        """
        Start (or resume) counting down the current phase.
        """
        if self._isRunning:
            return
        self._isRunning = True
        self._ticks.startTicking(self.tick)
        self.userInterface.runningChanged(True)

    def pause(self) -> None:
        """
        Stop counting down, keeping the time remaining.
        """
        if not self._isRunning:
            return
        self._isRunning = False
        self._ticks.stopTicking()
        self.userInterface.runningChanged(False)

    def toggle(self) -> None:
        """
        Pause if running, start if paused.
        """
        if self._isRunning:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        """
        Abandon the current phase without recording it, and go back to the
        beginning of a work phase.
        """
        self.pause()
        self._phase = Phase.Work
        self._secondsRemaining = self.secondsTotal
        self._showCountdown()

    def tick(self) -> None:
        """
        One second has elapsed.
        """
        if not self._isRunning or self._secondsRemaining <= 0:
            return
        self._secondsRemaining -= 1
        if self._secondsRemaining == 0:
            self.completePhase()
        else:
            self._showCountdown()

    def completePhase(self) -> None:
        """
        The current phase is over: record it, notify the user, and load the
        next phase of the cycle.
        """
        finished = self._phase
        session = NewSession(
            sessionType=finished,
            duration=self.configuration.minutesFor(finished),
            date=self._today(),
        )
        if finished is Phase.Work:
            self._appState.completedWorkSessionsToday += 1
            self._appState.totalCompletedToday += 1
            nextPhase = (
                Phase.LongBreak
                if self._appState.completedWorkSessionsToday % CYCLE_LENGTH == 0
                else Phase.Break
            )
        else:
            nextPhase = Phase.Work

        self._phase = nextPhase
        self._secondsRemaining = self.secondsTotal
        if not self.autoStart:
            self.pause()

        log.info(
            "{finished} phase complete; next up: {next}",
            finished=finished.value,
            next=nextPhase.value,
        )
        self._recordSession(session)
        if finished is Phase.Work:
            self._savePreferences()
        self.userInterface.sessionCompleted(CompletionEvent(session, nextPhase))
        self._showCountdown()

    def applySettings(self, newConfiguration: TimerConfiguration) -> None:
        """
        Replace the configuration.

        If paused, the current phase is reloaded with its new duration.  If
        running, the countdown in progress continues, except that it is
        shortened if it now exceeds the new length of the phase.
        """
        self._appState.configuration = newConfiguration
        if self._isRunning:
            self._secondsRemaining = min(self._secondsRemaining, self.secondsTotal)
        else:
            self._secondsRemaining = self.secondsTotal
        self._savePreferences()
        self.userInterface.settingsApplied(newConfiguration)
        self._showCountdown()

    def _showCountdown(self) -> None:
        self.userInterface.countdown(
            self._phase, self._secondsRemaining, self.secondsTotal
        )

    def _recordSession(self, session: NewSession) -> None:
        # The transition has already happened; storage only gets to report
        # back.
        def stored(record: SessionRecord) -> None:
            log.debug("recorded session {id}", id=record.id)

        def failed(failure: Failure) -> None:
            log.failure("could not record {session}", failure, session=session)
            self.userInterface.persistenceFailed(failure)

        maybeDeferred(self._store.createSession, session).addCallbacks(
            stored, failed
        )

    def _savePreferences(self) -> None:
        if self._preferences is None:
            return
        try:
            self._preferences.saveAppState(self._appState)
        except Exception:
            failure = Failure()
            log.failure("could not save preferences", failure)
            self.userInterface.persistenceFailed(failure)
