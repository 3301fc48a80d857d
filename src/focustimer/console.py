# -*- test-case-name: focustimer.test.test_console -*-
"""
A terminal front-end for the focus timer.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, TextIO

from fritter.drivers.datetimes import guessLocalZone
from twisted.internet.defer import Deferred, fail, maybeDeferred
from twisted.internet.interfaces import IReactorTCP, IReactorTime
from twisted.internet.stdio import StandardIO
from twisted.internet.task import react
from twisted.logger import (
    FilteringLogObserver,
    LogLevel,
    LogLevelFilterPredicate,
    Logger,
    globalLogBeginner,
    textFileLogObserver,
)
from twisted.protocols.basic import LineReceiver
from twisted.python import usage
from twisted.python.failure import Failure
from twisted.python.filepath import FilePath

from .model.boundaries import (
    CompletionEvent,
    ConfigurationError,
    PersistenceError,
    Phase,
    SessionStore,
    UIEventListener,
)
from .model.configuration import TimerConfiguration, limits, updatedFromText
from .model.engine import TimerEngine
from .model.statistics import WEEKDAY_NAMES, summarize
from .model.storage import AppStateFile, defaultDataDirectory
from .model.store import JSONSessionLog
from .model.ticks import LoopingCallTicks
from .model.util import (
    completionMessage,
    formatCountdown,
    intervalSummary,
    todayFrom,
    toneFrequency,
)
from .web import apiSite

log = Logger()

BELL = "\a"

helpText = """\
commands:
  <enter> or space    start / pause
  r, reset            reset to the start of a focus session
  stats               show productivity statistics
  settings            show the current settings
  set NAME VALUE      change a setting, e.g. "set workMinutes 30"
  help                show this message
  quit                exit
"""


@dataclass
class ConsoleInterface(UIEventListener):
    """
    Shows the timer on a line-oriented terminal.
    """

    write: Callable[[str], None]
    engine: TimerEngine
    _lastShown: tuple[Phase, int] | None = field(default=None, init=False)

    def countdown(self, phase: Phase, secondsRemaining: int, secondsTotal: int) -> None:
        # once per minute remaining, plus whenever the phase changes
        shown = (phase, -(-secondsRemaining // 60))
        if shown == self._lastShown:
            return
        self._lastShown = shown
        self.write(f"[{phase.label}] {formatCountdown(secondsRemaining)}\n")

    def runningChanged(self, isRunning: bool) -> None:
        self.write("started\n" if isRunning else "paused\n")

    def sessionCompleted(self, event: CompletionEvent) -> None:
        if self.engine.configuration.soundEnabled:
            log.debug("chime at {hz}Hz", hz=toneFrequency(event))
            self.write(BELL)
        self.write(completionMessage(event) + "\n")
        self.write(
            f"{self.engine.totalCompletedToday}/"
            f"{self.engine.configuration.dailyGoal} sessions today "
            f"({self.engine.goalProgress}% of goal)\n"
        )
        if not self.engine.isRunning:
            self.write(
                f"press enter to start your "
                f"{intervalSummary(self.engine.secondsTotal)} "
                f"{event.nextPhase.label}\n"
            )

    def settingsApplied(self, configuration: TimerConfiguration) -> None:
        self.write("settings saved\n")

    def persistenceFailed(self, failure: Failure) -> None:
        self.write(f"warning: could not save ({failure.getErrorMessage()})\n")


def describeSettings(configuration: TimerConfiguration) -> str:
    lines = []
    for name, value in configuration.toJSON().items():
        bounds = limits.get(name)
        hint = f" ({bounds.minimum}-{bounds.maximum})" if bounds else ""
        lines.append(f"  {name} = {value}{hint}\n")
    return "".join(lines)


def describeStatistics(
    store: SessionStore, today: date, dailyGoal: int
) -> str:
    insights = summarize(store.querySessionsLast30Days(), today, dailyGoal)
    bestDay = (
        f"{insights.bestDay.date.isoformat()} ({insights.bestDay.sessions})"
        if insights.bestDay is not None
        else "none"
    )
    weekday, weekdayCount = insights.bestWeekday
    week = "  ".join(
        f"{WEEKDAY_NAMES[index][:3]} {each.sessions}"
        for index, each in enumerate(insights.weekly)
    )
    return (
        f"today: {insights.today}/{insights.dailyGoal} "
        f"({insights.goalProgress}% of goal)\n"
        f"streak: {insights.streak} days\n"
        f"vs yesterday: {insights.dailyTrend:+d}; "
        f"vs last week: {insights.weeklyTrend:+d}\n"
        f"average session: {insights.averageSessionLength}m\n"
        f"consistency (30 days): {insights.consistency}%\n"
        f"completion rate: {insights.completionRate}%\n"
        f"best day: {bestDay}; best weekday: {weekday} ({weekdayCount})\n"
        f"focus hours (30 days): {insights.totalHours}\n"
        f"7-day average: {insights.movingAverage[-1]} sessions/day\n"
        f"this week: {week}\n"
    )


class TimerCommandProtocol(LineReceiver):
    """
    Reads commands from the terminal and issues them to the engine.
    """

    delimiter = b"\n"
    engine: TimerEngine

    def __init__(
        self,
        store: SessionStore,
        today: Callable[[], date],
        done: Deferred[None],
    ) -> None:
        self.store = store
        self.today = today
        self.done = done

    def buildInterface(self, engine: TimerEngine) -> UIEventListener:
        """
        A L{UserInterfaceFactory} for an engine that prints to our terminal.
        """
        return ConsoleInterface(self.say, engine)

    def say(self, text: str) -> None:
        self.transport.write(text.encode("utf-8"))

    def connectionMade(self) -> None:
        self.say(helpText)
        self.engine.userInterface

    def lineReceived(self, line: bytes) -> None:
        text = line.decode("utf-8", "replace")
        words = text.split()
        command = words[0].lower() if words else ""
        if command in ("", "space"):
            self.engine.toggle()
        elif command == "start":
            self.engine.start()
        elif command == "pause":
            self.engine.pause()
        elif command in ("r", "reset"):
            self.engine.reset()
        elif command == "stats":
            self.say(
                describeStatistics(
                    self.store, self.today(), self.engine.configuration.dailyGoal
                )
            )
        elif command == "settings":
            self.say(describeSettings(self.engine.configuration))
        elif command == "set":
            if len(words) != 3:
                self.say("usage: set NAME VALUE\n")
                return
            try:
                newConfiguration = updatedFromText(
                    self.engine.configuration, words[1], words[2]
                )
            except ConfigurationError as e:
                self.say(f"error: {e}\n")
            else:
                self.engine.applySettings(newConfiguration)
        elif command == "help":
            self.say(helpText)
        elif command in ("q", "quit", "exit"):
            self.transport.loseConnection()
        else:
            self.say(f"unknown command {command!r}; type 'help'\n")

    def connectionLost(self, reason: Failure) -> None:
        self.engine.pause()
        if not self.done.called:
            self.done.callback(None)


class Options(usage.Options):
    optFlags = [
        ["no-web", None, "Do not serve the HTTP API."],
        ["auto-start", None, "Start each phase as soon as the last one ends."],
        ["verbose", "v", "Log debugging information."],
    ]
    optParameters = [
        ["data-dir", "d", None, "Directory to keep sessions and settings in."],
        ["port", "p", 5000, "TCP port for the HTTP API.", int],
    ]

    def postOptions(self) -> None:
        self["data-dir"] = (
            FilePath(self["data-dir"])
            if self["data-dir"] is not None
            else defaultDataDirectory()
        )


def beginLogging(verbose: bool, stream: TextIO = sys.stderr) -> None:
    predicate = LogLevelFilterPredicate(
        defaultLogLevel=LogLevel.debug if verbose else LogLevel.warn
    )
    globalLogBeginner.beginLoggingTo(
        [FilteringLogObserver(textFileLogObserver(stream), [predicate])]
    )


def timerFromOptions(
    reactor: IReactorTime, options: Options, done: Deferred[None]
) -> TimerCommandProtocol:
    """
    Load the saved settings and session log from the data directory, and
    build the terminal command protocol around a new engine.

    @raise PersistenceError: if the session log exists but can't be read.
    """
    dataDir: FilePath = options["data-dir"]
    today = todayFrom(reactor, guessLocalZone())
    preferences = AppStateFile(dataDir.child("settings.json"))
    appState = preferences.loadAppState(today())
    store = JSONSessionLog(reactor, today, path=dataDir.child("sessions.json"))

    commands = TimerCommandProtocol(store, today, done)
    commands.engine = TimerEngine(
        appState,
        store,
        LoopingCallTicks(reactor),
        today,
        preferences,
        commands.buildInterface,
        _autoStartThisRun=options["auto-start"],
    )
    return commands


def main(reactor: IReactorTime, options: Options) -> Deferred[None]:
    """
    Run the timer in the terminal, serving the HTTP API alongside it.
    """
    done: Deferred[None] = Deferred()
    try:
        commands = timerFromOptions(reactor, options, done)
    except PersistenceError as e:
        return fail(
            SystemExit(
                f"focustimer: {e}\n"
                "Move the damaged file aside to start a new session log."
            )
        )

    if not options["no-web"]:
        tcp: IReactorTCP = reactor  # type:ignore[assignment]
        port = tcp.listenTCP(options["port"], apiSite(commands.store, commands.today))
        log.info("serving the session API on {port}", port=options["port"])

        def stopServing(result: object) -> Deferred[object]:
            return maybeDeferred(port.stopListening).addCallback(
                lambda ignored: result
            )

        done.addBoth(stopServing)

    StandardIO(commands, reactor=reactor)
    return done


def run(argv: list[str] | None = None) -> None:
    """
    Command-line entry point.
    """
    options = Options()
    try:
        options.parseOptions(argv)
    except usage.UsageError as e:
        raise SystemExit(f"{options}\n{e}")
    beginLogging(options["verbose"])
    react(main, [options])
