# -*- test-case-name: focustimer.model.test.test_store -*-
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Sequence, cast
from uuid import uuid4

from twisted.internet.interfaces import IReactorTime
from twisted.logger import Logger
from twisted.python.filepath import FilePath

from .boundaries import PersistenceError, SessionStore
from .records import NewSession, SessionRecord, User, loadRecord, saveRecord
from .schema import SavedSessionLog
from .statistics import weekStart
from .storage import loadFromFile, saveToFile

log = Logger()


@dataclass
class MemorySessionStore(SessionStore):
    """
    Session records kept in memory for the life of the process.
    """

    clock: IReactorTime
    "Supplies the C{completedAt} timestamp of new records."

    today: Callable[[], date]
    "Anchors the convenience queries on the current date."

    _sessions: dict[str, SessionRecord] = field(default_factory=dict)
    _users: dict[str, User] = field(default_factory=dict)

    def createSession(self, newSession: NewSession) -> SessionRecord:
        newSession.validate()
        record = SessionRecord(
            id=str(uuid4()),
            sessionType=newSession.sessionType,
            duration=newSession.duration,
            wasCompleted=newSession.wasCompleted,
            date=newSession.date,
            completedAt=self.clock.seconds(),
        )
        self._append(record)
        return record

    def _append(self, record: SessionRecord) -> None:
        self._sessions[record.id] = record

    def _matching(self, keep: Callable[[SessionRecord], bool]) -> list[SessionRecord]:
        # newest first; records completed within the same clock reading are
        # ordered by insertion, latest first
        return [
            record
            for _, record in sorted(
                (
                    ((record.completedAt, index), record)
                    for index, record in enumerate(self._sessions.values())
                    if keep(record)
                ),
                key=lambda pair: pair[0],
                reverse=True,
            )
        ]

    def querySessionsByDateRange(
        self, startDate: date, endDate: date
    ) -> Sequence[SessionRecord]:
        return self._matching(lambda record: startDate <= record.date <= endDate)

    def querySessionsByDate(self, day: date) -> Sequence[SessionRecord]:
        return self._matching(lambda record: record.date == day)

    def querySessionsLast30Days(self) -> Sequence[SessionRecord]:
        today = self.today()
        return self.querySessionsByDateRange(today - timedelta(days=30), today)

    def querySessionsThisWeek(self) -> Sequence[SessionRecord]:
        today = self.today()
        return self.querySessionsByDateRange(weekStart(today), today)

    def createUser(self, username: str, password: str) -> User:
        if self.getUserByUsername(username) is not None:
            raise ValueError(f"username {username!r} is taken")
        user = User(id=str(uuid4()), username=username, password=password)
        self._users[user.id] = user
        return user

    def getUser(self, userID: str) -> User | None:
        return self._users.get(userID)

    def getUserByUsername(self, username: str) -> User | None:
        return next(
            (user for user in self._users.values() if user.username == username),
            None,
        )


@dataclass
class JSONSessionLog(MemorySessionStore):
    """
    A L{MemorySessionStore} which is written through to a JSON file every
    time a session is recorded, and reloaded from it on construction.
    """

    path: FilePath = field(kw_only=True)

    def __post_init__(self) -> None:
        if not self.path.exists():
            return
        try:
            saved = cast(SavedSessionLog, loadFromFile(self.path))
            for each in saved["sessions"]:
                record = loadRecord(each)
                self._sessions[record.id] = record
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"could not load {self.path.path}: {e}") from e
        log.info(
            "loaded {count} sessions from {path}",
            count=len(self._sessions),
            path=self.path.path,
        )

    def _append(self, record: SessionRecord) -> None:
        document: SavedSessionLog = {
            "sessions": [saveRecord(each) for each in self._sessions.values()]
            + [saveRecord(record)]
        }
        try:
            saveToFile(self.path, document)
        except OSError as e:
            raise PersistenceError(f"could not save {self.path.path}: {e}") from e
        super()._append(record)
