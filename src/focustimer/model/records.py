# -*- test-case-name: focustimer.model.test.test_records -*-
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Mapping

from .boundaries import Phase, ValidationError
from .schema import NewSessionJSON, SavedSession, SessionJSON

_isoDate = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parseDate(value: object, name: str = "date") -> date:
    """
    Parse a strict C{YYYY-MM-DD} calendar date.

    @raise ValidationError: if C{value} is not a string in that format, or
        does not name a real day.
    """
    if not isinstance(value, str) or _isoDate.match(value) is None:
        raise ValidationError(f"{name} must be a YYYY-MM-DD string")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{name} {value!r} is not a calendar date")


@dataclass(frozen=True)
class NewSession:
    """
    A session that has finished (or been skipped) but has not been stored
    yet.
    """

    sessionType: Phase
    duration: int
    "Length of the session, in whole minutes."
    date: date
    wasCompleted: bool = True

    def validate(self) -> NewSession:
        """
        Check the invariants a record must satisfy before it is stored.

        @return: C{self}
        @raise ValidationError: if any of them are violated.
        """
        if not isinstance(self.sessionType, Phase):
            raise ValidationError(f"unknown session type {self.sessionType!r}")
        if (
            isinstance(self.duration, bool)
            or not isinstance(self.duration, int)
            or self.duration <= 0
        ):
            raise ValidationError("duration must be a positive whole number")
        if not isinstance(self.date, date):
            raise ValidationError("date must be a calendar date")
        if not isinstance(self.wasCompleted, bool):
            raise ValidationError("wasCompleted must be a boolean")
        return self

    def toJSON(self) -> NewSessionJSON:
        return {
            "sessionType": self.sessionType.value,
            "duration": self.duration,
            "wasCompleted": self.wasCompleted,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class SessionRecord:
    """
    A stored session.  Records are never modified once created.
    """

    id: str
    sessionType: Phase
    duration: int
    wasCompleted: bool
    date: date
    completedAt: float
    "When the record was persisted, as a POSIX timestamp."

    @property
    def qualifies(self) -> bool:
        """
        Does this record count towards streaks and goals?
        """
        return self.sessionType is Phase.Work and self.wasCompleted


@dataclass(frozen=True)
class User:
    """
    Placeholder account record; nothing in the timer flow consults it.
    """

    id: str
    username: str
    password: str


def newSessionFromJSON(body: object) -> NewSession:
    """
    Validate a decoded request body and convert it to a L{NewSession}.

    @raise ValidationError: if the body is not a well-formed session.
    """
    if not isinstance(body, Mapping):
        raise ValidationError("session must be a JSON object")
    try:
        sessionType = Phase(body["sessionType"])
    except KeyError:
        raise ValidationError("sessionType is required")
    except (ValueError, TypeError):
        raise ValidationError(
            f"sessionType must be one of {[each.value for each in Phase]}"
        )
    if "duration" not in body:
        raise ValidationError("duration is required")
    if "date" not in body:
        raise ValidationError("date is required")
    return NewSession(
        sessionType=sessionType,
        duration=body["duration"],
        date=parseDate(body["date"]),
        wasCompleted=body.get("wasCompleted", True),
    ).validate()


def recordToJSON(record: SessionRecord) -> SessionJSON:
    """
    Convert a record into the shape the HTTP API returns.
    """
    return {
        "id": record.id,
        "sessionType": record.sessionType.value,
        "duration": record.duration,
        "wasCompleted": record.wasCompleted,
        "date": record.date.isoformat(),
        "completedAt": datetime.fromtimestamp(
            record.completedAt, timezone.utc
        ).isoformat(),
    }


def saveRecord(record: SessionRecord) -> SavedSession:
    return {
        "id": record.id,
        "sessionType": record.sessionType.value,
        "duration": record.duration,
        "wasCompleted": record.wasCompleted,
        "date": record.date.isoformat(),
        "completedAt": record.completedAt,
    }


def loadRecord(saved: SavedSession) -> SessionRecord:
    return SessionRecord(
        id=saved["id"],
        sessionType=Phase(saved["sessionType"]),
        duration=int(saved["duration"]),
        wasCompleted=bool(saved["wasCompleted"]),
        date=date.fromisoformat(saved["date"]),
        completedAt=float(saved["completedAt"]),
    )
