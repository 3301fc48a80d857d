# -*- test-case-name: focustimer.test.test_web -*-
"""
The session-record HTTP API.

    POST /api/sessions                  record a session
    GET  /api/sessions/today            today's sessions
    GET  /api/sessions/week             Sunday through today
    GET  /api/sessions/month            the last thirty days
    GET  /api/sessions/range?startDate=YYYY-MM-DD&endDate=YYYY-MM-DD

All responses are JSON; errors are C{{"error": "..."}}.
"""

from __future__ import annotations

from datetime import date
from json import JSONDecodeError, dumps, loads
from typing import Callable, Sequence

from twisted.logger import Logger
from twisted.web.http import BAD_REQUEST, INTERNAL_SERVER_ERROR
from twisted.web.resource import Resource
from twisted.web.server import Request, Site

from .model.boundaries import SessionStore, ValidationError
from .model.records import SessionRecord, newSessionFromJSON, parseDate, recordToJSON

log = Logger()


def respondJSON(request: Request, body: object, code: int = 200) -> bytes:
    request.setResponseCode(code)
    request.setHeader(b"content-type", b"application/json; charset=utf-8")
    return dumps(body).encode("utf-8")


def respondRecords(request: Request, records: Sequence[SessionRecord]) -> bytes:
    return respondJSON(request, [recordToJSON(each) for each in records])


class SessionQuery(Resource):
    """
    A fixed query against the store, such as "today's sessions".
    """

    isLeaf = True

    def __init__(
        self, description: str, query: Callable[[], Sequence[SessionRecord]]
    ) -> None:
        super().__init__()
        self.description = description
        self.query = query

    def render_GET(self, request: Request) -> bytes:
        try:
            records = self.query()
        except Exception:
            log.failure("error fetching {description}", description=self.description)
            return respondJSON(
                request, {"error": "Failed to fetch sessions"}, INTERNAL_SERVER_ERROR
            )
        return respondRecords(request, records)


class SessionRange(Resource):
    """
    Sessions between two dates given as query parameters.
    """

    isLeaf = True

    def __init__(self, store: SessionStore) -> None:
        super().__init__()
        self.store = store

    def render_GET(self, request: Request) -> bytes:
        args = request.args or {}
        startValues = args.get(b"startDate")
        endValues = args.get(b"endDate")
        if not startValues or not endValues:
            return respondJSON(
                request,
                {"error": "startDate and endDate are required"},
                BAD_REQUEST,
            )
        try:
            startDate = parseDate(startValues[0].decode("utf-8"), "startDate")
            endDate = parseDate(endValues[0].decode("utf-8"), "endDate")
        except (ValidationError, UnicodeDecodeError) as e:
            return respondJSON(request, {"error": str(e)}, BAD_REQUEST)
        try:
            records = self.store.querySessionsByDateRange(startDate, endDate)
        except Exception:
            log.failure(
                "error fetching sessions from {start} to {end}",
                start=startDate,
                end=endDate,
            )
            return respondJSON(
                request, {"error": "Failed to fetch sessions"}, INTERNAL_SERVER_ERROR
            )
        return respondRecords(request, records)


class SessionsResource(Resource):
    """
    C{/api/sessions}: create records, and hold the query endpoints.
    """

    def __init__(self, store: SessionStore, today: Callable[[], date]) -> None:
        super().__init__()
        self.store = store
        self.putChild(
            b"today",
            SessionQuery(
                "today's sessions",
                lambda: store.querySessionsByDate(today()),
            ),
        )
        self.putChild(
            b"week", SessionQuery("week sessions", store.querySessionsThisWeek)
        )
        self.putChild(
            b"month", SessionQuery("month sessions", store.querySessionsLast30Days)
        )
        self.putChild(b"range", SessionRange(store))

    def getChild(self, path: bytes, request: Request) -> Resource:
        # "/api/sessions/" is the same as "/api/sessions"
        if path == b"":
            return self
        return super().getChild(path, request)

    def render_POST(self, request: Request) -> bytes:
        try:
            body = loads(request.content.read())
            newSession = newSessionFromJSON(body)
        except (JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            log.info("rejected session: {error}", error=e)
            return respondJSON(request, {"error": "Invalid session data"}, BAD_REQUEST)
        try:
            record = self.store.createSession(newSession)
        except ValidationError as e:
            log.info("rejected session: {error}", error=e)
            return respondJSON(request, {"error": "Invalid session data"}, BAD_REQUEST)
        except Exception:
            log.failure("error creating session")
            return respondJSON(
                request, {"error": "Failed to save session"}, INTERNAL_SERVER_ERROR
            )
        return respondJSON(request, recordToJSON(record))


def apiRoot(store: SessionStore, today: Callable[[], date]) -> Resource:
    """
    Build the resource tree for the whole API.
    """
    root = Resource()
    api = Resource()
    root.putChild(b"api", api)
    api.putChild(b"sessions", SessionsResource(store, today))
    return root


def apiSite(store: SessionStore, today: Callable[[], date]) -> Site:
    return Site(apiRoot(store, today))
