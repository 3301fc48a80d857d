from typing import Literal, TypedDict

SavedSessionType = Literal["work", "break", "long_break"]

NewSessionJSON = TypedDict(
    "NewSessionJSON",
    {
        "sessionType": SavedSessionType,
        "duration": int,
        "wasCompleted": bool,
        "date": str,
    },
)

SavedSession = TypedDict(
    "SavedSession",
    {
        "id": str,
        "sessionType": SavedSessionType,
        "duration": int,
        "wasCompleted": bool,
        # YYYY-MM-DD; the day the session is grouped under, which may differ
        # from the UTC date of completedAt.
        "date": str,
        "completedAt": float,
    },
)

SessionJSON = TypedDict(
    "SessionJSON",
    {
        "id": str,
        "sessionType": SavedSessionType,
        "duration": int,
        "wasCompleted": bool,
        "date": str,
        # ISO-8601, UTC
        "completedAt": str,
    },
)

SavedSessionLog = TypedDict(
    "SavedSessionLog",
    {
        "sessions": list[SavedSession],
    },
)

SavedConfiguration = TypedDict(
    "SavedConfiguration",
    {
        "workMinutes": int,
        "breakMinutes": int,
        "longBreakMinutes": int,
        "dailyGoal": int,
        "soundEnabled": bool,
        "autoStart": bool,
    },
)

SavedAppState = TypedDict(
    "SavedAppState",
    {
        "configuration": SavedConfiguration,
        "date": str,
        "completedWorkSessionsToday": int,
        "totalCompletedToday": int,
    },
)
