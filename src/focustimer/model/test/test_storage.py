from __future__ import annotations

from datetime import date
from json import dumps

from twisted.python.filepath import FilePath
from twisted.trial.unittest import SynchronousTestCase as TC

from ..boundaries import PersistenceError
from ..configuration import AppState, TimerConfiguration
from ..storage import AppStateFile, loadFromFile, saveToFile


class SaveToFileTests(TC):
    def test_createsDirectories(self) -> None:
        path = FilePath(self.mktemp()).child("deeper").child("state.json")
        saveToFile(path, {"hello": ["world", 1]})
        self.assertEqual(loadFromFile(path), {"hello": ["world", 1]})
        self.assertEqual(path.parent().listdir(), ["state.json"])

    def test_replaces(self) -> None:
        path = FilePath(self.mktemp())
        saveToFile(path, {"version": 1})
        saveToFile(path, {"version": 2})
        self.assertEqual(loadFromFile(path), {"version": 2})


class AppStateFileTests(TC):
    def setUp(self) -> None:
        self.path = FilePath(self.mktemp())
        self.preferences = AppStateFile(self.path)

    def test_missing(self) -> None:
        """
        With no saved state, the defaults are used.
        """
        self.assertEqual(
            self.preferences.loadAppState(date(2024, 1, 1)),
            AppState(date(2024, 1, 1)),
        )

    def test_sameDay(self) -> None:
        state = AppState(date(2024, 1, 1), TimerConfiguration(workMinutes=40), 2, 2)
        self.preferences.saveAppState(state)
        self.assertEqual(self.preferences.loadAppState(date(2024, 1, 1)), state)

    def test_nextDay(self) -> None:
        """
        Loading on a later day keeps the settings but resets the counters.
        """
        self.preferences.saveAppState(
            AppState(date(2024, 1, 1), TimerConfiguration(workMinutes=40), 2, 2)
        )
        self.assertEqual(
            self.preferences.loadAppState(date(2024, 1, 2)),
            AppState(date(2024, 1, 2), TimerConfiguration(workMinutes=40), 0, 0),
        )

    def test_outOfRange(self) -> None:
        """
        Saved settings that are no longer valid are replaced with the
        defaults.
        """
        state = AppState(date(2024, 1, 1)).toJSON()
        state["configuration"]["workMinutes"] = 99
        self.path.setContent(dumps(state).encode("utf-8"))
        self.assertEqual(
            self.preferences.loadAppState(date(2024, 1, 1)),
            AppState(date(2024, 1, 1)),
        )

    def test_unreadable(self) -> None:
        """
        A damaged file is logged and the defaults are used.
        """
        self.path.setContent(b"\x00garbage")
        self.assertEqual(
            self.preferences.loadAppState(date(2024, 1, 1)),
            AppState(date(2024, 1, 1)),
        )
        self.assertEqual(len(self.flushLoggedErrors(ValueError)), 1)
        self.path.setContent(b'{"date": "2024-01-01"}')
        self.preferences.loadAppState(date(2024, 1, 1))
        self.assertEqual(len(self.flushLoggedErrors(KeyError)), 1)

    def test_saveFailure(self) -> None:
        self.path.setContent(b"")
        preferences = AppStateFile(self.path.child("state.json"))
        with self.assertRaises(PersistenceError):
            preferences.saveAppState(AppState(date(2024, 1, 1)))
