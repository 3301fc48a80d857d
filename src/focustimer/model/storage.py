# -*- test-case-name: focustimer.model.test.test_storage -*-

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from json import dumps, loads
from os import environ
from os.path import expanduser
from typing import TypeAlias, cast

from twisted.logger import Logger
from twisted.python.filepath import FilePath

from .boundaries import ConfigurationError, PersistenceError, PreferencesStore
from .configuration import AppState, appStateFromJSON
from .schema import SavedAppState, SavedSessionLog

log = Logger()

TEST_MODE = bool(environ.get("TEST_MODE"))

JSON: TypeAlias = (
    "None | str | float | bool | dict[str, JSON] | list[JSON] | SavedAppState"
    " | SavedSessionLog"
)


def defaultDataDirectory() -> FilePath:
    """
    Where the timer keeps its files unless told otherwise.
    """
    base = FilePath(
        environ.get("FOCUSTIMER_HOME") or expanduser("~/.local/share/focustimer")
    )
    if TEST_MODE:
        base = base.child("testing")
    return base


def saveToFile(path: FilePath, jsonObject: JSON) -> None:
    """
    Save the given JSON object to a file, replacing it atomically.
    """
    parent = path.parent()
    if not parent.isdir():
        parent.makedirs(True)
    newp = parent.child(".temporary-" + path.basename() + ".new")
    newp.setContent(dumps(jsonObject, indent=2).encode("utf-8"))
    newp.moveTo(path)


def loadFromFile(path: FilePath) -> JSON:
    result: JSON = loads(path.getContent().decode("utf-8"))
    return result


@dataclass
class AppStateFile(PreferencesStore):
    """
    Preferences saved as a JSON document.
    """

    path: FilePath

    def saveAppState(self, appState: AppState) -> None:
        try:
            saveToFile(self.path, appState.toJSON())
        except OSError as e:
            raise PersistenceError(f"could not save {self.path.path}: {e}") from e

    def loadAppState(self, today: date) -> AppState:
        """
        Load the saved state, or create a fresh one if there is none or it
        cannot be read.  Daily counters are reset if the state was last saved
        on a day other than C{today}.
        """
        if not self.path.exists():
            return AppState(date=today)
        try:
            loaded = appStateFromJSON(
                cast(SavedAppState, loadFromFile(self.path))
            )
        except ConfigurationError as e:
            log.warn(
                "saved settings in {path} are out of range ({error}); "
                "using defaults",
                path=self.path.path,
                error=e,
            )
            return AppState(date=today)
        except (OSError, ValueError, KeyError, TypeError):
            log.failure("could not read {path}; using defaults", path=self.path.path)
            return AppState(date=today)
        if loaded.rolloverTo(today):
            log.info("new day; daily counters reset")
        return loaded
