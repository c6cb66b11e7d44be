from __future__ import annotations
from pathlib import Path


class ConfigError(Exception):
    """Base class for all nodeconf errors."""


class StartupError(ConfigError):
    """A configured INI file could not be read at startup."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Couldn't find server configuration file {self.path}.")


class KeyNotFoundError(ConfigError, KeyError):
    """delete() was called for a (section, key) that is not in the store."""

    def __init__(self, section: str, key: str):
        self.section = section
        self.key = key
        super().__init__(f"{section}/{key}")

    def __str__(self) -> str:
        return f"No such config entry: [{self.section}] {self.key}"


class StoreStateError(ConfigError, RuntimeError):
    """Operation issued while the config service is not running."""


class InvalidEntryError(ConfigError, ValueError):
    """Entry would not survive a write to and a reload from the INI file unchanged."""

    def __init__(self, section: str, key: str, value: str):
        self.section = section
        self.key = key
        self.value = value
        super().__init__(f"Cannot store [{section}] {key!r} = {value!r} in an INI file")
