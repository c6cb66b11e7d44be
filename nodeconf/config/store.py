"""
In-Memory Konfigurations-Store über geschichteten INI-Dateien.

Wird mit einer geordneten Liste von Dateien geladen. Die letzte Datei ist
die Write-Back-Datei: set()/delete() mit persist=True schreiben dorthin.
Jede Änderung wird synchron an den ChangeNotifier gemeldet.

Der Store selbst ist nicht thread-safe. Zugriffe werden über
nodeconf.service.ConfigService serialisiert.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..errors import KeyNotFoundError
from ..ini.parser import parse_ini_file
from ..models import DELETED, ChangeEvent
from .merger import ConfigMerger, Table
from .notifier import ChangeNotifier
from .writer import IniFileWriter, validate_entry
from ..logging_setup import get_logger

log = get_logger("nodeconf.config.store")

MISSING = object()


class LayeredStore:
    def __init__(
        self,
        notifier: Optional[ChangeNotifier] = None,
        writer: Optional[IniFileWriter] = None,
        merger: Optional[ConfigMerger] = None,
    ):
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self.writer = writer if writer is not None else IniFileWriter()
        self.merger = merger if merger is not None else ConfigMerger()
        self.write_filename: Optional[Path] = None
        self._table: Table = {}

    @classmethod
    def load(
        cls,
        files: Iterable[Path | str],
        notifier: Optional[ChangeNotifier] = None,
        writer: Optional[IniFileWriter] = None,
    ) -> "LayeredStore":
        """
        Lädt alle Dateien in Reihenfolge.

        Fehlt eine Datei, wird StartupError geworfen und kein Store erzeugt.
        """
        store = cls(notifier=notifier, writer=writer)
        paths = [Path(f) for f in files]
        for path in paths:
            store.load_file(path)
        store.write_filename = paths[-1] if paths else None
        log.info("Config loaded: files=%d entries=%d write_file=%s",
                 len(paths), len(store._table), store.write_filename)
        return store

    def load_file(self, path: Path | str) -> int:
        # Löschanweisungen wirken sofort auf die Live-Tabelle
        entries = parse_ini_file(path, on_delete=self._discard)
        n = self.merger.apply(self._table, entries)
        log.info("Loaded %s (%d entries)", path, n)
        return n

    def _discard(self, section: str, key: str) -> None:
        if self._table.pop((section, key), None) is not None:
            log.debug("Removed [%s] %s while loading", section, key)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, ident: object) -> bool:
        return ident in self._table

    # === Queries ===
    def all(self) -> List[Tuple[Tuple[str, str], str]]:
        """Alle Einträge, sortiert nach (Section, Key)."""
        return sorted(self._table.items())

    list_all = all

    def get(self, section: str, key=MISSING, default=None):
        """
        get(section) → [(key, value), ...]
        get(section, key, default=None) → value oder default
        """
        if key is MISSING:
            return [(k, v) for (s, k), v in self._table.items() if s == section]
        return self._table.get((section, key), default)

    # === Mutations ===
    def set(self, section: str, key: str, value: str, persist: bool = True) -> Optional[str]:
        """Setzt den Wert und liefert den vorherigen Wert (oder None)."""
        if not isinstance(value, str):
            raise TypeError(f"config values are text, got {type(value).__name__}")
        # vor jeder Änderung: Speicher und Datei dürfen nicht auseinanderlaufen
        validate_entry(section, key, value)
        previous = self._table.get((section, key))
        self._table[(section, key)] = value
        log.info("Set [%s] %s = %r (persist=%s)", section, key, value, persist)
        if persist and self.write_filename is not None:
            self.writer.save(section, key, value, self.write_filename)
        self.notifier.notify(ChangeEvent(section, key, value, persist))
        return previous

    def delete(self, section: str, key: str, persist: bool = True) -> str:
        """Entfernt den Eintrag und liefert den entfernten Wert."""
        if (section, key) not in self._table:
            raise KeyNotFoundError(section, key)
        previous = self._table.pop((section, key))
        log.info("Deleted [%s] %s (persist=%s)", section, key, persist)
        if persist and self.write_filename is not None:
            self.writer.save(section, key, "", self.write_filename)
        self.notifier.notify(ChangeEvent(section, key, DELETED, persist))
        return previous
