"""
Merge-Logik für geschichtete INI-Dateien.

Jede Datei liefert eine geordnete Liste von Einträgen. Die Einträge
werden in Ladereihenfolge in eine Tabelle geschrieben, spätere Einträge
überschreiben frühere mit gleichem (Section, Key).
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Tuple, Union

from ..models import ParseResult
from ..logging_setup import get_logger

log = get_logger("nodeconf.config.merger")

Ident = Tuple[str, str]
Table = Dict[Ident, str]
Dump = Union[Mapping[Ident, str], Iterable[Tuple[Ident, str]]]


class ConfigMerger:
    """
    Zentrale Merge-Logik für Konfigurationen.

    Strategie:
    - Erste Datei ist die Basis
    - Jede weitere Datei ersetzt/ergänzt
    - Innerhalb einer Datei gewinnt die letzte Zeile
    - Löschungen (`key =`) passieren schon beim Parsen, nicht hier
    """

    def apply(self, table: Table, entries: ParseResult) -> int:
        """
        Schreibt die Einträge einer Datei in die Tabelle.

        Args:
            table: Live-Tabelle (wird verändert)
            entries: Ergebnis von parse_ini()

        Returns:
            Anzahl geschriebener Einträge
        """
        for entry in entries:
            table[entry.ident] = entry.value
        return len(entries)

    def merge(self, results: Iterable[ParseResult]) -> Table:
        """Merged mehrere Parse-Ergebnisse in eine neue Tabelle (ohne Löschungen)."""
        table: Table = {}
        for entries in results:
            self.apply(table, entries)
        return table

    def compute_delta(self, before: Dump, after: Dump) -> Dict[str, Any]:
        """
        Berechnet Unterschiede zwischen zwei Konfigurationsständen.

        Returns:
            Dict mit "added", "removed", "changed", jeweils
            "section/key" → Wert bzw. {"before": .., "after": ..}
        """
        old = dict(before)
        new = dict(after)

        added = {f"{s}/{k}": new[(s, k)] for (s, k) in sorted(new.keys() - old.keys())}
        removed = {f"{s}/{k}": old[(s, k)] for (s, k) in sorted(old.keys() - new.keys())}
        changed = {
            f"{s}/{k}": {"before": old[(s, k)], "after": new[(s, k)]}
            for (s, k) in sorted(old.keys() & new.keys())
            if old[(s, k)] != new[(s, k)]
        }

        log.debug("Delta: added=%d removed=%d changed=%d", len(added), len(removed), len(changed))
        return {"added": added, "removed": removed, "changed": changed}
