"""
Schreibt einzelne Einträge zurück in eine INI-Datei.

Der Rest der Datei (Kommentare, Reihenfolge, andere Sections) bleibt
erhalten. Ein leerer Wert wird als `key =` geschrieben, was beim nächsten
Laden als Löschanweisung gelesen wird.

Beim Laden gewinnt die letzte Zeile. Deshalb bleibt pro (Section, Key)
genau eine Zeile übrig: alle Vorkommen werden entfernt und die neue Zeile
an die Stelle des letzten Vorkommens gesetzt.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Tuple

from ..errors import InvalidEntryError
from ..ini.parser import (
    is_continuation,
    parse_ini,
    section_name,
    split_assignment,
    split_lines,
)
from ..logging_setup import get_logger

log = get_logger("nodeconf.config.writer")


def _format_line(key: str, value: str) -> str:
    return f"{key} = {value}" if value else f"{key} ="


def validate_entry(section: str, key: str, value: str) -> None:
    """
    Prüft, ob der Eintrag geschrieben und unverändert wieder gelesen werden kann.

    Zeilenumbrüche, `=` im Key, `]` im Section-Namen, ` ;` im Wert usw.
    würden beim nächsten Laden andere Einträge ergeben.
    """
    header = f"[{section}]\n" if section else ""
    parsed = parse_ini(header + _format_line(key, value) + "\n")
    if len(parsed) != 1 or parsed[0].ident != (section, key) or parsed[0].value != value:
        raise InvalidEntryError(section, key, value)


def _section_blocks(lines: List[str], section: str) -> List[Tuple[int, int]]:
    """Alle Rümpfe (erste Zeile, Ende exklusiv) von `[section]`. Section "" beginnt am Dateianfang."""
    blocks = []
    start = 0 if section == "" else None
    for i, line in enumerate(lines):
        name = section_name(line.strip())
        if name is None:
            continue
        if start is not None:
            blocks.append((start, i))
        start = i + 1 if name == section else None
    if start is not None:
        blocks.append((start, len(lines)))
    return blocks


def _key_lines(lines: List[str], blocks: List[Tuple[int, int]], key: str) -> List[List[int]]:
    """Pro Vorkommen von `key`: [Key-Zeile, Fortsetzungszeilen...]."""
    hits = []
    for start, end in blocks:
        for i in range(start, end):
            stripped = lines[i].strip()
            if stripped.startswith((";", "[")):
                continue
            parts = split_assignment(stripped)
            if len(parts) < 2 or parts[0] != key:
                continue
            hits.append([i])
            if not parse_ini(stripped):
                # Löschzeile: folgende Fortsetzungen gehören zum vorherigen Eintrag
                continue
            # Kommentare und Leerzeilen unterbrechen eine Fortsetzung nicht
            for j in range(i + 1, end):
                inner = lines[j].strip()
                if not inner or inner.startswith(";"):
                    continue
                if not is_continuation(lines[j]):
                    break
                hits[-1].append(j)
    return hits


class IniFileWriter:
    """Persistiert geänderte Einträge in der Write-Back-Datei."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def update_lines(self, lines: List[str], section: str, key: str, value: str) -> List[str]:
        """
        Ersetzt oder ergänzt `key` in `[section]`.

        Reihenfolge:
        - Key vorhanden → letztes Vorkommen ersetzen, alle anderen
          Vorkommen und alle Fortsetzungszeilen entfernen
        - Key fehlt → im letzten Block der Section nach der letzten
          nicht-leeren Zeile einfügen
        - Section fehlt → am Dateiende anhängen
        """
        result = list(lines)
        new_line = _format_line(key, value)

        blocks = _section_blocks(result, section)
        if not blocks:
            if result and result[-1].strip():
                result.append("")
            result.append(f"[{section}]")
            result.append(new_line)
            return result

        hits = _key_lines(result, blocks, key)
        if hits:
            anchor = hits[-1][0]
            drop = {i for hit in hits for i in hit}
            out = []
            for i, line in enumerate(result):
                if i == anchor:
                    out.append(new_line)
                elif i not in drop:
                    out.append(line)
            return out

        start, end = blocks[-1]
        insert_at = start
        for i in range(start, end):
            if result[i].strip():
                insert_at = i + 1
        result.insert(insert_at, new_line)
        return result

    def save(self, section: str, key: str, value: str, filename: Path | str) -> None:
        """Speichert einen Eintrag atomar (temp-Datei, dann rename)."""
        path = Path(filename)
        if path.exists():
            lines = split_lines(path.read_text(encoding=self.encoding))
        else:
            lines = []

        lines = self.update_lines(lines, section, key, value)

        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        temp_path.write_text("\n".join(lines) + "\n", encoding=self.encoding)
        temp_path.replace(path)
        log.info("Saved [%s] %s to %s", section, key, path)
