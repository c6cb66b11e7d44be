"""
Line-oriented parser for node INI files.

Format notes:

    [section]             ; header, closing bracket must end the line
    key = value           ; `=` may be surrounded by one optional blank
    key = a=b             ; later `=` belong to the value
    key = value ; note    ; inline comments need a blank or tab before `;`
     more                 ; exactly one leading blank continues the value
    key =                 ; empty value deletes `key` from the live store

Malformed lines are skipped without error. Lines are split on CRLF, LF,
CR and the DOS end-of-file character (0x1A).
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Callable, List, Optional

from ..errors import StartupError
from ..logging_setup import get_logger
from ..models import ConfigEntry, ParseResult

log = get_logger("nodeconf.ini.parser")

DeleteHook = Callable[[str, str], None]

_LINE_BREAK = re.compile(r"\r\n|\n|\r|\x1a")
_ASSIGN = re.compile(r"\s?=\s?")
_INLINE_COMMENT = re.compile(r" ;|\t;")
_CONTINUATION = re.compile(r"^ \S")


def _strip_comment(text: str) -> str:
    return _INLINE_COMMENT.split(text, maxsplit=1)[0]


def section_name(stripped: str) -> Optional[str]:
    """Name of a `[name]` header line, None for anything else."""
    if not stripped.startswith("["):
        return None
    parts = stripped[1:].split("]")
    if len(parts) == 2 and parts[1] == "":
        return parts[0]
    return None


def split_lines(text: str) -> List[str]:
    """Same line breaks as parse_ini; no trailing empty line for a final newline."""
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def split_assignment(stripped: str) -> List[str]:
    return _ASSIGN.split(stripped)


def is_continuation(line: str) -> bool:
    return bool(_CONTINUATION.match(line)) and len(split_assignment(line.strip())) == 1


def parse_ini(text: str, on_delete: Optional[DeleteHook] = None) -> ParseResult:
    """
    Parse INI text into entries, in file order.

    Duplicates are kept; whoever merges the result decides (later wins).
    `on_delete(section, key)` runs immediately for every `key =` line, so
    a store passing its own delete hook sees deletions interleaved with
    the files it already loaded.
    """
    section = ""
    entries: ParseResult = []

    for line in _LINE_BREAK.split(text):
        stripped = line.strip()

        if stripped.startswith("["):
            name = section_name(stripped)
            if name is not None:
                section = name
            else:
                log.debug("Ignoring malformed section header: %r", stripped)
            continue

        if stripped.startswith(";"):
            continue

        parts = split_assignment(stripped)
        if len(parts) == 1:
            if not _CONTINUATION.match(line):
                continue
            if not entries or entries[-1].section != section:
                continue
            extra = _strip_comment(stripped)
            if not extra:
                continue
            prev = entries[-1]
            entries[-1] = ConfigEntry(section=section, key=prev.key, value=f"{prev.value} {extra}")
            continue

        key, rest = parts[0], parts[1:]
        if key == "":
            # line begins with "="
            continue

        value = _strip_comment("=".join(rest))
        if not value:
            log.debug("Deletion directive: [%s] %s", section, key)
            if on_delete is not None:
                on_delete(section, key)
            continue

        entries.append(ConfigEntry(section=section, key=key, value=value))

    return entries


def read_ini_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read an INI file; a missing file is a startup error carrying the absolute path."""
    abs_path = Path(path).expanduser().resolve()
    try:
        return abs_path.read_text(encoding=encoding)
    except FileNotFoundError:
        err = StartupError(abs_path)
        log.error("%s", err)
        raise err from None


def parse_ini_file(path: Path | str, on_delete: Optional[DeleteHook] = None) -> ParseResult:
    return parse_ini(read_ini_file(path), on_delete=on_delete)


class IniParser:
    """File handle style wrapper around `parse_ini` for one INI file."""

    def __init__(self, filename: Path | str, encoding: str = "utf-8"):
        self.filename = Path(filename)
        self.encoding = encoding

    @staticmethod
    def parse(text: str, on_delete: Optional[DeleteHook] = None) -> ParseResult:
        return parse_ini(text, on_delete=on_delete)

    def read(self, on_delete: Optional[DeleteHook] = None) -> ParseResult:
        return parse_ini(read_ini_file(self.filename, self.encoding), on_delete=on_delete)

    def __str__(self) -> str:
        return f"INI file: {self.filename} ({self.encoding})"
