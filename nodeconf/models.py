from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple, Union
from pydantic import BaseModel, ConfigDict


class _Deleted:
    """Event value for removed entries."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "deleted"

    def __reduce__(self):
        return (_Deleted, ())


DELETED = _Deleted()


class ConfigEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: str
    key: str
    value: str

    @property
    def ident(self) -> Tuple[str, str]:
        return (self.section, self.key)


# Entries of one INI file in the order they were produced.
ParseResult = List[ConfigEntry]


@dataclass(frozen=True)
class ChangeEvent:
    section: str
    key: str
    value: Union[str, _Deleted]
    persist: bool

    @property
    def deleted(self) -> bool:
        return self.value is DELETED
