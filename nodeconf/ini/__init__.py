from .parser import IniParser, parse_ini, parse_ini_file, read_ini_file

__all__ = [
    "IniParser",
    "parse_ini",
    "parse_ini_file",
    "read_ini_file",
]
