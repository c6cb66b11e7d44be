"""
__init__.py für config Modul.
"""

from .merger import ConfigMerger
from .notifier import ChangeNotifier, Subscription
from .store import LayeredStore
from .writer import IniFileWriter

__all__ = [
    "ConfigMerger",
    "ChangeNotifier",
    "Subscription",
    "LayeredStore",
    "IniFileWriter",
]
