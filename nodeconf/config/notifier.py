"""
Synchronous fan-out of config change events.

Subscribers are plain callables taking a ChangeEvent. notify() runs them one
after another in the calling thread and only returns once every subscriber
has finished, so a slow subscriber blocks the writer. There is no timeout.

A subscription may be tied to an owner object. The owner is referenced
weakly and the subscription disappears when the owner is garbage collected.
The callback itself must not keep the owner alive (e.g. a bound method of
the owner would), otherwise cancel() is the only way out.
"""

from __future__ import annotations
import threading
import weakref
from typing import Any, Callable, List, Optional

from ..models import ChangeEvent
from ..logging_setup import get_logger

log = get_logger("nodeconf.config.notifier")

Callback = Callable[[ChangeEvent], Any]


class Subscription:
    def __init__(self, notifier: "ChangeNotifier", callback: Callback):
        self.callback = callback
        self._notifier = notifier
        self._owner_ref: Optional[weakref.ref] = None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._notifier._discard(self)

    def _owner_gone(self, _ref: weakref.ref) -> None:
        log.debug("Subscriber owner collected, dropping %r", self.callback)
        self.cancel()


class ChangeNotifier:
    def __init__(self):
        self._subs: List[Subscription] = []
        self._lock = threading.Lock()

    @property
    def subscribers(self) -> int:
        with self._lock:
            return len(self._subs)

    def register(self, callback: Callback, owner: Any = None) -> Subscription:
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        sub = Subscription(self, callback)
        if owner is not None:
            sub._owner_ref = weakref.ref(owner, sub._owner_gone)
        with self._lock:
            self._subs.append(sub)
        log.debug("Registered subscriber %r (owner=%r)", callback, owner)
        return sub

    def notify(self, event: ChangeEvent) -> None:
        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            if sub.active:
                sub.callback(event)

    def _discard(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)
