from __future__ import annotations
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from .config.notifier import Callback, ChangeNotifier, Subscription
from .config.store import LayeredStore, MISSING
from .config.writer import IniFileWriter
from .errors import StoreStateError
from .logging_setup import get_logger

log = get_logger("nodeconf.service")


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


class ConfigService:
    """
    Owns one LayeredStore and serializes every operation through a single
    worker thread. Callers block until their request has been served,
    including the synchronous notification of subscribers on set/delete.

    Requests issued from inside the worker (a subscriber reading the config
    while being notified) run inline instead of being queued behind
    themselves.
    """

    def __init__(
        self,
        ini_files: Iterable[Path | str],
        notifier: Optional[ChangeNotifier] = None,
        writer: Optional[IniFileWriter] = None,
    ):
        self.ini_files: List[Path] = [Path(f) for f in ini_files]
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self.writer = writer
        self._state = ServiceState.UNINITIALIZED
        self._store: Optional[LayeredStore] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._worker_ident: Optional[int] = None

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def write_filename(self) -> Optional[Path]:
        return self._store.write_filename if self._store is not None else None

    def start(self) -> "ConfigService":
        if self._state is not ServiceState.UNINITIALIZED:
            raise StoreStateError(f"config service cannot start from state {self._state.value}")
        log.info("Starting config service with %d file(s)", len(self.ini_files))
        self._store = LayeredStore.load(self.ini_files, notifier=self.notifier, writer=self.writer)
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="nodeconf",
            initializer=self._mark_worker,
        )
        self._state = ServiceState.RUNNING
        return self

    def stop(self) -> None:
        if self._state is not ServiceState.RUNNING:
            return
        self._state = ServiceState.STOPPED
        if threading.get_ident() == self._worker_ident:
            # called by a subscriber; the worker cannot join itself
            self._executor.shutdown(wait=False)
        else:
            # queued requests are still served
            self._executor.shutdown(wait=True)
        log.info("Config service stopped")

    def __enter__(self) -> "ConfigService":
        if self._state is ServiceState.UNINITIALIZED:
            self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def _mark_worker(self) -> None:
        self._worker_ident = threading.get_ident()

    def _call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        if self._state is not ServiceState.RUNNING:
            raise StoreStateError(f"config service is {self._state.value}")
        if threading.get_ident() == self._worker_ident:
            return fn(*args, **kwargs)
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            raise StoreStateError("config service is stopped") from e
        return future.result()

    # === Query surface ===
    def all(self):
        return self._call(self._store.all)

    def get(self, section: str, key=MISSING, default=None):
        return self._call(self._store.get, section, key, default)

    def set(self, section: str, key: str, value: str, persist: bool = True) -> Optional[str]:
        return self._call(self._store.set, section, key, value, persist)

    def delete(self, section: str, key: str, persist: bool = True) -> str:
        return self._call(self._store.delete, section, key, persist)

    def register(self, callback: Callback, owner: Any = None) -> Subscription:
        if self._state is not ServiceState.RUNNING:
            raise StoreStateError(f"config service is {self._state.value}")
        return self.notifier.register(callback, owner)
