# core/progress.py
"""
Progress sinks receive Progress/Message/Error events keyed by a connection id.

Events for one connection id must arrive in the order they were emitted;
nothing is promised across ids.
"""

import threading
from collections import defaultdict
from colorama import Fore

from .logger import ComponentLogger


class ProgressSink:
    """Push channel for copy progress. Subclasses override the three events."""

    def progress(self, connection_id: str, percent: int):
        raise NotImplementedError

    def message(self, connection_id: str, text: str):
        raise NotImplementedError

    def error(self, connection_id: str, text: str):
        raise NotImplementedError


class ConsoleProgressSink(ProgressSink):
    """Writes events to the terminal, one prefixed line per event."""

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress
        self._locks = defaultdict(threading.Lock)
        self._guard = threading.Lock()
        self._loggers = {}

    def _logger(self, connection_id):
        with self._guard:
            if connection_id not in self._loggers:
                self._loggers[connection_id] = ComponentLogger(connection_id or "copy")
            return self._loggers[connection_id], self._locks[connection_id]

    def progress(self, connection_id, percent):
        if not self.show_progress:
            return
        log, lock = self._logger(connection_id)
        with lock:
            log.info(f"{Fore.CYAN}{percent:3d}%")

    def message(self, connection_id, text):
        log, lock = self._logger(connection_id)
        with lock:
            log.info(text)

    def error(self, connection_id, text):
        log, lock = self._logger(connection_id)
        with lock:
            log.error(text)
