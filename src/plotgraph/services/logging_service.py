"""Log capture for a diagnostics panel.

``LoggingService`` is a :class:`logging.Handler` installed on the
``plotgraph`` logger. It keeps the newest records in a bounded buffer and
announces each one on the event bus as ``ChartEvent.LOG_RECORD_ADDED``, so
the host UI can show what the chart pipeline is doing (render passes,
skipped records, mixed value types) without tailing stderr.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from threading import RLock
from typing import Deque, Iterable, List, Optional

from .event_bus import ChartEvent, EventBus

__all__ = ["LogEntry", "LoggingService"]

_PAYLOAD_MESSAGE_CHARS = 120


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEntry":
        return cls(record.levelname, record.name, record.getMessage(), record.created)


class LoggingService(logging.Handler):
    def __init__(self, capacity: int = 500, *, bus: EventBus | None = None, logger_name: str = "plotgraph") -> None:
        super().__init__(level=logging.DEBUG)
        self._buffer: Deque[LogEntry] = deque(maxlen=capacity)
        self._buffer_lock = RLock()
        self._bus = bus
        self._logger = logging.getLogger(logger_name)
        self._publishing = False

    @property
    def attached(self) -> bool:
        return self in self._logger.handlers

    def attach(self, level: int = logging.DEBUG) -> None:
        """Install on the logger; lowers the logger level to ``level`` if needed."""
        if self.attached:
            return
        self._logger.addHandler(self)
        if self._logger.level == logging.NOTSET or self._logger.level > level:
            self._logger.setLevel(level)

    def detach(self) -> None:
        self._logger.removeHandler(self)

    # logging.Handler ---------------------------------------------------
    def emit(self, record: logging.LogRecord) -> None:
        entry = LogEntry.from_record(record)
        with self._buffer_lock:
            self._buffer.append(entry)
        # a LOG_RECORD_ADDED handler that logs must not loop back here
        if self._bus is None or self._publishing:
            return
        self._publishing = True
        try:
            self._bus.publish(
                ChartEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:_PAYLOAD_MESSAGE_CHARS]},
            )
        finally:
            self._publishing = False

    # Queries -----------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._buffer_lock:
            entries = list(self._buffer)
        if limit is None:
            return entries
        return entries[len(entries) - limit :] if limit < len(entries) else entries

    def query(self, *, level: str | None = None, name_contains: str | None = None) -> List[LogEntry]:
        entries: Iterable[LogEntry] = self.recent()
        if level:
            entries = (e for e in entries if e.level == level)
        if name_contains:
            entries = (e for e in entries if name_contains in e.name)
        return list(entries)

    def clear(self) -> None:
        with self._buffer_lock:
            self._buffer.clear()

    def export_jsonl(self, path: str, *, level: str | None = None) -> int:
        """Write matching entries as JSON Lines; returns the line count."""
        lines = [json.dumps(asdict(e), sort_keys=True) for e in self.query(level=level)]
        with open(path, "w", encoding="utf-8") as fh:
            fh.writelines(line + "\n" for line in lines)
        return len(lines)
