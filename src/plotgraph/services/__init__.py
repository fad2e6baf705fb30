"""Headless services shared by the chart core and its host UI."""

from .event_bus import ChartEvent, Event, EventBus  # noqa: F401
from .logging_service import LogEntry, LoggingService  # noqa: F401
