"""Chart View

Qt host for a :class:`ChartSession`: embeds the matplotlib surface in a
``FigureCanvasQTAgg``, forwards pointer events to the interaction
controller, ticks the lifecycle driver from a ``QTimer`` while transitions
run, and mirrors the side table for pie / scatter charts.
"""

from __future__ import annotations

from typing import Optional

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QHeaderView, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
from PyQt6.QtGui import QColor

from plotgraph.charting.backends import MatplotlibSurface
from plotgraph.charting.normalize import format_value
from plotgraph.charting.session import ChartSession
from plotgraph.config import settings
from plotgraph.services.event_bus import ChartEvent, Event


class ChartView(QWidget):
    def __init__(self, session: ChartSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        surface = session.surface
        if not isinstance(surface, MatplotlibSurface):
            raise TypeError("ChartView requires a MatplotlibSurface")
        self._session = session
        self._surface = surface
        self._canvas = FigureCanvasQTAgg(surface.figure)
        self._table = QTableWidget(0, 0)
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self._table.setVisible(False)
        lay = QVBoxLayout(self)
        lay.addWidget(self._canvas)
        lay.addWidget(self._table)

        self._timer = QTimer(self)
        self._timer.setInterval(settings.ANIMATION_FRAME_MS)
        self._timer.timeout.connect(self._on_frame)
        self._canvas.mpl_connect("motion_notify_event", self._on_motion)
        self._canvas.mpl_connect("figure_leave_event", self._on_leave)

    # Public API ------------------------------------------------------
    @property
    def canvas(self) -> FigureCanvasQTAgg:
        return self._canvas

    @property
    def table(self) -> QTableWidget:
        return self._table

    def attach(self, bus) -> None:
        """Follow render passes published on ``bus``."""
        bus.subscribe(ChartEvent.RENDER_COMPLETED, self._on_render_completed)
        if bus.last(ChartEvent.RENDER_COMPLETED) is not None:
            self.refresh()

    def refresh(self) -> None:
        self._sync_table()
        if self._session.driver.tick():
            self._timer.start()

    # Events ----------------------------------------------------------
    def _on_render_completed(self, _evt: Event) -> None:
        self.refresh()

    def _on_frame(self) -> None:
        if not self._session.driver.tick():
            self._timer.stop()

    def _on_motion(self, event) -> None:  # pragma: no cover - needs real pointer
        current = self._session.current_pass
        if current is None or event.xdata is None or event.ydata is None:
            self._on_leave(event)
            return
        ox, oy = current.geometry.frame.origin
        before = self._session.interaction.hovered_key
        self._session.interaction.pointer_moved(event.xdata - ox, event.ydata - oy)
        if before is not None or self._session.interaction.hovered_key is not None:
            self._session.driver.tick()

    def _on_leave(self, _event) -> None:
        if self._session.interaction.hovered_key is not None:
            self._session.interaction.pointer_leave()
            self._session.driver.tick()

    def resizeEvent(self, event) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        if self._session.current_pass is not None:
            self._session.resize(self.width())

    # Table -----------------------------------------------------------
    def _sync_table(self) -> None:
        current = self._session.current_pass
        keys = self._session.keys
        if current is None or keys is None or not current.geometry.show_table:
            self._table.setVisible(False)
            return
        rows = current.geometry.table
        with_pct = any(r.percentage is not None for r in rows)
        headers = [keys.x, keys.y] + (["Percentage"] if with_pct else []) + ["Color"]
        self._table.setColumnCount(len(headers))
        self._table.setHorizontalHeaderLabels(headers)
        self._table.setRowCount(len(rows))
        for i, row in enumerate(rows):
            cells = [format_value(row.x_value), format_value(row.y_value)]
            if with_pct:
                cells.append("" if row.percentage is None else f"{row.percentage}%")
            for col, text in enumerate(cells):
                self._table.setItem(i, col, QTableWidgetItem(text))
            swatch = QTableWidgetItem("")
            swatch.setBackground(QColor(row.color))
            self._table.setItem(i, len(cells), swatch)
        self._table.setVisible(True)
