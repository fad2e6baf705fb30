"""Matplotlib drawing backend.

The surface keeps a single :class:`matplotlib.figure.Figure` with one
borderless axes that spans the whole figure in pixel units, y growing
downward. It can be embedded in a Qt canvas (see
:mod:`plotgraph.views.chart_view`) or exported headless. Each ``draw``
clears the axes and redraws the scene. This is cheap at chart sizes and
keeps the surface stateless with respect to shape identity.
"""

from __future__ import annotations

import math

from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, Rectangle, Wedge

from plotgraph.config import settings

from .interaction import apply_hover_emphasis
from .types import ArcSlice, AxisSpec, BarRect, LegendSwatch, Marker, Polyline, Scene, Shape, TextLabel

__all__ = ["MatplotlibSurface"]

_AXIS_COLOR = "#000000"
_TICK_SIZE = 6
_TICK_FONT = 9
_TITLE_FONT = 11


class MatplotlibSurface:
    """RenderSurface implementation drawing onto a matplotlib Figure."""

    def __init__(self, *, dpi: int = settings.DEFAULT_DPI, figure: Figure | None = None) -> None:
        self.figure = figure if figure is not None else Figure(dpi=dpi)
        self._ax = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self._last_scene: Scene | None = None
        self.draw_count = 0

    @property
    def last_scene(self) -> Scene | None:
        return self._last_scene

    # RenderSurface -----------------------------------------------------
    def draw(self, scene: Scene) -> None:
        frame = scene.frame
        width, height = frame.outer_width, frame.outer_height
        dpi = self.figure.dpi
        self.figure.set_size_inches(max(width, 1) / dpi, max(height, 1) / dpi, forward=True)
        ax = self._ax
        ax.clear()
        ax.set_axis_off()
        ax.set_xlim(0, max(width, 1))
        ax.set_ylim(max(height, 1), 0)  # pixel convention: y grows downward

        ox, oy = frame.origin
        for axis in scene.axes:
            self._draw_axis(axis, ox, oy, frame.height)
        for shape in scene.shapes:
            if scene.hover_key is not None and shape.key == scene.hover_key:
                shape = apply_hover_emphasis(shape)
            self._draw_shape(shape, ox, oy)
        if scene.tooltip.visible:
            tx, ty = scene.tooltip.position
            ax.text(
                tx + ox,
                ty + oy,
                scene.tooltip.content,
                color="#ffffff",
                fontsize=10,
                bbox={"boxstyle": "round", "fc": "black", "alpha": 0.5, "ec": "none"},
                zorder=10,
            )
        self._last_scene = scene
        self.draw_count += 1
        canvas = self.figure.canvas
        if hasattr(canvas, "draw_idle"):
            canvas.draw_idle()

    # Shapes ------------------------------------------------------------
    def _draw_shape(self, shape: Shape, ox: float, oy: float) -> None:
        ax = self._ax
        if isinstance(shape, Marker):
            ax.add_patch(Circle((shape.cx + ox, shape.cy + oy), max(shape.r, 0.0), fc=shape.fill, alpha=shape.opacity, zorder=3))
        elif isinstance(shape, Polyline):
            if shape.points:
                xs = [p[0] + ox for p in shape.points]
                ys = [p[1] + oy for p in shape.points]
                ax.add_line(
                    Line2D(xs, ys, color=shape.stroke, linewidth=shape.stroke_width, alpha=shape.opacity, zorder=2)
                )
        elif isinstance(shape, BarRect):
            ax.add_patch(
                Rectangle(
                    (shape.x + ox, shape.y + oy),
                    shape.width,
                    shape.height,
                    fc=shape.fill,
                    alpha=shape.opacity,
                    zorder=2,
                )
            )
        elif isinstance(shape, ArcSlice):
            if shape.end_angle > shape.start_angle and shape.outer_radius > 0:
                # clockwise-from-noon angles map to theta = angle - 90deg once y is flipped
                ax.add_patch(
                    Wedge(
                        (shape.cx + ox, shape.cy + oy),
                        shape.outer_radius,
                        math.degrees(shape.start_angle) - 90.0,
                        math.degrees(shape.end_angle) - 90.0,
                        width=(shape.outer_radius - shape.inner_radius) if shape.inner_radius > 0 else None,
                        fc=shape.fill,
                        alpha=shape.opacity,
                        zorder=2,
                    )
                )
        elif isinstance(shape, TextLabel):
            ax.text(
                shape.x + ox,
                shape.y + oy,
                shape.text,
                color=shape.color,
                fontsize=shape.font_size,
                ha="center",
                va="center",
                alpha=shape.opacity,
                zorder=4,
            )
        elif isinstance(shape, LegendSwatch):
            ax.add_patch(
                Rectangle((shape.x + ox, shape.y + oy), shape.size, shape.size, fc=shape.fill, alpha=shape.opacity, zorder=4)
            )
            ax.text(
                shape.x + ox + settings.LEGEND_TEXT_GAP,
                shape.y + oy + shape.size / 2,
                shape.label,
                fontsize=shape.font_size,
                va="center",
                color="#000000",
                alpha=shape.opacity,
                zorder=4,
            )

    def _draw_axis(self, axis: AxisSpec, ox: float, oy: float, plot_height: float) -> None:
        ax = self._ax
        if axis.orient == "bottom":
            y = oy + plot_height
            ax.add_line(Line2D([ox, ox + axis.length], [y, y], color=_AXIS_COLOR, linewidth=1))
            for tick in axis.ticks:
                x = ox + tick.position
                ax.add_line(Line2D([x, x], [y, y + _TICK_SIZE], color=_AXIS_COLOR, linewidth=1))
                ax.text(x, y + _TICK_SIZE + 2, tick.label, ha="center", va="top", fontsize=_TICK_FONT)
            ax.text(ox + axis.length / 2, y + 30, axis.title, ha="center", va="center", fontsize=_TITLE_FONT)
        else:
            ax.add_line(Line2D([ox, ox], [oy, oy + axis.length], color=_AXIS_COLOR, linewidth=1))
            for tick in axis.ticks:
                y = oy + tick.position
                ax.add_line(Line2D([ox - _TICK_SIZE, ox], [y, y], color=_AXIS_COLOR, linewidth=1))
                ax.text(ox - _TICK_SIZE - 2, y, tick.label, ha="right", va="center", fontsize=_TICK_FONT)
            ax.text(ox - 40, oy + axis.length / 2, axis.title, ha="center", va="center", rotation=90, fontsize=_TITLE_FONT)

    # Export ------------------------------------------------------------
    def export(self, path: str, *, format: str = "png", dpi: int = 120) -> None:
        """Export the last drawn scene to disk.

        Args:
            path: Destination file path (existing directory required).
            format: 'png' or 'svg'.
            dpi: Raster resolution for PNG.
        """
        if format.lower() not in {"png", "svg"}:
            raise ValueError("format must be 'png' or 'svg'")
        self.figure.savefig(path, format=format.lower(), dpi=dpi if format.lower() == "png" else None)
