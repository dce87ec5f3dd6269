# spurilo/visualize/plot.py
"""
Elevation profile rendering for spurilo

The profile is drawn in pixel space: one pixel per `scale_ratio` meters of
distance, one pixel per meter of elevation, elevation measured up from the
bottom edge of the image.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle

from spurilo.analyze.profile import ElevationSample
from spurilo.config import RenderSettings
from spurilo.errors import RenderError

Point = tuple[float, float]
LineSegment = tuple[Point, Point]


class Canvas:
    """
    Fixed-size raster surface with a top-left origin and y pointing down.
    """

    def __init__(self, width: int, height: int, *, dpi: int = 100):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        FigureCanvasAgg(self.figure)
        self.ax = self.figure.add_axes((0, 0, 1, 1))
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_axis_off()

    @classmethod
    def create(cls, width: int, height: int) -> "Canvas":
        return cls(width, height)

    def fill(self, rect: tuple[float, float, float, float], color: str) -> None:
        x0, y0, x1, y1 = rect
        self.ax.add_patch(Rectangle((x0, y0), x1 - x0, y1 - y0,
                                    facecolor=color, edgecolor="none", zorder=0))

    def stroke_line(self, p1: Point, p2: Point, color: str, width: float = 1.0) -> None:
        # width in pixels; matplotlib wants points
        self.ax.add_line(Line2D([p1[0], p2[0]], [p1[1], p2[1]],
                                color=color, linewidth=width * 72.0 / self.dpi, zorder=1))

    def finish(self) -> None:
        self.figure.canvas.draw()

    def save_to_file(self, path: Path) -> None:
        self.figure.savefig(path, dpi=self.dpi)


def canvas_size(distance: float, settings: RenderSettings) -> tuple[int, int]:
    return max(1, int(distance / settings.scale_ratio)), int(settings.height_px)


def profile_to_canvas(profile: Sequence[ElevationSample], scale_ratio: float,
                      height: float) -> list[LineSegment]:
    """Map consecutive profile samples to canvas line segments."""
    pts = [(s.distance / scale_ratio, height - s.elevation) for s in profile]
    return list(zip(pts, pts[1:]))


def draw_profile(profile: Sequence[ElevationSample], distance: float, out_path: Path,
                 settings: RenderSettings) -> Path:
    """
    Draw `profile` and write it to `out_path` (format from the suffix).

    Raises:
      RenderError if the image cannot be drawn or written.
    """
    width, height = canvas_size(distance, settings)
    try:
        canvas = Canvas.create(width, height)
        canvas.fill((0, 0, width, height), settings.background)
        for p1, p2 in profile_to_canvas(profile, settings.scale_ratio, height):
            canvas.stroke_line(p1, p2, settings.line_color, settings.line_width)
        canvas.finish()
        canvas.save_to_file(out_path)
    except (OSError, ValueError) as e:
        raise RenderError(f"could not write {out_path}: {e}") from e
    return out_path
