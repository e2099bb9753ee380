"""SVG and PNG export of the current view."""

import io
import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

import matplotlib
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.image import imsave
from matplotlib.widgets import Button
from rich.console import Console

from .interaction import ColorState, Tooltip
from .models import MapStyle
from .scene import Scene, figure_pixels, resolve_font_family

logger = logging.getLogger(__name__)

console = Console(stderr=True)

SVG_RC = {
    # Keep text as <text> elements with the pinned family
    "svg.fonttype": "none",
    # Stable element ids so repeated exports are byte-identical
    "svg.hashsalt": "genome-map",
}
SVG_METADATA = {"Date": None, "Creator": None}


def console_notify(message: str) -> None:
    console.print(f"[red]Export failed:[/red] {message}")


class ExportPipeline:
    """Prepares the live figure and writes it out as SVG or PNG.

    Preparation and snapshotting run synchronously on the caller's thread;
    only encoding and file writing are handed to the worker pool.
    """

    def __init__(
        self,
        figure: Figure,
        scene: Scene,
        colors: ColorState,
        tooltip: Tooltip,
        style: MapStyle,
        stem: str,
        output_dir: str | Path = ".",
        notify: Callable[[str], None] = console_notify,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.figure = figure
        self.scene = scene
        self.colors = colors
        self.tooltip = tooltip
        self.style = style
        self.stem = stem
        self.output_dir = Path(output_dir)
        self.notify = notify
        self.font_family = resolve_font_family(style.font_family)
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="genome-map-export")
        self._owns_executor = executor is None
        self._control_axes: list[Axes] = []

    @property
    def svg_path(self) -> Path:
        return self.output_dir / f"{self.stem}.svg"

    @property
    def png_path(self) -> Path:
        return self.output_dir / f"{self.stem}.png"

    def register_controls(self, *axes: Axes) -> None:
        """Axes hidden while a snapshot is taken (e.g. the export buttons)."""
        self._control_axes.extend(axes)

    def prepare(self) -> None:
        """Sync swatches, drop the tooltip, pin fonts. Zoom/pan are left as they are."""
        self.colors.sync_legend()
        self.tooltip.hide()
        for text in self.scene.texts():
            text.set_fontfamily(self.font_family)
        for text in self.tooltip.artists:
            text.set_fontfamily(self.font_family)

    def _snapshot(self, render: Callable[[], bytes]) -> bytes:
        hidden = [ax for ax in self._control_axes if ax.get_visible()]
        for ax in hidden:
            ax.set_visible(False)
        try:
            return render()
        finally:
            for ax in hidden:
                ax.set_visible(True)

    def render_svg(self) -> str:
        """Prepare and serialise the current view as an SVG document."""
        self.prepare()

        def render() -> bytes:
            buf = io.BytesIO()
            with matplotlib.rc_context(SVG_RC):
                self.figure.savefig(
                    buf,
                    format="svg",
                    facecolor=self.style.background_color,
                    metadata=SVG_METADATA,
                )
            return buf.getvalue()

        return self._snapshot(render).decode("utf-8")

    def render_rgba(self) -> np.ndarray:
        """Prepare and rasterise the current view at the supersampling factor."""
        self.prepare()
        dpi = self.figure.dpi * self.style.raster_scale
        # Agg truncates the pixel size, so match it when reshaping
        width = int(self.figure.get_figwidth() * dpi)

        def render() -> bytes:
            buf = io.BytesIO()
            self.figure.savefig(buf, format="rgba", dpi=dpi, facecolor="white")
            return buf.getvalue()

        data = self._snapshot(render)
        pixels = np.frombuffer(data, dtype=np.uint8)
        return pixels.reshape(-1, width, 4).copy()

    def export_svg(self, path: str | Path | None = None) -> Future:
        """Write the SVG; the returned future resolves to the written path."""
        target = Path(path) if path is not None else self.svg_path
        try:
            document = self.render_svg()
        except Exception as e:
            return self._failed(e, target)
        return self._submit(_write_text, document, target)

    def export_png(self, path: str | Path | None = None) -> Future:
        """Write the PNG; the returned future resolves to the written path."""
        target = Path(path) if path is not None else self.png_path
        try:
            pixels = self.render_rgba()
        except Exception as e:
            return self._failed(e, target)
        return self._submit(_encode_png, pixels, target)

    def _submit(self, fn, payload, target: Path) -> Future:
        return self._executor.submit(self._run, fn, payload, target)

    def _run(self, fn, payload, target: Path) -> Path:
        try:
            written = fn(payload, target)
        except Exception as e:
            self._report_failure(e, target)
            raise
        logger.info("Exported %s", written)
        return written

    def _failed(self, error: Exception, target: Path) -> Future:
        self._report_failure(error, target)
        future: Future = Future()
        future.set_exception(error)
        return future

    def _report_failure(self, error: Exception, target: Path) -> None:
        logger.error("Export to %s failed", target, exc_info=error)
        self.notify(f"{target.name}: {error}")

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)


def _write_text(document: str, target: Path) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(document, encoding="utf-8")
    return target


def _encode_png(pixels: np.ndarray, target: Path) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    imsave(target, pixels, format="png")
    return target


class ExportControls:
    """'Download SVG' / 'Download PNG' buttons in the top-right corner."""

    def __init__(self, figure: Figure, pipeline: ExportPipeline, style: MapStyle):
        self.figure = figure
        self.pipeline = pipeline
        self.style = style
        svg_rect, png_rect = self._rects()
        self.png_ax = figure.add_axes(png_rect)
        self.svg_ax = figure.add_axes(svg_rect)
        self.svg_button = Button(self.svg_ax, "Download SVG")
        self.png_button = Button(self.png_ax, "Download PNG")
        self._cids = [
            self.svg_button.on_clicked(lambda event: self.pipeline.export_svg()),
            self.png_button.on_clicked(lambda event: self.pipeline.export_png()),
        ]
        pipeline.register_controls(self.svg_ax, self.png_ax)

    def _rects(self) -> tuple[list[float], list[float]]:
        # 120x28 px buttons, 10 px from the edges and from each other
        width, height = figure_pixels(self.figure, self.style)
        button_w, button_h, gap = 120 / width, 28 / height, 10 / width
        top = 1 - 10 / height - button_h
        return (
            [1 - 2 * (gap + button_w), top, button_w, button_h],
            [1 - gap - button_w, top, button_w, button_h],
        )

    def layout(self) -> None:
        """Keep the buttons pinned to the top-right corner at their pixel size."""
        svg_rect, png_rect = self._rects()
        self.svg_ax.set_position(svg_rect)
        self.png_ax.set_position(png_rect)

    @property
    def axes(self) -> tuple[Axes, Axes]:
        return self.svg_ax, self.png_ax

    def disconnect(self) -> None:
        self.svg_button.disconnect(self._cids[0])
        self.png_button.disconnect(self._cids[1])
        self.svg_button.disconnect_events()
        self.png_button.disconnect_events()
