"""Circular genome map renderer and the message handler that drives it."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from matplotlib.axes import Axes
from matplotlib.backend_bases import MouseButton
from matplotlib.figure import Figure
from pydantic import ValidationError

from .export import ExportControls, ExportPipeline, console_notify
from .geometry import GeometryEngine
from .interaction import ColorState, HoverTracker, Tooltip, ZoomPanController
from .models import GenomeMapPayload, MapStyle, Strand, ViewTransform
from .scene import Scene, SceneBuilder, figure_pixels

logger = logging.getLogger(__name__)

LEGEND_WIDTH = 160


class MapContainer:
    """The one figure a renderer draws into."""

    def __init__(self, figure: Figure | None = None, style: MapStyle | None = None):
        self.style = style or MapStyle()
        if figure is None:
            figure = Figure(
                figsize=(self.style.width / self.style.dpi, self.style.height / self.style.dpi),
                dpi=self.style.dpi,
            )
        self.figure = figure

    @property
    def canvas(self):
        return self.figure.canvas

    def clear(self) -> None:
        self.figure.clear()

    def is_empty(self) -> bool:
        return not self.figure.axes and not self.figure.artists and not self.figure.texts

    def redraw(self) -> None:
        self.figure.canvas.draw_idle()


class GenomeMapRenderer:
    """Renders one genome load into a container and handles its interaction.

    A renderer lives for exactly one payload. Loading a new genome means
    destroying this instance and creating another.
    """

    def __init__(
        self,
        container: MapContainer,
        payload: GenomeMapPayload,
        style: MapStyle | None = None,
        output_dir: str | Path = ".",
        notify: Callable[[str], None] = console_notify,
    ):
        self.container = container
        self.payload = payload
        self.style = style or container.style
        self._cids: list[int] = []
        self._destroyed = False

        container.clear()
        figure = container.figure

        self.geometry = GeometryEngine(payload.genome_length, self.style)
        self.zoom_ax = self._create_zoom_axes(figure)
        self.legend_ax = self._create_legend_axes(figure)

        self.colors = ColorState(self.style)
        builder = SceneBuilder(self.geometry, self.style)
        self.scene: Scene = builder.build(payload, self.zoom_ax, self.legend_ax, self.colors.colors)
        self.colors.bind(self.scene)

        self.tooltip = Tooltip(self.zoom_ax, self.style, builder.font_family)
        self.zoom = ZoomPanController(self.zoom_ax, self.style)
        self.hover = HoverTracker(self.scene, self.geometry, self.tooltip)

        self.exporter = ExportPipeline(
            figure,
            self.scene,
            self.colors,
            self.tooltip,
            self.style,
            stem=payload.export_stem,
            output_dir=output_dir,
            notify=notify,
        )
        self.controls: ExportControls | None = None
        if self.style.show_export_controls:
            self.controls = ExportControls(figure, self.exporter, self.style)

        self._connect()
        logger.info(
            "Rendered %s: %d genes over %d bp",
            payload.title or "(untitled)", len(self.scene.arcs), payload.genome_length,
        )

    def _create_zoom_axes(self, figure: Figure) -> Axes:
        ax = figure.add_axes([0, 0, 1, 1])
        ax.set_axis_off()
        # Limits already match the axes shape; datalim keeps circles round
        # if the figure is redrawn at a new size before the limits are re-applied
        ax.set_aspect("equal", adjustable="datalim")
        return ax

    def _create_legend_axes(self, figure: Figure) -> Axes:
        """Fixed axes in the top-left corner, in pixel units with y pointing down."""
        legend_h = self.style.swatch_size * 2.75
        ax = figure.add_axes(self._legend_position(figure))
        ax.set_xlim(0, LEGEND_WIDTH)
        ax.set_ylim(legend_h, 0)
        ax.set_axis_off()
        return ax

    def _legend_position(self, figure: Figure) -> list[float]:
        width, height = figure_pixels(figure, self.style)
        inset = self.style.legend_inset
        legend_h = self.style.swatch_size * 2.75
        return [
            inset / width,
            1 - (inset + legend_h) / height,
            LEGEND_WIDTH / width,
            legend_h / height,
        ]

    def _layout(self) -> None:
        """Re-anchor everything to the current figure size."""
        figure = self.container.figure
        self.zoom.apply()
        self.legend_ax.set_position(self._legend_position(figure))
        if self.controls is not None:
            self.controls.layout()

    def _sync_layout(self) -> None:
        if self.zoom.view_size != self.zoom.applied_size:
            self._layout()

    # -- event wiring -----------------------------------------------------

    def _connect(self) -> None:
        canvas = self.container.canvas
        self._cids = [
            canvas.mpl_connect("motion_notify_event", self._on_motion),
            canvas.mpl_connect("scroll_event", self._on_scroll),
            canvas.mpl_connect("button_press_event", self._on_press),
            canvas.mpl_connect("button_release_event", self._on_release),
            canvas.mpl_connect("figure_leave_event", self._on_leave),
            canvas.mpl_connect("pick_event", self._on_pick),
            canvas.mpl_connect("resize_event", self._on_resize),
        ]

    def _disconnect(self) -> None:
        canvas = self.container.canvas
        for cid in self._cids:
            canvas.mpl_disconnect(cid)
        self._cids = []
        if self.controls is not None:
            self.controls.disconnect()

    def _on_motion(self, event) -> None:
        self._sync_layout()
        if self.zoom.panning:
            self.zoom.pan_to(event.x, event.y)
            self.container.redraw()
            return
        if event.inaxes is not self.zoom_ax:
            changed = self.hover.pointer_left()
        else:
            changed = self.hover.pointer_moved(*self.zoom.to_scene(event.x, event.y))
        if changed:
            self.container.redraw()

    def _on_scroll(self, event) -> None:
        self._sync_layout()
        self.zoom.scroll(event.x, event.y, event.step)
        self.container.redraw()

    def _on_press(self, event) -> None:
        self._sync_layout()
        if event.inaxes is self.zoom_ax and event.button == MouseButton.LEFT:
            self.zoom.begin_pan(event.x, event.y)

    def _on_release(self, event) -> None:
        self.zoom.end_pan()

    def _on_leave(self, event) -> None:
        self.zoom.end_pan()
        if self.hover.pointer_left():
            self.container.redraw()

    def _on_pick(self, event) -> None:
        for strand, entry in self.scene.legend.items():
            if event.artist is entry.swatch:
                self.set_strand_color(strand, self.colors.next_color(strand))
                return

    def _on_resize(self, event) -> None:
        self._layout()
        self.container.redraw()

    # -- public surface ---------------------------------------------------

    @property
    def transform(self) -> ViewTransform:
        return self.zoom.transform

    def set_transform(self, transform: ViewTransform) -> ViewTransform:
        result = self.zoom.set_transform(transform)
        self.container.redraw()
        return result

    def reset_view(self) -> ViewTransform:
        result = self.zoom.reset()
        self.container.redraw()
        return result

    def set_strand_color(self, strand: Strand | str, color: str) -> int:
        """Recolor one strand class in place; geometry, zoom and tooltip are untouched."""
        updated = self.colors.recolor(strand, color)
        self.container.redraw()
        return updated

    def export_svg(self, path: str | Path | None = None):
        return self.exporter.export_svg(path)

    def export_png(self, path: str | Path | None = None):
        return self.exporter.export_png(path)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Drop every binding and artist; in-flight exports still finish."""
        if self._destroyed:
            return
        self._disconnect()
        self.hover.current = None
        self.exporter.shutdown(wait=False)
        self.container.clear()
        self._destroyed = True
        logger.debug("Renderer for %s destroyed", self.payload.title or "(untitled)")


class GenomeMapHost:
    """Receives genome map messages and keeps exactly one live renderer."""

    def __init__(
        self,
        container: MapContainer | None = None,
        style: MapStyle | None = None,
        output_dir: str | Path = ".",
        notify: Callable[[str], None] = console_notify,
    ):
        self.style = style or (container.style if container else MapStyle())
        self.container = container or MapContainer(style=self.style)
        self.output_dir = output_dir
        self.notify = notify
        self.renderer: GenomeMapRenderer | None = None

    def handle_message(self, message: dict[str, Any] | str | bytes) -> GenomeMapRenderer | None:
        """Validate a payload and render it; failures are logged, never raised."""
        try:
            if isinstance(message, (str, bytes)):
                payload = GenomeMapPayload.model_validate_json(message)
            else:
                payload = GenomeMapPayload.model_validate(message)
        except ValidationError as e:
            logger.error("Rejected genome map payload: %s", e)
            return None

        try:
            return self.load(payload)
        except Exception:
            logger.exception("Error building genome map for %s", payload.title or "(untitled)")
            self.container.clear()
            self.renderer = None
            return None

    def load(self, payload: GenomeMapPayload) -> GenomeMapRenderer:
        """Tear down the current renderer and build a fresh one for payload."""
        if self.renderer is not None:
            self.renderer.destroy()
            self.renderer = None
        self.renderer = GenomeMapRenderer(
            self.container,
            payload,
            style=self.style,
            output_dir=self.output_dir,
            notify=self.notify,
        )
        return self.renderer


def render_genome_map(
    data: GenomeMapPayload | dict | str | Path,
    style: MapStyle | None = None,
    output_dir: str | Path = ".",
) -> GenomeMapRenderer:
    """Convenience function to render a genome map headless.

    Args:
        data: GenomeMapPayload, payload dict, or path to a JSON file
        style: Optional style configuration
        output_dir: Directory export buttons write into

    Returns:
        The live renderer
    """
    if isinstance(data, (str, Path)):
        data = GenomeMapPayload.from_json_file(data)
    elif isinstance(data, dict):
        data = GenomeMapPayload.model_validate(data)

    style = style or MapStyle()
    return GenomeMapRenderer(MapContainer(style=style), data, style=style, output_dir=output_dir)
