"""Pan/zoom, hover tooltip and live recoloring for a rendered genome map."""

import logging
from enum import Enum

from matplotlib.axes import Axes
from matplotlib.colors import is_color_like
from matplotlib.transforms import offset_copy

from .geometry import GeometryEngine
from .models import MapStyle, Strand, ViewTransform
from .scene import TOOLTIP_Z, ArcPrimitive, Scene

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def truncate_product(product: str, max_chars: int = 25) -> str:
    """Shorten a product description to at most max_chars, ending in an ellipsis."""
    if len(product) <= max_chars:
        return product
    return product[: max_chars - len(ELLIPSIS)] + ELLIPSIS


class ZoomPanController:
    """Owns the single canonical view transform of the zoomable axes.

    Viewport coordinates are offsets from the viewport centre in display
    units at the style dpi, y up. The visible extent follows the axes size,
    so a resized figure shows more or less of the scene without stretching.
    Every gesture computes an absolute transform, so replaying an event
    never compounds.
    """

    def __init__(self, ax: Axes, style: MapStyle):
        self.ax = ax
        self.style = style
        self.transform = ViewTransform()
        self._pan_anchor: tuple[tuple[float, float], ViewTransform] | None = None
        self.applied_size: tuple[float, float] | None = None
        self.apply()

    @property
    def view_size(self) -> tuple[float, float]:
        bbox = self.ax.bbox
        ratio = self.style.dpi / self.ax.figure.dpi
        return bbox.width * ratio, bbox.height * ratio

    def apply(self) -> None:
        width, height = self.view_size
        self.applied_size = (width, height)
        t = self.transform
        self.ax.set_xlim((-width / 2 - t.translate_x) / t.scale, (width / 2 - t.translate_x) / t.scale)
        self.ax.set_ylim((-height / 2 - t.translate_y) / t.scale, (height / 2 - t.translate_y) / t.scale)

    def set_transform(self, transform: ViewTransform) -> ViewTransform:
        clamped = self.style.clamp_scale(transform.scale)
        if clamped != transform.scale:
            transform = transform.model_copy(update={"scale": clamped})
        self.transform = transform
        self.apply()
        return transform

    def reset(self) -> ViewTransform:
        self._pan_anchor = None
        return self.set_transform(ViewTransform())

    def to_viewport(self, x: float, y: float) -> tuple[float, float]:
        """Display pixels -> viewport offset."""
        bbox = self.ax.bbox
        width, height = self.view_size
        return (
            ((x - bbox.x0) / bbox.width - 0.5) * width,
            ((y - bbox.y0) / bbox.height - 0.5) * height,
        )

    def to_scene(self, x: float, y: float) -> tuple[float, float]:
        """Display pixels -> scene coordinates under the current transform."""
        return self.transform.invert(*self.to_viewport(x, y))

    def zoom_at(self, x: float, y: float, scale: float) -> ViewTransform:
        """Zoom to an absolute scale keeping the scene point under (x, y) fixed."""
        vx, vy = self.to_viewport(x, y)
        sx, sy = self.transform.invert(vx, vy)
        scale = self.style.clamp_scale(scale)
        return self.set_transform(
            ViewTransform(translate_x=vx - scale * sx, translate_y=vy - scale * sy, scale=scale)
        )

    def scroll(self, x: float, y: float, steps: float) -> ViewTransform:
        return self.zoom_at(x, y, self.transform.scale * self.style.zoom_step ** steps)

    def begin_pan(self, x: float, y: float) -> None:
        self._pan_anchor = (self.to_viewport(x, y), self.transform)

    def pan_to(self, x: float, y: float) -> ViewTransform | None:
        if self._pan_anchor is None:
            return None
        (ax0, ay0), start = self._pan_anchor
        vx, vy = self.to_viewport(x, y)
        return self.set_transform(
            start.model_copy(
                update={
                    "translate_x": start.translate_x + vx - ax0,
                    "translate_y": start.translate_y + vy - ay0,
                }
            )
        )

    def end_pan(self) -> None:
        self._pan_anchor = None

    @property
    def panning(self) -> bool:
        return self._pan_anchor is not None


class TooltipState(str, Enum):
    IDLE = "idle"
    SHOWING = "showing"


class Tooltip:
    """The one shared hover overlay: gene name over a truncated product line."""

    def __init__(self, ax: Axes, style: MapStyle, font_family: str):
        self.style = style
        self.state = TooltipState.IDLE
        self.owner: int | None = None
        self.name_text = ax.text(
            0, 0, "",
            ha="center",
            va="baseline",
            fontsize=style.tooltip_name_font_size,
            fontweight="bold",
            fontfamily=font_family,
            color="black",
            zorder=TOOLTIP_Z,
            visible=False,
        )
        self.product_text = ax.text(
            0, 0, "",
            ha="center",
            va="baseline",
            fontsize=style.tooltip_product_font_size,
            fontfamily=font_family,
            color=style.tooltip_product_color,
            zorder=TOOLTIP_Z,
            visible=False,
            # Points, like the font sizes, so the gap does not scale with zoom
            transform=offset_copy(ax.transData, fig=ax.figure, y=-style.tooltip_line_offset, units="points"),
        )
        self.name_text.set_gid("tooltip-name")
        self.product_text.set_gid("tooltip-product")

    @property
    def artists(self):
        return self.name_text, self.product_text

    def show(self, arc: ArcPrimitive, x: float, y: float) -> None:
        """Place the overlay at scene point (x, y) for the given arc."""
        self.name_text.set_text(arc.name)
        self.name_text.set_position((x, y))
        self.name_text.set_visible(True)

        product = truncate_product(arc.product, self.style.product_max_chars)
        self.product_text.set_text(product)
        self.product_text.set_position((x, y))
        self.product_text.set_visible(bool(product))

        self.state = TooltipState.SHOWING
        self.owner = arc.index

    def move(self, x: float, y: float) -> None:
        if self.state is TooltipState.SHOWING:
            self.name_text.set_position((x, y))
            self.product_text.set_position((x, y))

    def hide(self) -> None:
        for text in self.artists:
            text.set_visible(False)
        self.state = TooltipState.IDLE
        self.owner = None


class HoverTracker:
    """Turns pointer positions into enter/leave transitions per arc."""

    def __init__(self, scene: Scene, geometry: GeometryEngine, tooltip: Tooltip):
        self.scene = scene
        self.geometry = geometry
        self.tooltip = tooltip
        self.current: ArcPrimitive | None = None

    def hit_test(self, x: float, y: float) -> ArcPrimitive | None:
        """Topmost arc under a scene point; later arcs are drawn on top."""
        for arc in reversed(self.scene.arcs):
            if self.geometry.contains(arc.geometry, x, y):
                return arc
        return None

    def pointer_moved(self, x: float, y: float) -> bool:
        """Update hover state for a pointer at scene point (x, y). Returns True if anything changed."""
        hit = self.hit_test(x, y)
        if hit is self.current:
            if hit is None:
                return False
            if self.tooltip.owner == hit.index:
                self.tooltip.move(x, y)
            else:
                # Overlay was dropped underneath us, e.g. by an export
                self.enter(hit, x, y)
            return True
        if self.current is not None:
            self.leave(self.current)
        if hit is not None:
            self.enter(hit, x, y)
        return True

    def enter(self, arc: ArcPrimitive, x: float, y: float) -> None:
        self.current = arc
        self.tooltip.show(arc, x, y)
        logger.debug("Hover enter gene %d (%s)", arc.index, arc.name)

    def leave(self, arc: ArcPrimitive) -> None:
        if self.current is arc:
            self.current = None
        if self.tooltip.owner == arc.index:
            self.tooltip.hide()
            logger.debug("Hover leave gene %d", arc.index)

    def pointer_left(self) -> bool:
        if self.current is None:
            return False
        self.leave(self.current)
        return True


class ColorState:
    """Strand color assignment for one renderer, kept in sync with the drawn artists."""

    def __init__(self, style: MapStyle, scene: Scene | None = None):
        self.style = style
        self.scene = scene
        self.colors: dict[Strand, str] = style.default_colors()

    def bind(self, scene: Scene) -> None:
        self.scene = scene
        self.sync_legend()

    def __getitem__(self, strand: Strand) -> str:
        return self.colors[Strand(strand)]

    def recolor(self, strand: Strand | str, color: str) -> int:
        """Assign a new color to a strand class; returns the number of arcs updated."""
        strand = Strand(strand)
        if not is_color_like(color):
            raise ValueError(f"not a color: {color!r}")
        self.colors[strand] = color

        if self.scene is None:
            return 0
        entry = self.scene.legend.get(strand)
        if entry is not None:
            entry.swatch.set_facecolor(color)
        arcs = self.scene.by_strand[strand]
        for arc in arcs:
            arc.patch.set_facecolor(color)

        logger.info("Recolored %d %s-strand arcs to %s", len(arcs), strand.value, color)
        return len(arcs)

    def next_color(self, strand: Strand | str) -> str:
        """The palette color after the strand's current one."""
        palette = self.style.palette
        current = self.colors[Strand(strand)]
        try:
            position = palette.index(current)
        except ValueError:
            return palette[0]
        return palette[(position + 1) % len(palette)]

    def sync_legend(self) -> None:
        if self.scene is None:
            return
        for strand, entry in self.scene.legend.items():
            entry.swatch.set_facecolor(self.colors[strand])
