"""Scene construction: rings, title, gene arcs and legend as matplotlib artists."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties, findfont
from matplotlib.patches import Circle, Rectangle, Wedge
from matplotlib.text import Text

from .geometry import ArcGeometry, GeometryEngine, GeometryError
from .models import GeneAnnotation, GenomeMapPayload, MapStyle, Strand

logger = logging.getLogger(__name__)

STRAND_LABELS = {
    Strand.PLUS: "Plus strand (+)",
    Strand.MINUS: "Minus strand (-)",
}

# z-order bands inside the zoomable axes
RING_Z = 1
ARC_Z = 2
TITLE_Z = 3
TOOLTIP_Z = 10


@lru_cache(maxsize=None)
def _resolve_font_family(preferences: tuple[str, ...]) -> str:
    path = findfont(FontProperties(family=list(preferences)), fallback_to_default=True)
    return FontProperties(fname=path).get_name()


def resolve_font_family(preferences: list[str]) -> str:
    """Concrete installed family name for the first available preference."""
    return _resolve_font_family(tuple(preferences))


def figure_pixels(figure: Figure, style: MapStyle) -> tuple[float, float]:
    """Figure size in pixels at the style dpi, whatever dpi the canvas runs at."""
    return figure.get_figwidth() * style.dpi, figure.get_figheight() * style.dpi


@dataclass
class ArcPrimitive:
    """One rendered gene arc with a back-reference to its source gene."""
    index: int
    gene: GeneAnnotation
    geometry: ArcGeometry
    patch: Wedge

    @property
    def strand(self) -> Strand:
        return self.gene.strand

    @property
    def name(self) -> str:
        return self.gene.display_name

    @property
    def product(self) -> str:
        return self.gene.display_product


@dataclass
class LegendEntry:
    """Swatch and label for one strand class."""
    strand: Strand
    swatch: Rectangle
    label: Text


@dataclass
class Scene:
    """Everything drawn for one render pass."""
    rings: list[Circle] = field(default_factory=list)
    title: Text | None = None
    arcs: list[ArcPrimitive] = field(default_factory=list)
    by_strand: dict[Strand, list[ArcPrimitive]] = field(
        default_factory=lambda: {Strand.PLUS: [], Strand.MINUS: []}
    )
    legend: dict[Strand, LegendEntry] = field(default_factory=dict)
    skipped: list[int] = field(default_factory=list)

    def arc_for_gene(self, index: int) -> ArcPrimitive | None:
        for arc in self.arcs:
            if arc.index == index:
                return arc
        return None

    def texts(self) -> list[Text]:
        result = [self.title] if self.title is not None else []
        result.extend(entry.label for entry in self.legend.values())
        return result


class SceneBuilder:
    """Builds the scene for one payload onto the zoomable and legend axes."""

    def __init__(self, geometry: GeometryEngine, style: MapStyle):
        self.geometry = geometry
        self.style = style
        self.font_family = resolve_font_family(style.font_family)

    def build(
        self,
        payload: GenomeMapPayload,
        zoom_ax: Axes,
        legend_ax: Axes,
        colors: dict[Strand, str],
    ) -> Scene:
        scene = Scene()
        self._draw_rings(scene, zoom_ax)
        self._draw_title(scene, zoom_ax, payload.title)
        self._draw_arcs(scene, zoom_ax, payload.genes, colors)
        self._draw_legend(scene, legend_ax, colors)

        logger.info(
            "Built scene: %d arcs, %d skipped, genome length %d",
            len(scene.arcs), len(scene.skipped), payload.genome_length,
        )
        return scene

    def _draw_rings(self, scene: Scene, ax: Axes) -> None:
        for radius in (self.geometry.outer_radius, self.geometry.inner_radius):
            ring = Circle(
                (0, 0),
                radius,
                fill=False,
                edgecolor=self.style.ring_color,
                linewidth=self.style.ring_width,
                zorder=RING_Z,
            )
            ax.add_patch(ring)
            scene.rings.append(ring)

    def _draw_title(self, scene: Scene, ax: Axes, title: str) -> None:
        scene.title = ax.text(
            0,
            0,
            title,
            ha="center",
            va="center",
            fontsize=self.style.title_font_size,
            fontweight="bold",
            fontfamily=self.font_family,
            color="black",
            zorder=TITLE_Z,
        )

    def _draw_arcs(
        self,
        scene: Scene,
        ax: Axes,
        genes: list[GeneAnnotation],
        colors: dict[Strand, str],
    ) -> None:
        for index, gene in enumerate(genes):
            try:
                arc = self.geometry.arc_for(gene)
            except GeometryError as e:
                logger.warning("Skipping gene %d: %s", index, e)
                scene.skipped.append(index)
                continue

            theta1, theta2 = arc.wedge_degrees()
            patch = Wedge(
                (0, 0),
                arc.outer_radius,
                theta1,
                theta2,
                width=arc.outer_radius - arc.inner_radius,
                facecolor=colors[gene.strand],
                edgecolor="none",
                zorder=ARC_Z,
            )
            patch.set_gid(f"gene-{index}")
            ax.add_patch(patch)

            primitive = ArcPrimitive(index=index, gene=gene, geometry=arc, patch=patch)
            scene.arcs.append(primitive)
            scene.by_strand[gene.strand].append(primitive)

    def _draw_legend(self, scene: Scene, ax: Axes, colors: dict[Strand, str]) -> None:
        """Swatch + label per strand; legend axes use pixel units with y pointing down."""
        size = self.style.swatch_size
        row_height = size * 1.75
        for row, strand in enumerate((Strand.PLUS, Strand.MINUS)):
            y = row * row_height
            swatch = Rectangle(
                (0, y),
                size,
                size,
                facecolor=colors[strand],
                edgecolor="none",
                picker=True,
            )
            swatch.set_gid(f"legend-{strand.name.lower()}")
            ax.add_patch(swatch)
            label = ax.text(
                size * 1.5,
                y + size / 2,
                STRAND_LABELS[strand],
                ha="left",
                va="center",
                fontsize=self.style.legend_font_size,
                fontfamily=self.font_family,
                color="black",
            )
            scene.legend[strand] = LegendEntry(strand=strand, swatch=swatch, label=label)
