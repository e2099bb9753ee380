"""Data models for circular genome maps."""

import json
from enum import Enum
from pathlib import Path

from matplotlib.colors import is_color_like
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

UNKNOWN_GENE_NAME = "Unknown"
DEFAULT_EXPORT_STEM = "genome_map"


class Strand(str, Enum):
    PLUS = "+"
    MINUS = "-"


class GeneAnnotation(BaseModel):
    """Single annotated gene on the genome."""

    contig: str = Field(..., description="Contig/sequence name")
    start: int = Field(..., description="Start position")
    end: int = Field(..., description="End position")
    strand: Strand = Field(..., description="Strand orientation")
    name: str | None = Field(default=None, description="Gene name for display")
    gene_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gene_id", "attributes", "ID"),
        description="Upstream feature identifier, used when name is missing",
    )
    product: str | None = Field(default=None, description="Product description")

    @property
    def display_name(self) -> str:
        return self.name or self.gene_id or UNKNOWN_GENE_NAME

    @property
    def display_product(self) -> str:
        return self.product or ""


class GenomeMapPayload(BaseModel):
    """Inbound render request: genes plus genome context."""

    model_config = ConfigDict(populate_by_name=True)

    genes: list[GeneAnnotation] = Field(default_factory=list)
    genome_length: int = Field(..., gt=0, alias="genomeLength")
    filename: str | None = Field(default=None, description="Label shown in the centre")

    @field_validator("genes", mode="before")
    @classmethod
    def _decode_genes(cls, value):
        # Upstream may send the gene table as an already-encoded JSON string
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"genes is not valid JSON: {e}") from e
        if value is None:
            return []
        return value

    @property
    def title(self) -> str:
        return self.filename or ""

    @property
    def export_stem(self) -> str:
        return self.filename or DEFAULT_EXPORT_STEM

    def strand_counts(self) -> dict[Strand, int]:
        counts = {Strand.PLUS: 0, Strand.MINUS: 0}
        for gene in self.genes:
            counts[gene.strand] += 1
        return counts

    def wrapping_genes(self) -> list[int]:
        """Indices of genes whose end lies before their start."""
        return [i for i, g in enumerate(self.genes) if g.end < g.start]

    @classmethod
    def from_json_file(cls, path: str | Path) -> "GenomeMapPayload":
        """Load from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_json_file(self, path: str | Path, indent: int = 2) -> None:
        """Save to JSON file using the wire field names."""
        with open(path, "w") as f:
            f.write(self.model_dump_json(indent=indent, by_alias=True, exclude_none=True))


class ViewTransform(BaseModel):
    """Pan/zoom state applied to the zoomable part of the scene."""

    model_config = ConfigDict(frozen=True)

    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = Field(default=1.0, gt=0)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Scene point -> offset from the viewport centre."""
        return self.translate_x + self.scale * x, self.translate_y + self.scale * y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        """Offset from the viewport centre -> scene point."""
        return (sx - self.translate_x) / self.scale, (sy - self.translate_y) / self.scale


class MapStyle(BaseModel):
    """Visual and interaction configuration."""

    # Colors
    plus_color: str = Field(default="red", description="Default plus strand color")
    minus_color: str = Field(default="blue", description="Default minus strand color")
    palette: list[str] = Field(
        default_factory=lambda: [
            "red", "blue", "#2e8b57", "#ff8c00", "#8a2be2", "#008b8b", "#b8860b", "black",
        ],
        min_length=1,
        description="Colors cycled through by clicking a legend swatch",
    )
    ring_color: str = Field(default="black")
    ring_width: float = Field(default=1.5)
    background_color: str = Field(default="white")

    # Viewport
    width: int = Field(default=800, gt=0, description="Viewport width in pixels")
    height: int = Field(default=800, gt=0, description="Viewport height in pixels")
    dpi: int = Field(default=100, gt=0)

    # Geometry
    track_width: float = Field(default=20, gt=0, description="Gene track thickness")
    label_margin: float = Field(default=40, ge=0, description="Space kept outside the ring")

    # Fonts
    font_family: list[str] = Field(default_factory=lambda: ["Arial", "Helvetica", "DejaVu Sans"])
    title_font_size: float = Field(default=20)
    legend_font_size: float = Field(default=12)
    tooltip_name_font_size: float = Field(default=12)
    tooltip_product_font_size: float = Field(default=10)
    tooltip_product_color: str = Field(default="#333333")

    # Tooltip
    product_max_chars: int = Field(default=25, ge=4)
    tooltip_line_offset: float = Field(default=15, description="Gap between tooltip lines")

    # Legend
    legend_inset: float = Field(default=20, description="Legend offset from the top-left corner")
    swatch_size: float = Field(default=20)

    # Interaction
    min_scale: float = Field(default=0.5, gt=0)
    max_scale: float = Field(default=10.0, gt=0)
    zoom_step: float = Field(default=1.2, gt=1, description="Scale factor per scroll notch")

    # Export
    raster_scale: int = Field(default=2, ge=2, description="Supersampling factor for PNG")
    show_export_controls: bool = Field(default=True)

    @field_validator("plus_color", "minus_color", "ring_color", "background_color",
                     "tooltip_product_color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        if not is_color_like(value):
            raise ValueError(f"not a color: {value!r}")
        return value

    @field_validator("palette")
    @classmethod
    def _check_palette(cls, value: list[str]) -> list[str]:
        for color in value:
            if not is_color_like(color):
                raise ValueError(f"not a color: {color!r}")
        return value

    @property
    def viewport_size(self) -> tuple[int, int]:
        return self.width, self.height

    def default_colors(self) -> dict[Strand, str]:
        return {Strand.PLUS: self.plus_color, Strand.MINUS: self.minus_color}

    def clamp_scale(self, scale: float) -> float:
        return min(max(scale, self.min_scale), self.max_scale)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "MapStyle":
        """Load from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_json_file(self, path: str | Path, indent: int = 2) -> None:
        """Save to JSON file."""
        with open(path, "w") as f:
            f.write(self.model_dump_json(indent=indent))
