"""Circular genome map rendering with pan/zoom, hover tooltips and export."""

from .geometry import ArcGeometry, GeometryEngine, GeometryError
from .models import GeneAnnotation, GenomeMapPayload, MapStyle, Strand, ViewTransform
from .renderer import GenomeMapHost, GenomeMapRenderer, MapContainer, render_genome_map

__all__ = [
    "ArcGeometry",
    "GeneAnnotation",
    "GenomeMapHost",
    "GenomeMapPayload",
    "GenomeMapRenderer",
    "GeometryEngine",
    "GeometryError",
    "MapContainer",
    "MapStyle",
    "Strand",
    "ViewTransform",
    "render_genome_map",
]
