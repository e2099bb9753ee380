"""Genome coordinate to circle geometry."""

import logging
import math
from dataclasses import dataclass

from .models import GeneAnnotation, MapStyle

logger = logging.getLogger(__name__)

TAU = 2 * math.pi


class GeometryError(ValueError):
    """Raised when a feature cannot be placed on the circle."""


@dataclass(frozen=True)
class ArcGeometry:
    """Angular extent of one gene on the track, angles clockwise from the top."""
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2

    def wedge_degrees(self) -> tuple[float, float]:
        """(theta1, theta2) for matplotlib, which counts degrees anticlockwise from +x."""
        return 90.0 - math.degrees(self.end_angle), 90.0 - math.degrees(self.start_angle)


class GeometryEngine:
    """Maps genome positions onto a circular track of fixed radii."""

    def __init__(self, genome_length: int, style: MapStyle):
        if genome_length <= 0:
            raise GeometryError(f"genome length must be positive, got {genome_length}")
        self.genome_length = genome_length
        self.style = style

        width, height = style.viewport_size
        self.outer_radius = min(width, height) / 2 - style.label_margin
        self.inner_radius = self.outer_radius - style.track_width
        if self.inner_radius <= 0:
            raise GeometryError(
                f"viewport {width}x{height} leaves no room for a "
                f"{style.track_width} wide track with margin {style.label_margin}"
            )

    def angle_of(self, position: int | float) -> float:
        """Linear map from [0, genome_length] to [0, 2*pi]."""
        return TAU * (position / self.genome_length)

    def arc_for(self, gene: GeneAnnotation) -> ArcGeometry:
        """Arc covering one gene.

        Raises:
            GeometryError: if the gene wraps across the origin (end < start).
        """
        if gene.end < gene.start:
            raise GeometryError(
                f"gene {gene.display_name} on {gene.contig} wraps the origin "
                f"(start={gene.start}, end={gene.end})"
            )
        if gene.start < 0 or gene.end > self.genome_length:
            logger.debug(
                "Gene %s lies outside [0, %d]: %d-%d",
                gene.display_name, self.genome_length, gene.start, gene.end,
            )
        return ArcGeometry(
            start_angle=self.angle_of(gene.start),
            end_angle=self.angle_of(gene.end),
            inner_radius=self.inner_radius,
            outer_radius=self.outer_radius,
        )

    @staticmethod
    def locate(x: float, y: float) -> tuple[float, float]:
        """Scene point -> (radius, angle), angle clockwise from the top in [0, 2*pi)."""
        radius = math.hypot(x, y)
        angle = math.atan2(x, y) % TAU
        return radius, angle

    @staticmethod
    def point_at(radius: float, angle: float) -> tuple[float, float]:
        """(radius, angle) -> scene point (y up)."""
        return radius * math.sin(angle), radius * math.cos(angle)

    def contains(self, arc: ArcGeometry, x: float, y: float) -> bool:
        """Hit-test a scene point against one arc."""
        radius, angle = self.locate(x, y)
        if not arc.inner_radius <= radius <= arc.outer_radius:
            return False
        if arc.sweep >= TAU:
            return True
        # Out-of-range genes can extend past 2*pi or below zero
        for candidate in (angle - TAU, angle, angle + TAU):
            if arc.start_angle <= candidate <= arc.end_angle:
                return True
        return False
