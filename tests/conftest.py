"""Pytest configuration for the genome map renderer."""

from __future__ import annotations

from pathlib import Path
import sys

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from genome_map.models import GenomeMapPayload, MapStyle  # noqa: E402
from genome_map.renderer import GenomeMapHost, GenomeMapRenderer, MapContainer  # noqa: E402

from tests._helpers import make_gene  # noqa: E402


@pytest.fixture
def style() -> MapStyle:
    return MapStyle()


@pytest.fixture
def container(style) -> MapContainer:
    return MapContainer(style=style)


@pytest.fixture
def small_payload() -> GenomeMapPayload:
    return GenomeMapPayload.model_validate({
        "filename": "sample",
        "genomeLength": 1000,
        "genes": [
            make_gene(0, 250, "+", name="alpha", product="DNA gyrase subunit A"),
            make_gene(250, 500, "-", name="beta",
                      product="ATP-dependent Clp protease proteolytic subunit"),
            make_gene(600, 900, "+", attributes="cds-0003"),
        ],
    })


@pytest.fixture
def renderer(container, small_payload, style, tmp_path):
    r = GenomeMapRenderer(container, small_payload, style=style, output_dir=tmp_path)
    yield r
    r.destroy()


@pytest.fixture
def host(container, style, tmp_path) -> GenomeMapHost:
    return GenomeMapHost(container, style=style, output_dir=tmp_path)
