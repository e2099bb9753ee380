"""Tests for payload and style models."""

import json

import pytest
from pydantic import ValidationError

from genome_map.models import (
    GeneAnnotation,
    GenomeMapPayload,
    MapStyle,
    Strand,
    ViewTransform,
)

from tests._helpers import make_gene


class TestGeneAnnotation:
    def test_name_falls_back_to_identifier(self):
        gene = GeneAnnotation.model_validate(make_gene(1, 10, attributes="cds-17"))
        assert gene.display_name == "cds-17"

    def test_name_falls_back_to_unknown(self):
        gene = GeneAnnotation.model_validate(make_gene(1, 10))
        assert gene.display_name == "Unknown"

    def test_empty_name_is_never_displayed(self):
        gene = GeneAnnotation.model_validate(make_gene(1, 10, name="", gene_id="g1"))
        assert gene.display_name == "g1"

    def test_missing_product_is_empty(self):
        gene = GeneAnnotation.model_validate(make_gene(1, 10, name="dnaA", product=None))
        assert gene.display_product == ""

    def test_unknown_strand_rejected(self):
        with pytest.raises(ValidationError):
            GeneAnnotation.model_validate(make_gene(1, 10, strand="."))

    def test_missing_start_rejected(self):
        with pytest.raises(ValidationError):
            GeneAnnotation.model_validate({"contig": "chr", "end": 10, "strand": "+"})


class TestGenomeMapPayload:
    def test_wire_names(self):
        payload = GenomeMapPayload.model_validate(
            {"genes": [make_gene(0, 10)], "genomeLength": 100, "filename": "ecoli"}
        )
        assert payload.genome_length == 100
        assert payload.genes[0].strand is Strand.PLUS
        assert payload.title == "ecoli"

    def test_python_names(self):
        payload = GenomeMapPayload(genome_length=100)
        assert payload.genes == []
        assert payload.export_stem == "genome_map"
        assert payload.title == ""

    def test_genes_as_json_string(self):
        genes = json.dumps([make_gene(0, 10, "-"), make_gene(20, 30, "+")])
        payload = GenomeMapPayload.model_validate({"genes": genes, "genomeLength": 100})
        assert [g.strand for g in payload.genes] == [Strand.MINUS, Strand.PLUS]

    def test_undecodable_genes_rejected(self):
        with pytest.raises(ValidationError, match="not valid JSON"):
            GenomeMapPayload.model_validate({"genes": "[{oops", "genomeLength": 100})

    def test_genome_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            GenomeMapPayload.model_validate({"genes": [], "genomeLength": 0})

    def test_wrapping_genes_and_counts(self):
        payload = GenomeMapPayload.model_validate({
            "genomeLength": 1000,
            "genes": [make_gene(900, 100, "+"), make_gene(0, 10, "-"), make_gene(5, 8, "-")],
        })
        assert payload.wrapping_genes() == [0]
        assert payload.strand_counts() == {Strand.PLUS: 1, Strand.MINUS: 2}

    def test_json_file_uses_wire_names(self, tmp_path):
        path = tmp_path / "payload.json"
        GenomeMapPayload(genome_length=500, filename="x", genes=[]).to_json_file(path)
        raw = json.loads(path.read_text())
        assert raw["genomeLength"] == 500
        assert GenomeMapPayload.from_json_file(path).genome_length == 500


class TestMapStyle:
    def test_defaults(self):
        style = MapStyle()
        assert style.default_colors() == {Strand.PLUS: "red", Strand.MINUS: "blue"}
        assert (style.min_scale, style.max_scale) == (0.5, 10.0)
        assert style.raster_scale >= 2

    def test_rejects_bad_color(self):
        with pytest.raises(ValidationError):
            MapStyle(plus_color="not-a-color")

    def test_rejects_low_supersampling(self):
        with pytest.raises(ValidationError):
            MapStyle(raster_scale=1)

    def test_clamp_scale(self):
        style = MapStyle()
        assert style.clamp_scale(0.1) == 0.5
        assert style.clamp_scale(3) == 3
        assert style.clamp_scale(50) == 10

    def test_json_file(self, tmp_path):
        path = tmp_path / "style.json"
        MapStyle(minus_color="#00ff00", width=640).to_json_file(path)
        loaded = MapStyle.from_json_file(path)
        assert loaded.minus_color == "#00ff00"
        assert loaded.width == 640


class TestViewTransform:
    def test_invert_undoes_apply(self):
        t = ViewTransform(translate_x=30, translate_y=-12, scale=2.5)
        assert t.invert(*t.apply(4, 8)) == pytest.approx((4, 8))

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ViewTransform().scale = 2
