"""Tests for the command-line interface."""

import json

from typer.testing import CliRunner

from genome_map.cli import app

from tests._helpers import make_gene

runner = CliRunner()


def write_payload(path, genes, genome_length=1000, filename="cli_genome"):
    path.write_text(json.dumps({"genes": genes, "genomeLength": genome_length, "filename": filename}))
    return path


def test_init_then_validate(tmp_path):
    path = tmp_path / "template.json"
    result = runner.invoke(app, ["init", "-o", str(path)])
    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text())["genomeLength"] == 50000

    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0, result.output
    assert "Validation passed" in result.output


def test_validate_reports_wrapping_genes(tmp_path):
    path = write_payload(tmp_path / "p.json", [make_gene(900, 100, "+", name="wrapper")])
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0, result.output
    assert "wrapper" in result.output
    assert "warnings" in result.output


def test_validate_missing_file(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_validate_malformed_payload(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"genes": "[oops", "genomeLength": 10}))
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1


def test_render_svg(tmp_path):
    path = write_payload(tmp_path / "p.json", [make_gene(0, 500, "+"), make_gene(500, 700, "-")])
    out = tmp_path / "out" / "map.svg"
    result = runner.invoke(app, ["render", str(path), "-o", str(out), "--plus-color", "green"])
    assert result.exit_code == 0, result.output
    assert out.exists()
    assert "Download" not in out.read_text(encoding="utf-8")


def test_render_defaults_to_both_formats(tmp_path):
    path = write_payload(tmp_path / "p.json", [make_gene(0, 500, "+")])
    result = runner.invoke(app, ["render", str(path), "--scale", "2"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "cli_genome.svg").exists()
    assert (tmp_path / "cli_genome.png").exists()


def test_render_rejects_unknown_format(tmp_path):
    path = write_payload(tmp_path / "p.json", [])
    result = runner.invoke(app, ["render", str(path), "-o", str(tmp_path / "map.jpg")])
    assert result.exit_code == 1


def test_render_rejects_bad_color(tmp_path):
    path = write_payload(tmp_path / "p.json", [])
    result = runner.invoke(app, ["render", str(path), "--minus-color", "nope"])
    assert result.exit_code == 1
