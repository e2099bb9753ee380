"""Command-line interface for circular genome maps."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .models import GeneAnnotation, GenomeMapPayload, MapStyle, Strand, ViewTransform

app = typer.Typer(
    name="genome-map",
    help="Circular genome map renderer",
    no_args_is_help=True,
)
console = Console()

EXPORT_SUFFIXES = {".svg", ".png"}


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show debug logging")
    ] = False,
) -> None:
    """Circular genome map renderer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_payload(input_file: Path) -> GenomeMapPayload:
    if not input_file.exists():
        console.print(f"[red]Error:[/red] File not found: {input_file}")
        raise typer.Exit(1)
    try:
        return GenomeMapPayload.from_json_file(input_file)
    except (ValidationError, json.JSONDecodeError) as e:
        console.print(f"[red]Error parsing payload:[/red] {e}")
        raise typer.Exit(1)


def _build_style(
    style_file: Optional[Path],
    plus_color: Optional[str],
    minus_color: Optional[str],
    width: Optional[int],
    height: Optional[int],
    **overrides,
) -> MapStyle:
    try:
        style = MapStyle.from_json_file(style_file) if style_file else MapStyle()
        updates = {
            "plus_color": plus_color,
            "minus_color": minus_color,
            "width": width,
            "height": height,
            **overrides,
        }
        updates = {k: v for k, v in updates.items() if v is not None}
        # Re-validate so CLI overrides go through the same checks as the file
        return MapStyle.model_validate({**style.model_dump(), **updates})
    except (ValidationError, OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Invalid style:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def render(
    input_file: Annotated[
        Path, typer.Argument(help="Payload JSON file (genes, genomeLength, filename)")
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output image file (SVG or PNG)"),
    ] = None,
    style_file: Annotated[
        Optional[Path], typer.Option("--style", help="Style JSON file")
    ] = None,
    plus_color: Annotated[
        Optional[str], typer.Option("--plus-color", help="Plus strand color")
    ] = None,
    minus_color: Annotated[
        Optional[str], typer.Option("--minus-color", help="Minus strand color")
    ] = None,
    width: Annotated[
        Optional[int], typer.Option("--width", help="Viewport width in pixels")
    ] = None,
    height: Annotated[
        Optional[int], typer.Option("--height", help="Viewport height in pixels")
    ] = None,
    scale: Annotated[
        float, typer.Option("--scale", help="Zoom factor applied before export")
    ] = 1.0,
) -> None:
    """Render a genome map to SVG and/or PNG.

    Without --output both <filename>.svg and <filename>.png are written next
    to the payload.
    """
    from .renderer import render_genome_map

    payload = _load_payload(input_file)
    style = _build_style(
        style_file, plus_color, minus_color, width, height, show_export_controls=False
    )

    if output is not None and output.suffix.lower() not in EXPORT_SUFFIXES:
        console.print(f"[red]Error:[/red] Unsupported output format: {output.suffix or '(none)'}")
        raise typer.Exit(1)

    skipped = payload.wrapping_genes()
    if skipped:
        console.print(f"[yellow]Skipping {len(skipped)} genes that wrap the origin[/yellow]")

    console.print(f"Rendering {len(payload.genes)} genes...")
    renderer = render_genome_map(payload, style=style, output_dir=input_file.parent)
    try:
        if scale != 1.0:
            renderer.set_transform(ViewTransform(scale=scale))

        if output is None:
            futures = [renderer.export_svg(), renderer.export_png()]
        elif output.suffix.lower() == ".svg":
            futures = [renderer.export_svg(output)]
        else:
            futures = [renderer.export_png(output)]

        for future in futures:
            try:
                path = future.result()
            except Exception as e:
                console.print(f"[red]Export failed:[/red] {e}")
                raise typer.Exit(1)
            console.print(f"[green]Saved to:[/green] {path}")
    finally:
        renderer.destroy()


@app.command()
def show(
    input_file: Annotated[
        Path, typer.Argument(help="Payload JSON file (genes, genomeLength, filename)")
    ],
    style_file: Annotated[
        Optional[Path], typer.Option("--style", help="Style JSON file")
    ] = None,
    plus_color: Annotated[
        Optional[str], typer.Option("--plus-color", help="Plus strand color")
    ] = None,
    minus_color: Annotated[
        Optional[str], typer.Option("--minus-color", help="Minus strand color")
    ] = None,
    width: Annotated[
        Optional[int], typer.Option("--width", help="Viewport width in pixels")
    ] = None,
    height: Annotated[
        Optional[int], typer.Option("--height", help="Viewport height in pixels")
    ] = None,
    export_dir: Annotated[
        Optional[Path], typer.Option("--export-dir", help="Where the download buttons write")
    ] = None,
) -> None:
    """Open the genome map in an interactive window."""
    import matplotlib.pyplot as plt

    from .renderer import GenomeMapHost, MapContainer

    payload = _load_payload(input_file)
    style = _build_style(style_file, plus_color, minus_color, width, height)

    figure = plt.figure(figsize=(style.width / style.dpi, style.height / style.dpi), dpi=style.dpi)
    host = GenomeMapHost(
        MapContainer(figure, style),
        style=style,
        output_dir=export_dir or input_file.parent,
    )
    host.load(payload)
    console.print("Scroll to zoom, drag to pan, click a legend swatch to change its color.")
    plt.show()


@app.command()
def validate(
    input_file: Annotated[
        Path, typer.Argument(help="Payload JSON file to validate")
    ],
) -> None:
    """Validate a genome map payload."""
    payload = _load_payload(input_file)

    table = Table(title="Genome Map Payload Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Filename", payload.filename or "(none)")
    table.add_row("Genome length", f"{payload.genome_length:,} bp")
    table.add_row("Genes", str(len(payload.genes)))

    counts = payload.strand_counts()
    table.add_row("Plus strand", str(counts[Strand.PLUS]))
    table.add_row("Minus strand", str(counts[Strand.MINUS]))

    contigs = sorted({g.contig for g in payload.genes})
    table.add_row("Contigs", ", ".join(contigs) if contigs else "-")

    out_of_range = sum(
        1 for g in payload.genes if g.start < 0 or g.end > payload.genome_length
    )
    table.add_row("Out of range", str(out_of_range))

    console.print(table)

    wrapping = payload.wrapping_genes()
    if wrapping:
        wrap_table = Table(title="Genes wrapping the origin (will be skipped)")
        wrap_table.add_column("Index", justify="right")
        wrap_table.add_column("Name", style="cyan")
        wrap_table.add_column("Start", justify="right")
        wrap_table.add_column("End", justify="right")
        for i in wrapping:
            gene = payload.genes[i]
            wrap_table.add_row(str(i), gene.display_name, f"{gene.start:,}", f"{gene.end:,}")
        console.print(wrap_table)
        console.print("[yellow]Validation passed with warnings[/yellow]")
    else:
        console.print("[green]Validation passed![/green]")


@app.command()
def init(
    output: Annotated[
        Path, typer.Option("-o", "--output", help="Output JSON file")
    ] = Path("genome_map.json"),
) -> None:
    """Create a template payload file."""
    example = GenomeMapPayload(
        filename="example_genome",
        genome_length=50000,
        genes=[
            GeneAnnotation(
                contig="contig_1",
                start=1200,
                end=2700,
                strand=Strand.PLUS,
                name="dnaA",
                product="chromosomal replication initiator protein DnaA",
            ),
            GeneAnnotation(
                contig="contig_1",
                start=3100,
                end=4200,
                strand=Strand.PLUS,
                name="dnaN",
                product="DNA polymerase III subunit beta",
            ),
            GeneAnnotation(
                contig="contig_1",
                start=18000,
                end=21500,
                strand=Strand.MINUS,
                gene_id="cds-0003",
                product="hypothetical protein",
            ),
            GeneAnnotation(
                contig="contig_1",
                start=30500,
                end=33800,
                strand=Strand.MINUS,
                name="recF",
            ),
        ],
    )

    example.to_json_file(output)
    console.print(f"[green]Created template:[/green] {output}")
    console.print(f"Edit the file and run: genome-map render {output}")


if __name__ == "__main__":
    app()
