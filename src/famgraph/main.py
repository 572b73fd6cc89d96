"""
1) Read the person and `_marriage.md` records under the family data folder.
2) Assign ids to people that lack one and write them back to their files.
3) Build the nested ancestry tree and the person/union graph from the root.
4) Lay the graph out generation by generation (Graphviz hint when available).
5) Write the tree, graph and layout payloads as JSON, optionally plot the layout.
"""

import json
import logging
from pathlib import Path

import typer

from famgraph.build import build_family
from famgraph.config import get_settings
from famgraph.graph import build_layout_graph
from famgraph.hints import GraphvizOrderHint, build_dot
from famgraph.layout import NODE_STEP
from famgraph.plotting import plot_layout

app = typer.Typer(
    name="famgraph",
    help="Family record collection to ancestry tree, graph and layout",
    add_completion=False,
)


def write_json(path: Path, payload: dict):
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


@app.callback()
def cli():
    """Family record collection to ancestry tree, graph and layout."""


@app.command()
def build(
    source: Path = typer.Option(None, "--source", "-s", help="Family record folder (FAMILY_DATA_DIR)"),
    root: str = typer.Option(None, "--root", "-r", help="Full name of the root person (FAMILY_ROOT_PERSON)"),
    out: Path = typer.Option(None, "--out", "-o", help="Output folder for JSON payloads (SITE_OUTPUT_DIR)"),
    plot: Path = typer.Option(None, "--plot", help="Save a rendering of the layout (png, svg or pdf)"),
    dot: Path = typer.Option(None, "--dot", help="Save the Graphviz DOT source of the layout graph"),
    hint: bool = typer.Option(None, "--hint/--no-hint", help="Use Graphviz ordering hints (LAYOUT_HINT)"),
    write_ids: bool = typer.Option(None, "--write-ids/--no-write-ids", help="Persist generated ids (WRITE_IDS)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Build the tree, graph and layout payloads for a family record folder."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()
    source = source or settings.family_data_dir
    root = root if root is not None else settings.family_root_person
    out = out or settings.site_output_dir
    hint = settings.layout_hint if hint is None else hint
    write_ids = settings.write_ids if write_ids is None else write_ids

    typer.echo(f"Reading family records: {source}")
    result = build_family(
        source,
        root_person_name=root,
        hint=GraphvizOrderHint(step=NODE_STEP) if hint else None,
        write_ids=write_ids,
    )

    if result.error:
        typer.echo(f"  {result.error}")

    graph = result.graph_payload
    typer.echo(
        f"  Found {result.tree['totalPeople']} people; graph has {len(graph['people'])} people "
        f"and {len(graph['unions'])} unions over {graph['maxGeneration'] + 1 if graph['people'] else 0} generations"
    )

    if result.warnings:
        typer.echo(f"  Found {len(result.warnings)} warnings:")
        for w in result.warnings[:10]:
            typer.echo(f"    - {w}")
        if len(result.warnings) > 10:
            typer.echo(f"    ... and {len(result.warnings) - 10} more")

    out.mkdir(parents=True, exist_ok=True)
    write_json(out / "family-tree.json", result.tree)
    write_json(out / "family-graph.json", graph)
    write_json(out / "family-layout.json", result.layout_payload)
    typer.echo(f"Payloads written to: {out}")

    if dot:
        dot.write_text(build_dot(build_layout_graph(result.graph)).to_string(), encoding="utf-8")
        typer.echo(f"DOT source saved to {dot}")

    if plot:
        plot_layout(result.layout_payload, plot)
        typer.echo(f"Layout saved to {plot}")

    typer.echo("Done!")


if __name__ == "__main__":
    app()
