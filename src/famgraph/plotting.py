"""Visualization of a computed family layout."""

from pathlib import Path

from matplotlib.collections import LineCollection
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from famgraph.layout import NODE_RADIUS

TONE_COLORS = {"blue": "lightblue", "orange": "moccasin"}
TONE_EDGES = {"blue": "steelblue", "orange": "darkorange"}


def draw_layout(layout: dict, fig: Figure | None = None) -> Figure:
    """
    Draw a layout payload onto a matplotlib figure.

    Connector segments and union dots are drawn beneath person circles;
    each person shows initials inside and full name underneath.
    """
    width = layout["worldWidth"]
    height = layout["worldHeight"]
    if fig is None:
        fig = Figure(figsize=(min(width / 100, 60), min(height / 100, 60)))

    ax = fig.add_subplot(1, 1, 1)
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)  # screen coordinates, generation 0 at the top
    ax.set_aspect("equal")
    ax.axis("off")

    lines = [((s["x1"], s["y1"]), (s["x2"], s["y2"])) for s in layout["segments"]]
    ax.add_collection(LineCollection(lines, colors="darkgray", linewidths=1.2, zorder=1))

    if layout["dots"]:
        ax.scatter(
            [d["x"] for d in layout["dots"]],
            [d["y"] for d in layout["dots"]],
            s=12,
            color="dimgray",
            zorder=2,
        )

    for node in layout["nodes"]:
        tone = node.get("ringTone", "blue")
        ax.add_patch(
            Circle(
                (node["x"], node["y"]),
                NODE_RADIUS,
                facecolor=TONE_COLORS.get(tone, "lightgray"),
                edgecolor=TONE_EDGES.get(tone, "gray"),
                linewidth=2,
                linestyle="--" if node.get("deceased") else "-",
                zorder=3,
            )
        )
        ax.text(node["x"], node["y"], node["initials"], ha="center", va="center", fontsize=9, zorder=4)
        ax.text(
            node["x"],
            node["y"] + NODE_RADIUS + 8,
            node["fullName"],
            ha="center",
            va="top",
            fontsize=6,
            zorder=4,
        )

    fig.tight_layout()
    return fig


def plot_layout(layout: dict, output_path: Path | None = None):
    """
    Plot a layout payload.

    Args:
        layout: Payload from LayoutResult.to_payload()
        output_path: Path to save the image (format from extension). If None, displays interactively.
    """
    if output_path:
        output_path = Path(output_path)
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        fig = draw_layout(layout)
        fig.savefig(output_path, format=ext, dpi=150)
        return output_path

    import matplotlib.pyplot as plt

    fig = plt.figure()
    draw_layout(layout, fig)
    plt.show()
    return None
