"""Optional horizontal ordering hints from a layered (Graphviz dot) pre-pass."""

import json
import logging
from typing import Protocol

import networkx as nx
import pydot

logger = logging.getLogger(__name__)

# Graphviz spacing between adjacent person centers: node width + nodesep, in points
POINTS_PER_SLOT = 72 * (1.0 + 0.5)


class OrderHint(Protocol):
    def suggest_order(self, graph: nx.DiGraph) -> dict[str, float] | None:
        """Relative horizontal keys for person nodes, or None when unavailable."""


class NoHint:
    def suggest_order(self, graph: nx.DiGraph) -> dict[str, float] | None:
        return None


def build_dot(H: nx.DiGraph) -> pydot.Dot:
    """
    Build a pydot graph from a union-node layout graph.

    - Parents appear above children
    - Partners are pinned to the same rank
    - Family nodes are small points between partners and children
    """
    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")
    P.set("nodesep", "0.5")
    P.set("ranksep", "0.6")
    P.set("ordering", "out")

    couples: list[tuple[str, str]] = []

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            P.add_node(pydot.Node(str(node), shape="point", width="0.1", height="0.1", label=""))
            spouses = data.get("spouses", ())
            if len(spouses) == 2:
                couples.append((spouses[0], spouses[1]))
        else:
            fillcolor = "lightblue" if data.get("tone") == "blue" else "moccasin"
            P.add_node(
                pydot.Node(
                    str(node),
                    label=data.get("person_name", str(node)),
                    shape="box",
                    style="rounded,filled",
                    fillcolor=fillcolor,
                    fixedsize="true",
                    width="1.0",
                    height="0.5",
                    fontsize="10",
                )
            )

    for u, v, data in H.edges(data=True):
        if data.get("edge_type") == "spouse_to_family":
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        else:
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    for i, (a, b) in enumerate(couples):
        sg = pydot.Subgraph(f"couple_{i}", rank="same")
        sg.add_node(pydot.Node(str(a)))
        sg.add_node(pydot.Node(str(b)))
        P.add_subgraph(sg)

    return P


class GraphvizOrderHint:
    """Runs Graphviz on the layout graph and reports each person's x, scaled to `step` units."""

    def __init__(self, step: float, prog: str = "dot"):
        self.step = step
        self.prog = prog

    def suggest_order(self, graph: nx.DiGraph) -> dict[str, float] | None:
        if graph.number_of_nodes() == 0:
            return None

        try:
            raw = build_dot(graph).create(prog=self.prog, format="json")
            objects = json.loads(raw).get("objects", [])
        except Exception as exc:
            logger.warning("Layout hint unavailable, using fallback ordering: %s", exc)
            return None

        scale = self.step / POINTS_PER_SLOT
        keys: dict[str, float] = {}
        for obj in objects:
            name = obj.get("name")
            pos = obj.get("pos")
            if not pos or name not in graph or graph.nodes[name].get("node_type") == "family":
                continue
            try:
                keys[name] = float(pos.split(",")[0]) * scale
            except ValueError:
                continue

        return keys or None
