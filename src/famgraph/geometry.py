"""Connector geometry: partner stubs, union dots, drops, branch bars and child risers."""

from famgraph.models import Dot, Segment, UnionNode

BRANCH_DROP = 110.0  # union point to branch bar
AVATAR_CLEARANCE = 40.0  # risers stop this far above a child's center


def emit_geometry(
    unions: list[UnionNode],
    positions: dict[str, tuple[float, float]],
    union_positions: dict[str, tuple[float, float]],
) -> tuple[list[Segment], list[Dot]]:
    """
    Line segments and connector dots for every positioned union.

    Unions without a position are not drawn; children without a position get
    no riser. The branch bar spans the children and the union x, so a single
    child off to one side is still joined to the drop; a single child directly
    below the union gets no bar.
    """
    segments: list[Segment] = []
    dots: list[Dot] = []

    for union in unions:
        if union.id not in union_positions:
            continue
        ux, uy = union_positions[union.id]

        for partner_id in union.partner_ids:
            if partner_id in positions:
                px, py = positions[partner_id]
                segments.append(Segment(px, py, ux, uy))
        dots.append(Dot(ux, uy))

        children = [positions[c] for c in union.child_ids if c in positions]
        if not children:
            continue

        branch_y = uy + BRANCH_DROP
        segments.append(Segment(ux, uy, ux, branch_y))

        # The bar also reaches the drop so an off-center child stays connected
        left = min([ux, *(cx for cx, _ in children)])
        right = max([ux, *(cx for cx, _ in children)])
        if right > left:
            segments.append(Segment(left, branch_y, right, branch_y))

        for cx, cy in children:
            segments.append(Segment(cx, branch_y, cx, cy - AVATAR_CLEARANCE))

    return segments, dots
