"""Nesting analysis of closed contours.

This module determines, for every contour recovered from a drawing:
- Its nesting depth (0 = material, 1 = hole, 2 = island inside a hole, ...)
- Its immediate parent (the smallest larger contour that contains it)
- Which contours form extrusion Shapes together

Depth is the number of strictly larger contours whose polygon contains the
contour's centroid (ray casting, even-odd rule).
"""

from dataclasses import dataclass, field

from dxftopo.domain import Contour, Shape, WindingDirection


@dataclass
class ContourNode:
    """A node in the contour nesting tree.

    Attributes:
        index: Index of this contour in the hierarchy's contour list
        is_material: True at even depth, False for voids
        parent: Index of parent contour (None if top level)
        children: Indices of child contours
        depth: Nesting depth (0 for top-level)
    """

    index: int
    is_material: bool
    parent: int | None
    children: list[int]
    depth: int


@dataclass
class ContourHierarchy:
    """Hierarchical classification of the contours in a drawing.

    Attributes:
        contours: Contours sorted largest first, depth filled in
        nesting_tree: ContourNode for each contour index
        outer_index: Index of the outer boundary (None when there are no contours)
    """

    contours: list[Contour]
    nesting_tree: dict[int, ContourNode] = field(default_factory=dict)
    outer_index: int | None = None

    def material(self) -> list[int]:
        return [i for i, node in self.nesting_tree.items() if node.is_material]

    def holes(self) -> list[int]:
        return [i for i, node in self.nesting_tree.items() if not node.is_material]

    def islands(self) -> list[int]:
        """Material contours nested inside a hole (depth 2, 4, ...)."""
        return [
            i for i, node in self.nesting_tree.items() if node.is_material and node.depth >= 2
        ]

    def top_level(self) -> list[int]:
        return [i for i, node in self.nesting_tree.items() if node.depth == 0]

    def has_islands(self) -> bool:
        return len(self.islands()) > 0


def canonical_order_key(contour: Contour) -> tuple[float, float, float, int]:
    """Sort key placing larger contours first, then by position."""
    min_x, min_y, _, _ = contour.bounding_box()
    return (-contour.area(), min_x, min_y, len(contour.points))


class NestingResolver:
    """Resolves containment depth and parent of every contour.

    The resolver is stateless and safe for use in parallel processing.
    """

    def resolve(self, contours: list[Contour]) -> ContourHierarchy:
        """Sort contours and compute their nesting.

        Process:
        1. Sort contours largest first (canonical order)
        2. Count the larger contours containing each centroid
        3. Pick the smallest such contour as parent

        Sets ``depth`` on every contour in place.

        Args:
            contours: Closed contours of one drawing

        Returns:
            ContourHierarchy over the sorted contours
        """
        ordered = sorted(contours, key=canonical_order_key)
        if not ordered:
            return ContourHierarchy(contours=[])

        areas = [c.area() for c in ordered]
        parent_map: dict[int, int | None] = {}
        depths: dict[int, int] = {}

        for idx, contour in enumerate(ordered):
            center = contour.centroid()

            # Only strictly larger contours can enclose this one
            candidates = [
                other_idx
                for other_idx in range(len(ordered))
                if areas[other_idx] > areas[idx]
                and ordered[other_idx].contains_point(center.x, center.y)
            ]

            depths[idx] = len(candidates)
            parent_map[idx] = min(candidates, key=lambda i: areas[i]) if candidates else None

        nesting_tree: dict[int, ContourNode] = {}
        for idx, contour in enumerate(ordered):
            contour.depth = depths[idx]
            nesting_tree[idx] = ContourNode(
                index=idx,
                is_material=depths[idx] % 2 == 0,
                parent=parent_map[idx],
                children=[],
                depth=depths[idx],
            )

        for idx, node in nesting_tree.items():
            if node.parent is not None:
                nesting_tree[node.parent].children.append(idx)

        return ContourHierarchy(
            contours=ordered,
            nesting_tree=nesting_tree,
            outer_index=self._outer_index(ordered),
        )

    @staticmethod
    def _outer_index(contours: list[Contour]) -> int | None:
        """Largest positive-area contour, else the largest by absolute area."""
        positive = [i for i, c in enumerate(contours) if c.signed_area() > 0]
        if positive:
            return max(positive, key=lambda i: contours[i].signed_area())
        if contours:
            return max(range(len(contours)), key=lambda i: contours[i].area())
        return None


def build_shapes(hierarchy: ContourHierarchy) -> list[Shape]:
    """Group material contours with the holes directly inside them.

    Every even-depth contour becomes a Shape wound counter-clockwise; its
    holes are its children one level deeper, wound clockwise. Islands
    inside holes become Shapes of their own.

    Args:
        hierarchy: Resolved hierarchy

    Returns:
        Shapes ordered like the hierarchy's contours
    """
    shapes: list[Shape] = []

    for idx, node in hierarchy.nesting_tree.items():
        if not node.is_material:
            continue

        outer = hierarchy.contours[idx].normalized(WindingDirection.COUNTER_CLOCKWISE)
        holes = [
            hierarchy.contours[child].normalized(WindingDirection.CLOCKWISE)
            for child in node.children
            if hierarchy.nesting_tree[child].depth == node.depth + 1
        ]
        shapes.append(Shape(outer=outer, holes=holes))

    return shapes
