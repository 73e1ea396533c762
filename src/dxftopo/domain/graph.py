"""Planar graph records.

Nodes and directed edges live in flat lists and refer to each other by
index. Edges are created in forward/reverse pairs at adjacent indices, so
the twin of edge ``i`` is ``i ^ 1``.
"""

import math
from dataclasses import dataclass, field

from dxftopo.domain.contour import Point2D


@dataclass(frozen=True, slots=True)
class Node:
    """A merged endpoint.

    Attributes:
        id: Index in the graph's node list
        position: Representative position of all merged endpoints
    """

    id: int
    position: Point2D


@dataclass(frozen=True)
class DirectedEdge:
    """One direction of one segment.

    Attributes:
        origin: Node id the edge leaves
        target: Node id the edge arrives at
        points: Samples from origin to target
        angle: Departure direction at origin, toward the second sample
        area_correction: Signed chord-to-curve area walked in this direction
        segment: Position of the segment in the builder's input list
        source_index: Primitive index of the segment
    """

    origin: int
    target: int
    points: tuple[Point2D, ...]
    angle: float
    area_correction: float = 0.0
    segment: int = -1
    source_index: int | None = None


def twin(edge_id: int) -> int:
    """Index of the opposite direction of the same segment."""
    return edge_id ^ 1


def departure_angle(origin: Point2D, toward: Point2D) -> float:
    """Direction from origin toward a point, in (-pi, pi]."""
    return math.atan2(toward.y - origin.y, toward.x - origin.x)


@dataclass
class PlanarGraph:
    """Nodes, paired directed edges and the angular fan at each node.

    Attributes:
        nodes: Merged endpoints
        edges: Directed edges; 2k and 2k+1 are the two directions of one segment
        fans: For each node id, outgoing edge ids sorted counter-clockwise
        fan_position: For each edge id, its index in its origin's fan
        excluded: Input segment positions left out because both ends share a node
    """

    nodes: list[Node] = field(default_factory=list)
    edges: list[DirectedEdge] = field(default_factory=list)
    fans: dict[int, list[int]] = field(default_factory=dict)
    fan_position: list[int] = field(default_factory=list)
    excluded: list[int] = field(default_factory=list)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def next_edge(self, edge_id: int) -> int:
        """Next edge of the same face.

        The twin of ``edge_id`` leaves the arrival node; the next edge is the
        one immediately before the twin in that node's counter-clockwise fan,
        i.e. the next edge clockwise from the twin.
        """
        back = twin(edge_id)
        fan = self.fans[self.edges[back].origin]
        return fan[self.fan_position[back] - 1]

    def degree(self, node_id: int) -> int:
        return len(self.fans.get(node_id, []))
