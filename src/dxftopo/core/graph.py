"""Planar graph construction from open segments.

Segment endpoints closer than the tolerance are merged into shared nodes.
Two merge modes exist:

- ``UNION_FIND``: endpoints are binned into a grid with cells one tolerance
  wide; pairs within tolerance in neighbouring cells are united, so merging
  is transitive and does not depend on input order.
- ``FIRST_MATCH``: each endpoint reuses the first existing node within
  tolerance, scanning nodes in creation order.

Every segment whose ends land on different nodes yields a forward/reverse
pair of directed edges at adjacent indices.
"""

import math
from collections import defaultdict
from collections.abc import Sequence

from dxftopo.config import NodeMergeMode
from dxftopo.domain import DirectedEdge, Node, PlanarGraph, Point2D, Segment
from dxftopo.domain.graph import departure_angle


class _DisjointSet:
    """Union-find over endpoint indices with path halving."""

    def __init__(self, size: int) -> None:
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int) -> None:
        ra = self.find(a)
        rb = self.find(b)
        if ra == rb:
            return
        # Lower index stays root so node ids follow input order
        if ra < rb:
            self.parent[rb] = ra
        else:
            self.parent[ra] = rb


def merge_endpoints_union_find(
    endpoints: Sequence[Point2D], tolerance: float
) -> tuple[list[Point2D], list[int]]:
    """Cluster endpoints transitively with a grid index.

    Args:
        endpoints: Raw endpoints
        tolerance: Distance below which two endpoints are joined

    Returns:
        Tuple of (node positions, node id per endpoint). Node positions are
        the mean of their cluster; node ids follow first appearance.
    """
    if tolerance <= 0.0:
        raise ValueError("tolerance must be positive for endpoint merging")

    def cell_key(p: Point2D) -> tuple[int, int]:
        return (int(math.floor(p.x / tolerance)), int(math.floor(p.y / tolerance)))

    sets = _DisjointSet(len(endpoints))
    grid: dict[tuple[int, int], list[int]] = defaultdict(list)

    for i, point in enumerate(endpoints):
        cx, cy = cell_key(point)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for j in grid.get((cx + dx, cy + dy), ()):
                    if point.distance_to(endpoints[j]) < tolerance:
                        sets.union(i, j)
        grid[(cx, cy)].append(i)

    root_to_node: dict[int, int] = {}
    node_of: list[int] = []
    sums: list[list[float]] = []
    for i, point in enumerate(endpoints):
        root = sets.find(i)
        node_id = root_to_node.get(root)
        if node_id is None:
            node_id = len(sums)
            root_to_node[root] = node_id
            sums.append([0.0, 0.0, 0])
        sums[node_id][0] += point.x
        sums[node_id][1] += point.y
        sums[node_id][2] += 1
        node_of.append(node_id)

    positions = [Point2D(sx / n, sy / n) for sx, sy, n in sums]
    return positions, node_of


def merge_endpoints_first_match(
    endpoints: Sequence[Point2D], tolerance: float
) -> tuple[list[Point2D], list[int]]:
    """Reuse the first existing node within tolerance, else create one.

    Order dependent and quadratic; node positions are the first endpoint
    that created each node.
    """
    positions: list[Point2D] = []
    node_of: list[int] = []

    for point in endpoints:
        for node_id, position in enumerate(positions):
            if point.distance_to(position) < tolerance:
                node_of.append(node_id)
                break
        else:
            node_of.append(len(positions))
            positions.append(point)

    return positions, node_of


class PlanarGraphBuilder:
    """Builds a PlanarGraph from open segments.

    The builder is stateless apart from its configuration.
    """

    def __init__(
        self,
        tolerance: float = 0.5,
        merge_mode: NodeMergeMode = NodeMergeMode.UNION_FIND,
    ) -> None:
        """Initialize builder.

        Args:
            tolerance: Endpoint merge distance
            merge_mode: Endpoint merge algorithm
        """
        self.tolerance = tolerance
        self.merge_mode = merge_mode

    def merge(self, endpoints: Sequence[Point2D]) -> tuple[list[Point2D], list[int]]:
        if self.merge_mode == NodeMergeMode.FIRST_MATCH:
            return merge_endpoints_first_match(endpoints, self.tolerance)
        return merge_endpoints_union_find(endpoints, self.tolerance)

    def build(self, segments: Sequence[Segment]) -> PlanarGraph:
        """Merge endpoints and emit paired directed edges.

        Segment ends are snapped onto their node positions so consecutive
        edges of a face share exact coordinates.

        Args:
            segments: Open segments of one drawing

        Returns:
            PlanarGraph with angle-sorted fans
        """
        endpoints: list[Point2D] = []
        for segment in segments:
            endpoints.append(segment.start)
            endpoints.append(segment.end)

        positions, node_of = self.merge(endpoints)
        graph = PlanarGraph(nodes=[Node(i, p) for i, p in enumerate(positions)])

        for k, segment in enumerate(segments):
            origin = node_of[2 * k]
            target = node_of[2 * k + 1]
            if origin == target:
                graph.excluded.append(k)
                continue

            points = (positions[origin], *segment.points[1:-1], positions[target])
            correction = segment.area_correction
            graph.edges.append(
                DirectedEdge(
                    origin=origin,
                    target=target,
                    points=points,
                    angle=departure_angle(points[0], points[1]),
                    area_correction=correction,
                    segment=k,
                    source_index=segment.source_index,
                )
            )
            graph.edges.append(
                DirectedEdge(
                    origin=target,
                    target=origin,
                    points=tuple(reversed(points)),
                    angle=departure_angle(points[-1], points[-2]),
                    area_correction=-correction,
                    segment=k,
                    source_index=segment.source_index,
                )
            )

        fans: dict[int, list[int]] = defaultdict(list)
        for edge_id, edge in enumerate(graph.edges):
            fans[edge.origin].append(edge_id)

        graph.fan_position = [0] * len(graph.edges)
        for node_id, fan in fans.items():
            fan.sort(key=lambda e: (graph.edges[e].angle, e))
            for position, edge_id in enumerate(fan):
                graph.fan_position[edge_id] = position
            graph.fans[node_id] = fan

        return graph
