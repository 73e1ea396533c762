"""Tests for planar graph construction and face traversal."""

import pytest

from dxftopo.config import NodeMergeMode
from dxftopo.core.faces import FaceTraverser
from dxftopo.core.graph import (
    PlanarGraphBuilder,
    merge_endpoints_first_match,
    merge_endpoints_union_find,
)
from dxftopo.domain import ContourSource, Point2D, Segment, twin


def _seg(x1: float, y1: float, x2: float, y2: float, index: int | None = None) -> Segment:
    return Segment(points=(Point2D(x1, y1), Point2D(x2, y2)), source_index=index)


def _square_segments(size: float = 10.0, gap: float = 0.0) -> list[Segment]:
    """Four sides of a square, optionally with small gaps at the corners."""
    return [
        _seg(0, 0, size, 0, 0),
        _seg(size + gap, gap, size, size, 1),
        _seg(size - gap, size + gap, 0, size, 2),
        _seg(-gap, size - gap, 0, gap, 3),
    ]


class TestEndpointMerging:
    """Tests for the two merge modes."""

    def test_union_find_mean_position(self) -> None:
        """Test clustered endpoints merge to their mean."""
        positions, node_of = merge_endpoints_union_find(
            [Point2D(0, 0), Point2D(0.2, 0), Point2D(10, 10)], 0.5
        )
        assert node_of == [0, 0, 1]
        assert positions[0].x == pytest.approx(0.1)

    def test_union_find_is_transitive(self) -> None:
        """Test a chain of close points merges even when its ends are far apart."""
        points = [Point2D(0.4 * i, 0) for i in range(5)]
        positions, node_of = merge_endpoints_union_find(points, 0.5)
        assert len(positions) == 1
        assert set(node_of) == {0}

    def test_first_match_is_order_dependent(self) -> None:
        """Test first match does not chain merges."""
        points = [Point2D(0.4 * i, 0) for i in range(5)]
        positions, node_of = merge_endpoints_first_match(points, 0.5)
        assert node_of == [0, 0, 1, 1, 2]
        assert positions[1] == Point2D(0.8, 0)

    def test_union_find_rejects_zero_tolerance(self) -> None:
        """Test union find needs a positive grid size."""
        with pytest.raises(ValueError):
            merge_endpoints_union_find([Point2D(0, 0)], 0.0)

    def test_node_ids_follow_first_appearance(self) -> None:
        """Test node numbering follows input order."""
        _, node_of = merge_endpoints_union_find(
            [Point2D(5, 5), Point2D(0, 0), Point2D(5, 5.1)], 0.5
        )
        assert node_of == [0, 1, 0]


class TestPlanarGraphBuilder:
    """Tests for PlanarGraphBuilder class."""

    def test_square_graph(self) -> None:
        """Test a square yields four nodes and eight directed edges."""
        graph = PlanarGraphBuilder(0.5).build(_square_segments())
        assert len(graph.nodes) == 4
        assert graph.edge_count == 8
        assert all(graph.degree(n.id) == 2 for n in graph.nodes)

    def test_edges_are_paired(self) -> None:
        """Test every edge's twin runs the other way with opposite correction."""
        segment = Segment(
            points=(Point2D(0, 0), Point2D(5, 2), Point2D(10, 0)),
            chord_areas=(0.5, 0.25),
            source_index=9,
        )
        graph = PlanarGraphBuilder(0.5).build([segment])
        forward = graph.edges[0]
        reverse = graph.edges[twin(0)]

        assert forward.origin == reverse.target
        assert forward.target == reverse.origin
        assert reverse.points == tuple(reversed(forward.points))
        assert forward.area_correction == pytest.approx(0.75)
        assert reverse.area_correction == pytest.approx(-0.75)
        assert forward.source_index == 9

    def test_gaps_are_snapped(self) -> None:
        """Test edges start exactly on their merged node."""
        graph = PlanarGraphBuilder(0.5).build(_square_segments(gap=0.1))
        assert len(graph.nodes) == 4
        for edge in graph.edges:
            assert edge.points[0] == graph.nodes[edge.origin].position
            assert edge.points[-1] == graph.nodes[edge.target].position

    def test_self_loop_excluded(self) -> None:
        """Test a segment whose ends merge is left out of the graph."""
        graph = PlanarGraphBuilder(0.5).build([_seg(0, 0, 0.2, 0), _seg(0, 0, 5, 5)])
        assert graph.excluded == [0]
        assert graph.edge_count == 2

    def test_fans_sorted_by_angle(self) -> None:
        """Test outgoing edges are ordered counter-clockwise."""
        segments = [_seg(0, 0, 0, 10), _seg(0, 0, 10, 0), _seg(0, 0, -10, 0)]
        graph = PlanarGraphBuilder(0.5).build(segments)
        angles = [graph.edges[e].angle for e in graph.fans[0]]
        assert angles == sorted(angles)
        for position, edge_id in enumerate(graph.fans[0]):
            assert graph.fan_position[edge_id] == position

    def test_first_match_mode(self) -> None:
        """Test the builder honours the configured merge mode."""
        builder = PlanarGraphBuilder(0.5, NodeMergeMode.FIRST_MATCH)
        graph = builder.build(_square_segments(gap=0.1))
        assert len(graph.nodes) == 4
        assert graph.nodes[0].position == Point2D(0, 0)


class TestFaceTraverser:
    """Tests for FaceTraverser class."""

    def test_square_has_inner_and_outer_face(self) -> None:
        """Test a square has one bounded and one unbounded face."""
        graph = PlanarGraphBuilder(0.5).build(_square_segments())
        faces = FaceTraverser().traverse(graph)

        assert len(faces) == 2
        areas = sorted(f.signed_area() for f in faces)
        assert areas[0] == pytest.approx(-100.0)
        assert areas[1] == pytest.approx(100.0)

        bounded = [f for f in faces if f.is_bounded()]
        assert len(bounded) == 1
        assert bounded[0].contour.source == ContourSource.GRAPH_FACE
        assert bounded[0].contour.source_indices == (0, 1, 2, 3)

    def test_every_edge_in_one_face(self) -> None:
        """Test each directed edge is walked exactly once on a divided rectangle."""
        graph = PlanarGraphBuilder(0.5).build(
            [
                _seg(0, 0, 10, 0, 0),
                _seg(10, 0, 20, 0, 1),
                _seg(20, 0, 20, 20, 2),
                _seg(20, 20, 10, 20, 3),
                _seg(10, 20, 0, 20, 4),
                _seg(0, 20, 0, 0, 5),
                _seg(10, 0, 10, 20, 6),
            ]
        )
        faces = FaceTraverser().traverse(graph)

        walked = [e for f in faces for e in f.edges]
        assert sorted(walked) == list(range(graph.edge_count))

        bounded = sorted(f.signed_area() for f in faces if f.is_bounded())
        assert bounded == pytest.approx([200.0, 200.0])

    def test_dangling_edge_face(self) -> None:
        """Test an open path yields only a degenerate face with no area."""
        graph = PlanarGraphBuilder(0.5).build([_seg(0, 0, 10, 0), _seg(10, 0, 10, 10)])
        faces = FaceTraverser().traverse(graph)
        assert all(f.signed_area() == pytest.approx(0.0) for f in faces)
        assert not any(f.is_bounded() for f in faces)

    def test_single_edge_dropped(self) -> None:
        """Test a walk with fewer than three samples is not a face."""
        graph = PlanarGraphBuilder(0.5).build([_seg(0, 0, 10, 0)])
        assert FaceTraverser().traverse(graph) == []

    def test_curved_edge_correction(self) -> None:
        """Test face area includes edge corrections in walk direction."""
        segments = [
            Segment(points=(Point2D(0, 0), Point2D(10, 0)), chord_areas=(-5.0,)),
            _seg(10, 0, 10, 10),
            _seg(10, 10, 0, 10),
            _seg(0, 10, 0, 0),
        ]
        graph = PlanarGraphBuilder(0.5).build(segments)
        bounded = [f for f in FaceTraverser().traverse(graph) if f.is_bounded()]
        assert len(bounded) == 1
        assert bounded[0].signed_area() == pytest.approx(95.0)
