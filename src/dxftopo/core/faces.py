"""Face extraction from a planar graph.

Each directed edge belongs to exactly one face. Starting from any edge not
yet walked, the next edge of its face is the edge immediately clockwise
of its twin at the arrival node. Bounded faces come out counter-clockwise
(positive signed area); the unbounded face of each connected component
comes out clockwise.
"""

import math
from dataclasses import dataclass

from dxftopo.domain import Contour, ContourSource, PlanarGraph, Point2D


@dataclass
class Face:
    """One closed walk through the graph.

    Attributes:
        edges: Directed edge ids in walk order
        contour: The walk's samples as a loop
    """

    edges: list[int]
    contour: Contour

    def signed_area(self) -> float:
        return self.contour.signed_area()

    def is_bounded(self) -> bool:
        return self.contour.signed_area() > 0


class FaceTraverser:
    """Walks every face of a PlanarGraph.

    The visited state lives in a list indexed by edge id and is local to
    one call, so a traverser can be reused across graphs.
    """

    def traverse(self, graph: PlanarGraph) -> list[Face]:
        """Extract every face, bounded and unbounded.

        Walks that collect fewer than 3 samples are dropped. A walk is cut
        off after ``edge_count + 1`` steps.

        Args:
            graph: Graph with angle-sorted fans

        Returns:
            Faces in order of their first edge id
        """
        edge_count = graph.edge_count
        visited = [False] * edge_count
        faces: list[Face] = []

        for first in range(edge_count):
            if visited[first]:
                continue

            walk: list[int] = []
            edge_id = first
            steps = 0
            while not visited[edge_id] and steps <= edge_count:
                visited[edge_id] = True
                walk.append(edge_id)
                edge_id = graph.next_edge(edge_id)
                steps += 1

            points: list[Point2D] = []
            corrections: list[float] = []
            for e in walk:
                edge = graph.edges[e]
                # Last sample equals the next edge's first
                points.extend(edge.points[:-1])
                corrections.append(edge.area_correction)

            if len(points) < 3:
                continue

            faces.append(
                Face(
                    edges=walk,
                    contour=Contour(
                        points=points,
                        area_correction=math.fsum(corrections),
                        source=ContourSource.GRAPH_FACE,
                        source_indices=tuple(
                            sorted(
                                {
                                    graph.edges[e].source_index
                                    for e in walk
                                    if graph.edges[e].source_index is not None
                                }
                            )
                        ),
                    ),
                )
            )

        return faces
