"""Greedy endpoint chaining of open segments.

An independent way of closing open segments into loops: starting from
each unused segment in turn, keep appending any unused segment that
touches the current chain end (in either orientation) until the chain
returns to its start. Chains that never close give their segments back.

Unlike face traversal this never splits a region at a T-junction, so the
two algorithms may disagree on ambiguous input.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from dxftopo.domain import Contour, ContourSource, Point2D, Segment, WindingDirection

AREA_EPSILON = 1e-12


@dataclass
class ChainResult:
    """Loops found by chain assembly.

    Attributes:
        contours: Closed chains, wound counter-clockwise
        members: For each contour, positions of its segments in the input
        unused: Segments that ended up in no closed chain
    """

    contours: list[Contour] = field(default_factory=list)
    members: list[list[int]] = field(default_factory=list)
    unused: list[Segment] = field(default_factory=list)


class ChainAssembler:
    """Joins open segments end to end into closed loops.

    Example:
        assembler = ChainAssembler(tolerance=0.5)
        result = assembler.assemble(segments)
        for contour in result.contours:
            print(contour.area())
    """

    def __init__(self, tolerance: float = 0.5) -> None:
        """Initialize assembler.

        Args:
            tolerance: Distance below which two endpoints touch
        """
        self.tolerance = tolerance

    def assemble(self, segments: Sequence[Segment]) -> ChainResult:
        """Assemble closed chains from open segments.

        Args:
            segments: Open segments in input order

        Returns:
            ChainResult with CCW contours and leftover segments
        """
        result = ChainResult()
        used = [False] * len(segments)

        for seed in range(len(segments)):
            if used[seed]:
                continue

            used[seed] = True
            chain: list[tuple[int, Segment]] = [(seed, segments[seed])]
            chain_start = segments[seed].start
            current_end = segments[seed].end
            closed = False

            for _ in range(len(segments)):
                if len(chain) > 1 and current_end.distance_to(chain_start) < self.tolerance:
                    closed = True
                    break

                found = self._find_next(segments, used, current_end)
                if found is None:
                    break

                index, oriented = found
                used[index] = True
                chain.append((index, oriented))
                current_end = oriented.end

            if not closed and len(chain) > 1:
                closed = current_end.distance_to(chain_start) < self.tolerance

            contour = self._chain_to_contour([s for _, s in chain]) if closed else None
            if contour is None or len(contour.points) < 3 or contour.area() <= AREA_EPSILON:
                for index, _ in chain:
                    used[index] = False
                continue

            result.contours.append(contour)
            result.members.append([index for index, _ in chain])

        # Seeds that failed stay in the pool for later chains; whatever is
        # still unclaimed now is unused
        result.unused = [s for i, s in enumerate(segments) if not used[i]]
        return result

    def _find_next(
        self, segments: Sequence[Segment], used: list[bool], end: Point2D
    ) -> tuple[int, Segment] | None:
        for i, segment in enumerate(segments):
            if used[i]:
                continue
            if segment.start.distance_to(end) < self.tolerance:
                return i, segment
            if segment.end.distance_to(end) < self.tolerance:
                return i, segment.reversed()
        return None

    @staticmethod
    def _chain_to_contour(chain: list[Segment]) -> Contour:
        points: list[Point2D] = list(chain[0].points)
        corrections = [chain[0].area_correction]
        for segment in chain[1:]:
            points.extend(segment.points[1:])
            corrections.append(segment.area_correction)

        # Last sample meets the first within tolerance; the loop is implicit
        points.pop()

        contour = Contour(
            points=points,
            area_correction=math.fsum(corrections),
            source=ContourSource.CHAIN,
            source_indices=tuple(
                s.source_index for s in chain if s.source_index is not None
            ),
        )
        return contour.normalized(WindingDirection.COUNTER_CLOCKWISE)
