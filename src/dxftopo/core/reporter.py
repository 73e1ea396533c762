"""Area and aggregate reporting.

The reported piece area depends on the configured metric:

- ``TOP_LEVEL``: sum of the areas of all depth-0 contours. For a single
  piece this is the outer boundary's area; holes are not subtracted.
- ``OUTER_BOUNDARY``: area of the single largest contour only.
- ``NET``: material contours add, voids subtract.

The reporter also counts contours by role and flags holes too small to cut
and islands that would fall out of their hole.
"""

import math

from dxftopo.config import AreaMetric, ValidationConfig
from dxftopo.core.nesting import ContourHierarchy
from dxftopo.domain import AreaSummary, IssueCode, ValidationIssue


class AreaReporter:
    """Computes the AreaSummary and validation issues of a hierarchy."""

    def __init__(
        self,
        metric: AreaMetric = AreaMetric.TOP_LEVEL,
        validation: ValidationConfig | None = None,
    ) -> None:
        """Initialize reporter.

        Args:
            metric: Which contours contribute to the total area
            validation: Thresholds for manufacturability issues
        """
        self.metric = metric
        self.validation = validation or ValidationConfig()

    def summarize(
        self,
        hierarchy: ContourHierarchy,
        extents: tuple[float, float] = (0.0, 0.0),
    ) -> AreaSummary:
        """Aggregate areas and counts.

        Args:
            hierarchy: Resolved contour hierarchy
            extents: (width, height) of all extracted geometry

        Returns:
            AreaSummary; all zeros when there are no contours
        """
        contours = hierarchy.contours
        tree = hierarchy.nesting_tree

        material = hierarchy.material()
        holes = hierarchy.holes()

        outer_area = 0.0
        if hierarchy.outer_index is not None:
            outer_area = contours[hierarchy.outer_index].area()

        net_area = math.fsum(contours[i].area() for i in material) - math.fsum(
            contours[i].area() for i in holes
        )
        top_level_area = math.fsum(contours[i].area() for i in hierarchy.top_level())

        if self.metric == AreaMetric.OUTER_BOUNDARY:
            total = outer_area
        elif self.metric == AreaMetric.NET:
            total = max(net_area, 0.0)
        else:
            total = top_level_area

        return AreaSummary(
            total_area=total,
            outer_area=outer_area,
            net_area=net_area,
            material_count=len(material),
            hole_count=len(holes),
            island_count=sum(1 for i in material if tree[i].depth >= 2),
            pierce_count=len(contours),
            width=extents[0],
            height=extents[1],
        )

    def validate(self, hierarchy: ContourHierarchy) -> list[ValidationIssue]:
        """Find holes below the minimum diameter and floating islands.

        Args:
            hierarchy: Resolved contour hierarchy

        Returns:
            Issues in contour order
        """
        issues: list[ValidationIssue] = []
        min_diameter = self.validation.min_hole_diameter

        for idx, node in hierarchy.nesting_tree.items():
            area = hierarchy.contours[idx].area()

            if not node.is_material:
                diameter = 2.0 * math.sqrt(area / math.pi)
                if diameter < min_diameter:
                    issues.append(
                        ValidationIssue(
                            code=IssueCode.HOLE_TOO_SMALL,
                            message=(
                                f"Hole equivalent diameter {diameter:.3f} "
                                f"is below the minimum {min_diameter}"
                            ),
                            contour_index=idx,
                        )
                    )
            elif node.depth >= 2 and self.validation.report_floating_pieces:
                issues.append(
                    ValidationIssue(
                        code=IssueCode.FLOATING_PIECE,
                        message=f"Island at depth {node.depth} is not attached to the part",
                        contour_index=idx,
                    )
                )

        return issues
