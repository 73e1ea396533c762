"""Block reference expansion.

Inserts are replaced by copies of their block's primitives moved by the
insertion offset. Nested inserts are followed up to a depth limit, and a
block that (directly or indirectly) inserts itself is reported instead of
expanded.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from dxftopo.core.sampler import check_finite
from dxftopo.domain import BlockTable, Diagnostic, Insert, Point3D, Primitive, Severity
from dxftopo.exceptions import BlockCycleError, BlockError, BlockNotFoundError, PrimitiveError


@dataclass
class ExpansionResult:
    """Primitives after insert expansion.

    Attributes:
        items: (input index, primitive) pairs; expanded primitives carry the
            index of the top-level insert they came from
        diagnostics: Inserts that could not be expanded or were simplified
    """

    items: list[tuple[int, Primitive]] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def primitives(self) -> list[Primitive]:
        return [p for _, p in self.items]


class InsertExpander:
    """Expands Insert primitives against a block table.

    Only translation is applied. Inserts with scale or rotation are still
    expanded by their offset and reported with a diagnostic.
    """

    def __init__(self, blocks: BlockTable | None = None, max_depth: int = 16) -> None:
        """Initialize expander.

        Args:
            blocks: Block definitions keyed by name
            max_depth: Maximum nesting of inserts inside blocks
        """
        self.blocks = blocks or {}
        self.max_depth = max_depth

    def expand(self, primitives: Sequence[Primitive]) -> ExpansionResult:
        """Replace every insert with its translated block content.

        Args:
            primitives: Top-level primitives in input order

        Returns:
            ExpansionResult with non-insert primitives in order
        """
        result = ExpansionResult()

        for index, primitive in enumerate(primitives):
            if not isinstance(primitive, Insert):
                result.items.append((index, primitive))
                continue
            try:
                self._expand_insert(primitive, Point3D(0.0, 0.0), [], index, result)
            except (BlockError, PrimitiveError) as e:
                result.diagnostics.append(Diagnostic(index, "insert", str(e)))

        return result

    def _expand_insert(
        self,
        insert: Insert,
        offset: Point3D,
        stack: list[str],
        index: int,
        result: ExpansionResult,
    ) -> None:
        check_finite(insert, "insert")
        name = insert.block_name
        if name in stack:
            raise BlockCycleError([*stack, name])
        if name not in self.blocks:
            raise BlockNotFoundError(name)
        if len(stack) >= self.max_depth:
            result.diagnostics.append(
                Diagnostic(
                    index,
                    "insert",
                    f"Block '{name}' nested deeper than {self.max_depth} levels; not expanded",
                )
            )
            return

        if not insert.is_plain_translation():
            result.diagnostics.append(
                Diagnostic(
                    index,
                    "insert",
                    f"Block '{name}' has scale ({insert.x_scale}, {insert.y_scale}) "
                    f"or rotation {insert.rotation}; only the offset was applied",
                    Severity.INFO,
                )
            )

        placed = offset.translated(insert.position)
        stack.append(name)
        try:
            for child in self.blocks[name]:
                if not isinstance(child, Insert):
                    try:
                        child = child.translated(placed)
                    except (AttributeError, TypeError):
                        # Missing coordinates; the sampler reports it
                        pass
                    result.items.append((index, child))
                    continue
                try:
                    self._expand_insert(child, placed, stack, index, result)
                except (BlockError, PrimitiveError) as e:
                    result.diagnostics.append(Diagnostic(index, "insert", str(e)))
        finally:
            stack.pop()


def expand_inserts(
    primitives: Sequence[Primitive],
    blocks: BlockTable | None = None,
    max_depth: int = 16,
) -> ExpansionResult:
    """Expand all inserts in a primitive list.

    Convenience wrapper around InsertExpander.
    """
    return InsertExpander(blocks, max_depth).expand(primitives)
