"""Drawing reader for DXF files and dxf-parser JSON exports.

This module provides the DrawingReader class for loading a drawing file
and converting its entities and block definitions into domain models.
Entities the engine cannot use are reported as diagnostics rather than
failing the load.
"""

import json
import math
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import ezdxf
from ezdxf.document import Drawing as DXFDocument

from dxftopo.domain import Diagnostic, Drawing, Point3D, Primitive, Severity
from dxftopo.exceptions import (
    DrawingLoadError,
    MalformedPrimitiveError,
    UnsupportedPrimitiveError,
)
from dxftopo.io.converter import entity_to_primitive, record_to_primitive

SUPPORTED_SUFFIXES = (".dxf", ".json")


class DrawingReader:
    """Loads a drawing file and converts it to a Drawing.

    Example:
        reader = DrawingReader(Path("part.dxf"))
        drawing = reader.load()
        print(len(drawing.primitives))
    """

    def __init__(self, path: Path) -> None:
        """Initialize the drawing reader.

        Args:
            path: Path to a ``.dxf`` file or a dxf-parser ``.json`` export
        """
        self._path = Path(path)
        self._doc: DXFDocument | None = None

    @property
    def format(self) -> str:
        """'DXF' or 'JSON', from the file suffix."""
        return "JSON" if self._path.suffix.lower() == ".json" else "DXF"

    def load(self) -> Drawing:
        """Read the file and convert it.

        Returns:
            Drawing with model-space primitives, blocks and decode diagnostics

        Raises:
            DrawingLoadError: If the file is missing, unreadable or not a drawing
        """
        if not self._path.exists():
            raise DrawingLoadError(str(self._path), "file not found")
        if self._path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise DrawingLoadError(
                str(self._path), f"unsupported file type '{self._path.suffix}'"
            )

        if self.format == "JSON":
            return self._load_json()
        return self._load_dxf()

    def _load_dxf(self) -> Drawing:
        try:
            self._doc = ezdxf.readfile(str(self._path))
        except IOError as e:
            raise DrawingLoadError(str(self._path), str(e)) from e
        except ezdxf.DXFStructureError as e:
            raise DrawingLoadError(str(self._path), f"invalid DXF structure: {e}") from e

        diagnostics: list[Diagnostic] = []
        primitives = _convert_all(
            self._doc.modelspace(), entity_to_primitive, _entity_kind, diagnostics
        )

        blocks: dict[str, list[Primitive]] = {}
        for block in self._doc.blocks:
            if block.is_any_layout:
                continue
            base = _negated(block.block.dxf.base_point)
            converted = _convert_all(block, entity_to_primitive, _entity_kind, diagnostics)
            blocks[block.name] = [p.translated(base) for p in converted]

        return Drawing(
            name=str(self._path),
            primitives=primitives,
            blocks=blocks,
            diagnostics=diagnostics,
        )

    def _load_json(self) -> Drawing:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise DrawingLoadError(str(self._path), str(e)) from e
        except json.JSONDecodeError as e:
            raise DrawingLoadError(str(self._path), f"invalid JSON: {e}") from e

        if not isinstance(data, Mapping) or not isinstance(data.get("entities"), list):
            raise DrawingLoadError(str(self._path), "expected an object with an 'entities' list")

        diagnostics: list[Diagnostic] = []
        primitives = _convert_all(data["entities"], record_to_primitive, _record_kind, diagnostics)

        blocks: dict[str, list[Primitive]] = {}
        raw_blocks = data.get("blocks") or {}
        if isinstance(raw_blocks, Mapping):
            for name, block in raw_blocks.items():
                if not isinstance(block, Mapping):
                    continue
                try:
                    base = _record_base(str(name), block.get("position") or {})
                except MalformedPrimitiveError as e:
                    diagnostics.append(Diagnostic(None, "block", str(e)))
                    continue
                converted = _convert_all(
                    block.get("entities") or [], record_to_primitive, _record_kind, diagnostics
                )
                blocks[str(name)] = [p.translated(base) for p in converted]

        return Drawing(
            name=str(self._path),
            primitives=primitives,
            blocks=blocks,
            diagnostics=diagnostics,
        )


def _negated(value: Any) -> Point3D:
    return Point3D(-float(value[0]), -float(value[1]), -float(value[2]))


def _record_base(name: str, position: Any) -> Point3D:
    """Negated base point of a JSON block, checked for finite coordinates."""
    if not isinstance(position, Mapping):
        raise MalformedPrimitiveError("block", f"'{name}' base point is not a mapping")
    try:
        base = _negated([position.get(axis, 0.0) for axis in "xyz"])
    except (TypeError, ValueError) as e:
        raise MalformedPrimitiveError("block", f"'{name}' base point is not numeric ({e})") from e
    if not all(math.isfinite(v) for v in base.to_tuple()):
        raise MalformedPrimitiveError("block", f"'{name}' base point is not finite")
    return base


def _entity_kind(entity: Any) -> str:
    return entity.dxftype()


def _record_kind(record: Any) -> str:
    if isinstance(record, Mapping):
        return str(record.get("type", "record"))
    return type(record).__name__


def _convert_all(
    items: Iterable[Any],
    convert: Callable[[Any], Primitive],
    kind_of: Callable[[Any], str],
    diagnostics: list[Diagnostic],
) -> list[Primitive]:
    """Convert every item, recording the ones that cannot be converted."""
    primitives: list[Primitive] = []
    for item in items:
        try:
            primitives.append(convert(item))
        except UnsupportedPrimitiveError as e:
            diagnostics.append(Diagnostic(None, kind_of(item), str(e), Severity.INFO))
        except MalformedPrimitiveError as e:
            diagnostics.append(Diagnostic(None, kind_of(item), str(e)))
    return primitives


def load_drawing(path: Path) -> Drawing:
    """Load a drawing file. Convenience wrapper around DrawingReader."""
    return DrawingReader(path).load()
