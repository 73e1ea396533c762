"""Drawing I/O layer for dxftopo.

This module turns decoded drawing files into domain primitives. DXF files
are decoded with ezdxf; dxf-parser style JSON exports are read directly.
It provides a clean abstraction layer between the decoders and the
domain models.

Key responsibilities:
- Load DXF and JSON drawings
- Convert decoded entities and records to primitives
- Collect block definitions for insert expansion
- Report entities that cannot be used as diagnostics

Key classes:
- DrawingReader: Load drawings
"""

from dxftopo.io.converter import entity_to_primitive, record_to_primitive
from dxftopo.io.reader import DrawingReader, load_drawing

__all__ = [
    "DrawingReader",
    "entity_to_primitive",
    "load_drawing",
    "record_to_primitive",
]
