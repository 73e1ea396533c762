"""dxftopo - Recover closed regions from flat 2D drawing primitives.

dxftopo takes the unordered lines, arcs, circles, ellipses, splines,
polylines and block references decoded from a vector drawing and rebuilds
their topology: which primitives bound closed regions, which regions are
material, holes or islands, and how large the piece is.

Example:
    $ dxftopo area bracket.dxf

This prints the outer area of bracket.dxf in squared drawing units.
"""

__version__ = "0.1.0"
__author__ = "dxftopo contributors"

__all__ = ["__author__", "__version__"]
