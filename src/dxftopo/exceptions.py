"""Exception hierarchy for dxftopo."""


class DxfTopoError(Exception):
    """Base exception for all dxftopo errors."""

    pass


class DrawingError(DxfTopoError):
    """Errors related to loading a drawing."""

    pass


class DrawingLoadError(DrawingError):
    """Error loading a drawing file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load drawing '{path}': {reason}")


class DrawingTooLargeError(DrawingError):
    """Drawing has more primitives than the configured cap."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Drawing has {count} primitives, limit is {limit}")


class PrimitiveError(DxfTopoError):
    """Errors related to a single drawing primitive."""

    pass


class MalformedPrimitiveError(PrimitiveError):
    """Primitive is missing required fields or carries non-finite values."""

    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"Malformed {kind}: {reason}")


class UnsupportedPrimitiveError(PrimitiveError):
    """Decoded record has a type this engine does not handle."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unsupported primitive type '{kind}'")


class GeometryError(DxfTopoError):
    """Errors in geometric calculations."""

    pass


class ContourError(GeometryError):
    """Error with segment or contour data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class BlockError(DxfTopoError):
    """Errors related to block reference expansion."""

    pass


class BlockNotFoundError(BlockError):
    """Insert references a block that is not defined."""

    def __init__(self, block_name: str) -> None:
        self.block_name = block_name
        super().__init__(f"Block '{block_name}' not found")


class BlockCycleError(BlockError):
    """Insert chain references a block that is already being expanded."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Block reference cycle: {' -> '.join(chain)}")


class InvalidInputError(DxfTopoError):
    """The call itself is structurally invalid (e.g. primitives is not a list)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid input: {reason}")

