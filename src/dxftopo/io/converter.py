"""Converters from decoded drawing records to domain primitives.

Two decoded forms are accepted:

- ezdxf entities, as read from a ``.dxf`` file (angles in degrees)
- dxf-parser style mapping records, as stored in ``.json`` exports
  (arc angles in radians, insert rotation in degrees)

Both produce the same primitive types with angles in radians. Values are
passed through as floats; non-finite values are left for the sampler to
reject.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from dxftopo.domain import (
    Arc,
    Circle,
    Ellipse,
    Insert,
    Line,
    Point3D,
    PointEntity,
    Polyline,
    PolylineVertex,
    Primitive,
    Spline,
)
from dxftopo.exceptions import MalformedPrimitiveError, UnsupportedPrimitiveError


def _vec(value: Any) -> Point3D:
    """Convert an ezdxf Vec3 or any (x, y[, z]) sequence to Point3D."""
    z = value[2] if len(value) > 2 else 0.0
    return Point3D(float(value[0]), float(value[1]), float(z))


def entity_to_primitive(entity: Any) -> Primitive:
    """Convert an ezdxf entity to a domain primitive.

    Args:
        entity: ezdxf DXFGraphic

    Returns:
        Domain primitive

    Raises:
        UnsupportedPrimitiveError: If the entity type carries no supported geometry
        MalformedPrimitiveError: If required attributes are missing
    """
    kind = entity.dxftype()
    try:
        return _convert_entity(kind, entity)
    except (AttributeError, TypeError, ValueError, OverflowError, IndexError) as e:
        raise MalformedPrimitiveError(kind.lower(), str(e)) from e


def _convert_entity(kind: str, entity: Any) -> Primitive:
    dxf = entity.dxf

    if kind == "LINE":
        return Line(_vec(dxf.start), _vec(dxf.end))

    if kind == "ARC":
        return Arc(
            center=_vec(dxf.center),
            radius=float(dxf.radius),
            start_angle=math.radians(dxf.start_angle),
            end_angle=math.radians(dxf.end_angle),
        )

    if kind == "CIRCLE":
        return Circle(center=_vec(dxf.center), radius=float(dxf.radius))

    if kind == "ELLIPSE":
        return Ellipse(
            center=_vec(dxf.center),
            major_axis=_vec(dxf.major_axis),
            axis_ratio=float(dxf.ratio),
            start_param=float(dxf.start_param),
            end_param=float(dxf.end_param),
        )

    if kind == "SPLINE":
        return Spline(
            control_points=tuple(_vec(p) for p in entity.control_points),
            degree=int(dxf.degree),
            knots=tuple(float(k) for k in entity.knots),
            fit_points=tuple(_vec(p) for p in entity.fit_points),
            closed=bool(entity.closed),
        )

    if kind == "LWPOLYLINE":
        return Polyline(
            vertices=tuple(
                PolylineVertex(float(x), float(y), float(b))
                for x, y, b in entity.get_points("xyb")
            ),
            closed=bool(entity.closed),
        )

    if kind == "POLYLINE":
        if not (entity.is_2d_polyline or entity.is_3d_polyline):
            raise UnsupportedPrimitiveError("POLYLINE mesh")
        return Polyline(
            vertices=tuple(
                PolylineVertex(
                    float(v.dxf.location[0]),
                    float(v.dxf.location[1]),
                    float(v.dxf.get("bulge", 0.0)),
                )
                for v in entity.vertices
            ),
            closed=bool(entity.is_closed),
        )

    if kind == "POINT":
        return PointEntity(_vec(dxf.location))

    if kind == "INSERT":
        return Insert(
            block_name=str(dxf.name),
            position=_vec(dxf.insert),
            x_scale=float(dxf.get("xscale", 1.0)),
            y_scale=float(dxf.get("yscale", 1.0)),
            rotation=math.radians(dxf.get("rotation", 0.0)),
        )

    raise UnsupportedPrimitiveError(kind)


def _field(record: Mapping[str, Any], key: str, kind: str) -> Any:
    if key not in record or record[key] is None:
        raise MalformedPrimitiveError(kind, f"missing field '{key}'")
    return record[key]


def _point(data: Any, kind: str) -> Point3D:
    if not isinstance(data, Mapping):
        raise MalformedPrimitiveError(kind, f"expected a point mapping, got {data!r}")
    try:
        return Point3D(float(data["x"]), float(data["y"]), float(data.get("z", 0.0)))
    except KeyError as e:
        raise MalformedPrimitiveError(kind, f"point missing coordinate {e}") from e
    except (TypeError, ValueError) as e:
        raise MalformedPrimitiveError(kind, f"point has a non-numeric coordinate ({e})") from e


def _number(record: Mapping[str, Any], key: str, kind: str, default: float | None = None) -> float:
    if default is not None and record.get(key) is None:
        return default
    value = _field(record, key, kind)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedPrimitiveError(kind, f"field '{key}' is not a number: {value!r}") from e


def _integer(record: Mapping[str, Any], key: str, kind: str, default: int) -> int:
    value = _number(record, key, kind, default=float(default))
    if not math.isfinite(value) or value != int(value):
        raise MalformedPrimitiveError(kind, f"field '{key}' is not an integer: {value!r}")
    return int(value)


def _points(record: Mapping[str, Any], key: str, kind: str) -> tuple[Point3D, ...]:
    values = record.get(key) or []
    if not isinstance(values, Sequence):
        raise MalformedPrimitiveError(kind, f"field '{key}' is not a list")
    return tuple(_point(p, kind) for p in values)


def record_to_primitive(record: Mapping[str, Any]) -> Primitive:
    """Convert a dxf-parser style record to a domain primitive.

    Args:
        record: Mapping with a ``type`` key and that type's fields

    Returns:
        Domain primitive

    Raises:
        UnsupportedPrimitiveError: If the record type is not handled
        MalformedPrimitiveError: If required fields are missing or not numeric
    """
    if not isinstance(record, Mapping):
        raise MalformedPrimitiveError("record", f"expected a mapping, got {type(record).__name__}")

    raw_type = record.get("type")
    if not isinstance(raw_type, str):
        raise MalformedPrimitiveError("record", "missing 'type'")
    kind = raw_type.upper()
    name = kind.lower()

    if kind == "LINE":
        vertices = _field(record, "vertices", name)
        if not isinstance(vertices, Sequence) or len(vertices) < 2:
            raise MalformedPrimitiveError(name, "needs two vertices")
        return Line(_point(vertices[0], name), _point(vertices[1], name))

    if kind == "ARC":
        return Arc(
            center=_point(_field(record, "center", name), name),
            radius=_number(record, "radius", name),
            start_angle=_number(record, "startAngle", name),
            end_angle=_number(record, "endAngle", name),
        )

    if kind == "CIRCLE":
        return Circle(
            center=_point(_field(record, "center", name), name),
            radius=_number(record, "radius", name),
        )

    if kind == "ELLIPSE":
        return Ellipse(
            center=_point(_field(record, "center", name), name),
            major_axis=_point(_field(record, "majorAxisEndPoint", name), name),
            axis_ratio=_number(record, "axisRatio", name),
            start_param=_number(record, "startAngle", name, default=0.0),
            end_param=_number(record, "endAngle", name, default=0.0),
        )

    if kind == "SPLINE":
        knots = record.get("knotValues") or []
        try:
            knot_values = tuple(float(k) for k in knots)
        except (TypeError, ValueError) as e:
            raise MalformedPrimitiveError(name, f"knot vector is not numeric ({e})") from e
        return Spline(
            control_points=_points(record, "controlPoints", name),
            degree=_integer(record, "degreeOfSplineCurve", name, default=3),
            knots=knot_values,
            fit_points=_points(record, "fitPoints", name),
            closed=bool(record.get("closed", False)),
        )

    if kind in ("LWPOLYLINE", "POLYLINE"):
        vertices = _field(record, "vertices", name)
        if not isinstance(vertices, Sequence):
            raise MalformedPrimitiveError(name, "field 'vertices' is not a list")
        converted = []
        for v in vertices:
            p = _point(v, name)
            converted.append(PolylineVertex(p.x, p.y, _number(v, "bulge", name, default=0.0)))
        return Polyline(vertices=tuple(converted), closed=bool(record.get("shape", False)))

    if kind == "POINT":
        return PointEntity(_point(_field(record, "position", name), name))

    if kind == "INSERT":
        return Insert(
            block_name=str(_field(record, "name", name)),
            position=_point(_field(record, "position", name), name),
            x_scale=_number(record, "xScale", name, default=1.0),
            y_scale=_number(record, "yScale", name, default=1.0),
            rotation=math.radians(_number(record, "rotation", name, default=0.0)),
        )

    raise UnsupportedPrimitiveError(kind)
