"""Unit tests for the drawing I/O layer.

Tests for DrawingReader and the entity and record converters.
"""

import json
import math
from pathlib import Path

import ezdxf
import pytest

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
    Severity,
    Spline,
)
from dxftopo.exceptions import (
    DrawingLoadError,
    MalformedPrimitiveError,
    UnsupportedPrimitiveError,
)
from dxftopo.io.converter import entity_to_primitive, record_to_primitive
from dxftopo.io.reader import DrawingReader, load_drawing


@pytest.fixture
def dxf_doc():
    """Create an empty in-memory DXF document."""
    return ezdxf.new()


class TestEntityConverter:
    """Tests for entity_to_primitive."""

    def test_line(self, dxf_doc) -> None:
        """Test LINE conversion."""
        entity = dxf_doc.modelspace().add_line((0, 0), (10, 5))
        assert entity_to_primitive(entity) == Line(Point3D(0, 0, 0), Point3D(10, 5, 0))

    def test_arc_angles_become_radians(self, dxf_doc) -> None:
        """Test ARC angles are converted from degrees."""
        entity = dxf_doc.modelspace().add_arc((1, 2), radius=3, start_angle=90, end_angle=180)
        arc = entity_to_primitive(entity)
        assert isinstance(arc, Arc)
        assert arc.center == Point3D(1, 2, 0)
        assert arc.start_angle == pytest.approx(math.pi / 2)
        assert arc.end_angle == pytest.approx(math.pi)

    def test_circle(self, dxf_doc) -> None:
        """Test CIRCLE conversion."""
        entity = dxf_doc.modelspace().add_circle((5, 5), radius=2)
        assert entity_to_primitive(entity) == Circle(Point3D(5, 5, 0), 2.0)

    def test_ellipse(self, dxf_doc) -> None:
        """Test ELLIPSE conversion keeps parameters."""
        entity = dxf_doc.modelspace().add_ellipse(
            (0, 0), major_axis=(10, 0), ratio=0.5, start_param=0, end_param=math.pi
        )
        ellipse = entity_to_primitive(entity)
        assert isinstance(ellipse, Ellipse)
        assert ellipse.major_axis == Point3D(10, 0, 0)
        assert ellipse.axis_ratio == pytest.approx(0.5)
        assert ellipse.end_param == pytest.approx(math.pi)

    def test_lwpolyline_with_bulge(self, dxf_doc) -> None:
        """Test LWPOLYLINE vertices keep their bulge and closed flag."""
        entity = dxf_doc.modelspace().add_lwpolyline(
            [(0, 0, 1.0), (10, 0, 1.0)], format="xyb", close=True
        )
        poly = entity_to_primitive(entity)
        assert poly == Polyline(
            (PolylineVertex(0, 0, 1.0), PolylineVertex(10, 0, 1.0)), closed=True
        )

    def test_polyline_2d(self, dxf_doc) -> None:
        """Test a 2D POLYLINE is converted like a light polyline."""
        entity = dxf_doc.modelspace().add_polyline2d([(0, 0), (10, 0), (10, 10)], close=True)
        poly = entity_to_primitive(entity)
        assert isinstance(poly, Polyline)
        assert len(poly.vertices) == 3
        assert poly.closed

    def test_spline_with_control_points(self, dxf_doc) -> None:
        """Test SPLINE control points, degree and knots."""
        entity = dxf_doc.modelspace().add_open_spline(
            [(0, 0), (5, 10), (10, -10), (15, 0)], degree=3
        )
        spline = entity_to_primitive(entity)
        assert isinstance(spline, Spline)
        assert spline.degree == 3
        assert len(spline.control_points) == 4
        assert len(spline.knots) == 8

    def test_point_and_insert(self, dxf_doc) -> None:
        """Test POINT and INSERT conversion."""
        dxf_doc.blocks.new(name="B")
        msp = dxf_doc.modelspace()
        assert entity_to_primitive(msp.add_point((1, 2))) == PointEntity(Point3D(1, 2, 0))

        ref = msp.add_blockref("B", (3, 4), dxfattribs={"rotation": 90})
        insert = entity_to_primitive(ref)
        assert isinstance(insert, Insert)
        assert insert.block_name == "B"
        assert insert.position == Point3D(3, 4, 0)
        assert insert.rotation == pytest.approx(math.pi / 2)

    def test_unsupported(self, dxf_doc) -> None:
        """Test entities without supported geometry are refused."""
        entity = dxf_doc.modelspace().add_text("label")
        with pytest.raises(UnsupportedPrimitiveError):
            entity_to_primitive(entity)


class TestRecordConverter:
    """Tests for record_to_primitive."""

    def test_line(self) -> None:
        """Test LINE record conversion."""
        record = {"type": "LINE", "vertices": [{"x": 0, "y": 0}, {"x": 1, "y": 2, "z": 3}]}
        assert record_to_primitive(record) == Line(Point3D(0, 0, 0), Point3D(1, 2, 3))

    def test_arc_angles_already_radians(self) -> None:
        """Test ARC record angles are used as given."""
        record = {
            "type": "ARC",
            "center": {"x": 0, "y": 0},
            "radius": 2,
            "startAngle": 0.5,
            "endAngle": 1.5,
        }
        assert record_to_primitive(record) == Arc(Point3D(0, 0), 2.0, 0.5, 1.5)

    def test_ellipse_defaults(self) -> None:
        """Test ELLIPSE record without angles is a full ellipse."""
        record = {
            "type": "ELLIPSE",
            "center": {"x": 0, "y": 0},
            "majorAxisEndPoint": {"x": 4, "y": 0},
            "axisRatio": 0.5,
        }
        ellipse = record_to_primitive(record)
        assert ellipse == Ellipse(Point3D(0, 0), Point3D(4, 0), 0.5, 0.0, 0.0)

    def test_lwpolyline_shape_flag(self) -> None:
        """Test the shape flag closes a polyline record."""
        record = {
            "type": "LWPOLYLINE",
            "vertices": [{"x": 0, "y": 0, "bulge": 0.5}, {"x": 1, "y": 0}],
            "shape": True,
        }
        poly = record_to_primitive(record)
        assert poly == Polyline(
            (PolylineVertex(0, 0, 0.5), PolylineVertex(1, 0, 0.0)), closed=True
        )

    def test_spline(self) -> None:
        """Test SPLINE record conversion."""
        record = {
            "type": "SPLINE",
            "controlPoints": [{"x": 0, "y": 0}, {"x": 1, "y": 1}],
            "knotValues": [0, 0, 1, 1],
            "degreeOfSplineCurve": 1,
        }
        spline = record_to_primitive(record)
        assert spline.degree == 1
        assert spline.knots == (0.0, 0.0, 1.0, 1.0)
        assert not spline.closed

    @pytest.mark.parametrize("degree", [math.nan, math.inf, 2.5, "cubic"])
    def test_spline_bad_degree(self, degree) -> None:
        """Test a spline degree that is not a whole number is malformed."""
        record = {
            "type": "SPLINE",
            "controlPoints": [{"x": 0, "y": 0}, {"x": 1, "y": 1}],
            "degreeOfSplineCurve": degree,
        }
        with pytest.raises(MalformedPrimitiveError, match="degreeOfSplineCurve"):
            record_to_primitive(record)

    def test_insert_rotation_degrees(self) -> None:
        """Test INSERT record rotation is converted from degrees."""
        record = {"type": "INSERT", "name": "B", "position": {"x": 1, "y": 1}, "rotation": 180}
        insert = record_to_primitive(record)
        assert insert.rotation == pytest.approx(math.pi)
        assert insert.x_scale == 1.0

    def test_missing_field(self) -> None:
        """Test a record without a required field is malformed."""
        with pytest.raises(MalformedPrimitiveError, match="radius"):
            record_to_primitive({"type": "CIRCLE", "center": {"x": 0, "y": 0}})

    def test_non_numeric(self) -> None:
        """Test a non-numeric field is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            record_to_primitive(
                {"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": "big"}
            )

    def test_missing_type(self) -> None:
        """Test a record without a type is malformed."""
        with pytest.raises(MalformedPrimitiveError):
            record_to_primitive({"center": {"x": 0, "y": 0}})

    def test_unsupported(self) -> None:
        """Test unknown record types are refused."""
        with pytest.raises(UnsupportedPrimitiveError):
            record_to_primitive({"type": "HATCH"})


class TestDrawingReader:
    """Tests for DrawingReader class."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test loading a nonexistent file raises DrawingLoadError."""
        with pytest.raises(DrawingLoadError, match="not found"):
            DrawingReader(tmp_path / "missing.dxf").load()

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        """Test only DXF and JSON files are accepted."""
        path = tmp_path / "part.svg"
        path.write_text("<svg/>")
        with pytest.raises(DrawingLoadError, match="unsupported file type"):
            DrawingReader(path).load()

    def test_format(self) -> None:
        """Test format follows the suffix."""
        assert DrawingReader(Path("a.DXF")).format == "DXF"
        assert DrawingReader(Path("a.json")).format == "JSON"

    def test_load_dxf(self, dxf_doc, tmp_path: Path) -> None:
        """Test a saved DXF file round-trips through the reader."""
        block = dxf_doc.blocks.new(name="PART", base_point=(1, 1))
        block.add_line((1, 1), (2, 1))

        msp = dxf_doc.modelspace()
        msp.add_circle((0, 0), radius=5)
        msp.add_text("label")
        msp.add_blockref("PART", (10, 10))

        path = tmp_path / "part.dxf"
        dxf_doc.saveas(path)

        drawing = DrawingReader(path).load()
        assert drawing.name == str(path)
        assert len(drawing.primitives) == 2
        assert isinstance(drawing.primitives[0], Circle)
        assert isinstance(drawing.primitives[1], Insert)

        # Block content is stored relative to its base point
        assert drawing.blocks["PART"] == [Line(Point3D(0, 0, 0), Point3D(1, 0, 0))]

        assert len(drawing.diagnostics) == 1
        assert drawing.diagnostics[0].kind == "TEXT"
        assert drawing.diagnostics[0].severity == Severity.INFO

    def test_invalid_dxf(self, tmp_path: Path) -> None:
        """Test a corrupt DXF file raises DrawingLoadError."""
        path = tmp_path / "broken.dxf"
        path.write_text("this is not a drawing")
        with pytest.raises(DrawingLoadError):
            DrawingReader(path).load()

    def test_load_json(self, tmp_path: Path) -> None:
        """Test a dxf-parser JSON export with blocks."""
        path = tmp_path / "part.json"
        path.write_text(
            json.dumps(
                {
                    "entities": [
                        {"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 1},
                        {"type": "CIRCLE", "center": {"x": 0, "y": 0}},
                        {"type": "MTEXT"},
                        {"type": "INSERT", "name": "B", "position": {"x": 5, "y": 5}},
                    ],
                    "blocks": {
                        "B": {
                            "position": {"x": 1, "y": 0},
                            "entities": [
                                {
                                    "type": "LINE",
                                    "vertices": [{"x": 1, "y": 0}, {"x": 2, "y": 0}],
                                }
                            ],
                        }
                    },
                }
            )
        )

        drawing = load_drawing(path)
        assert len(drawing.primitives) == 2
        assert drawing.blocks["B"] == [Line(Point3D(0, 0, 0), Point3D(1, 0, 0))]
        severities = sorted(d.severity.value for d in drawing.diagnostics)
        assert severities == ["info", "warning"]

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test malformed JSON raises DrawingLoadError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(DrawingLoadError, match="invalid JSON"):
            DrawingReader(path).load()

    def test_json_without_entities(self, tmp_path: Path) -> None:
        """Test JSON without an entities list raises DrawingLoadError."""
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"layers": []}))
        with pytest.raises(DrawingLoadError, match="entities"):
            DrawingReader(path).load()

    def test_json_nan_spline_degree_skipped(self, tmp_path: Path) -> None:
        """Test a spline with a NaN degree is skipped and the circle beside it loads."""
        path = tmp_path / "part.json"
        path.write_text(
            '{"entities": ['
            '{"type": "SPLINE", "degreeOfSplineCurve": NaN,'
            ' "controlPoints": [{"x": 0, "y": 0}, {"x": 1, "y": 1}]},'
            '{"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 2}'
            "]}"
        )

        drawing = load_drawing(path)
        assert drawing.primitives == [Circle(Point3D(0, 0, 0), 2.0)]
        assert len(drawing.diagnostics) == 1
        assert drawing.diagnostics[0].kind == "SPLINE"
        assert drawing.diagnostics[0].severity == Severity.WARNING

    @pytest.mark.parametrize("position", ['{"x": NaN, "y": 0}', '{"x": "left", "y": 0}', "[1, 2]"])
    def test_json_block_bad_base_point_skipped(self, tmp_path: Path, position: str) -> None:
        """Test a block with an unusable base point is dropped with a warning."""
        path = tmp_path / "part.json"
        path.write_text(
            '{"entities": [{"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 1}],'
            ' "blocks": {'
            f'"BAD": {{"position": {position}, "entities": []}},'
            ' "GOOD": {"entities": []}'
            "}}"
        )

        drawing = load_drawing(path)
        assert len(drawing.primitives) == 1
        assert list(drawing.blocks) == ["GOOD"]
        assert len(drawing.diagnostics) == 1
        assert drawing.diagnostics[0].kind == "block"
        assert "BAD" in drawing.diagnostics[0].reason
