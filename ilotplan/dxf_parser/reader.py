"""DXF drawing reader.

Reads line geometry from a DXF file with ezdxf and emits the raw entity
records consumed by ``EntityExtractor``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import ezdxf
from ezdxf.document import Drawing
from ezdxf.entities import DXFEntity, Line, LWPolyline, Polyline

from ..errors import DrawingReadError
from .elements import BYLAYER

logger = logging.getLogger(__name__)


# Raster and document formats carry no vector geometry
IMAGE_SUFFIXES = frozenset([".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".gif", ".pdf"])

# $INSUNITS code -> factor converting drawing units to meters
UNIT_SCALES = {
    1: 0.0254,  # inches
    2: 0.3048,  # feet
    4: 0.001,  # millimeters
    5: 0.01,  # centimeters
    6: 1.0,  # meters
}


class DXFReader:
    """Reads LINE, LWPOLYLINE and 2D POLYLINE entities from a DXF modelspace."""

    def __init__(self, apply_units: bool = True):
        """
        Initialize the reader.

        Args:
            apply_units: Scale coordinates to meters using the $INSUNITS header
        """
        self.apply_units = apply_units

    def read(self, file_path: str | Path) -> List[Dict[str, Any]]:
        """
        Read raw entity records from a drawing file.

        Args:
            file_path: Path to a DXF file (image files yield no entities)

        Returns:
            Raw entity records with kind, layerLabel, styleHint and vertices

        Raises:
            FileNotFoundError: If the file does not exist
            DrawingReadError: If the file is not a readable DXF document
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if file_path.suffix.lower() in IMAGE_SUFFIXES:
            logger.warning(f"Image input has no vector geometry, returning no entities: {file_path}")
            return []

        logger.info(f"Loading DXF file: {file_path}")
        try:
            doc = ezdxf.readfile(str(file_path))
        except (IOError, ezdxf.DXFError) as e:
            raise DrawingReadError(f"Could not read DXF file {file_path}: {e}", path=str(file_path)) from e

        return self.read_document(doc)

    def read_document(self, doc: Drawing) -> List[Dict[str, Any]]:
        """Read raw entity records from a loaded ezdxf document."""
        scale = self._detect_scale(doc)
        records: List[Dict[str, Any]] = []

        for entity in doc.modelspace():
            vertices = self._entity_vertices(entity)
            if vertices is None:
                continue
            records.append(
                {
                    "kind": "Line" if isinstance(entity, Line) else "Polyline",
                    "layerLabel": entity.dxf.layer,
                    "styleHint": self._resolve_color(doc, entity),
                    "vertices": [{"x": x * scale, "y": y * scale} for x, y in vertices],
                }
            )

        logger.info(f"Read {len(records)} line entities")
        return records

    def _detect_scale(self, doc: Drawing) -> float:
        if not self.apply_units:
            return 1.0
        insunits = doc.header.get("$INSUNITS", 0)
        return UNIT_SCALES.get(insunits, 1.0)

    @staticmethod
    def _entity_vertices(entity: DXFEntity) -> Optional[List[tuple]]:
        if isinstance(entity, Line):
            start = entity.dxf.start
            end = entity.dxf.end
            return [(start.x, start.y), (end.x, end.y)]

        if isinstance(entity, LWPolyline):
            points = [(x, y) for x, y, *_ in entity.get_points()]
            if entity.closed and len(points) > 2:
                points.append(points[0])
            return points

        if isinstance(entity, Polyline) and entity.is_2d_polyline:
            points = [(v.dxf.location.x, v.dxf.location.y) for v in entity.vertices]
            if entity.is_closed and len(points) > 2:
                points.append(points[0])
            return points

        return None

    @staticmethod
    def _resolve_color(doc: Drawing, entity: DXFEntity) -> int:
        color = entity.dxf.color
        if color != BYLAYER:
            return color
        layer_name = entity.dxf.layer
        if layer_name in doc.layers:
            return abs(doc.layers.get(layer_name).color)
        return BYLAYER


def read_drawing_entities(file_path: str | Path, apply_units: bool = True) -> List[Dict[str, Any]]:
    """Read raw entity records from a DXF drawing."""
    return DXFReader(apply_units=apply_units).read(file_path)
