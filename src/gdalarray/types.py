"""
Type definitions and models shared by the GDAL readers.
"""

from typing import Optional, Tuple
from enum import Enum, IntEnum

import numpy as np
from pydantic import BaseModel, Field, model_validator


class DataType(IntEnum):
    """GDAL raster data type codes (``gdalconst.GDT_*``)."""
    UNKNOWN = 0
    BYTE = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    FLOAT64 = 7
    CINT16 = 8
    CINT32 = 9
    CFLOAT32 = 10
    CFLOAT64 = 11
    UINT64 = 12
    INT64 = 13
    INT8 = 14

    @classmethod
    def from_code(cls, code: int) -> Optional["DataType"]:
        """Return the enum member for ``code`` or None when GDAL added a type we do not know."""
        try:
            return cls(int(code))
        except ValueError:
            return None

    @property
    def gdal_name(self) -> str:
        """Name as spelled by ``gdal.GetDataTypeName``."""
        return _GDAL_NAMES[self]

    @property
    def is_complex_integer(self) -> bool:
        return self in (DataType.CINT16, DataType.CINT32)

    @property
    def is_complex(self) -> bool:
        return self in (DataType.CINT16, DataType.CINT32, DataType.CFLOAT32, DataType.CFLOAT64)


_GDAL_NAMES = {
    DataType.UNKNOWN: "Unknown",
    DataType.BYTE: "Byte",
    DataType.UINT16: "UInt16",
    DataType.INT16: "Int16",
    DataType.UINT32: "UInt32",
    DataType.INT32: "Int32",
    DataType.FLOAT32: "Float32",
    DataType.FLOAT64: "Float64",
    DataType.CINT16: "CInt16",
    DataType.CINT32: "CInt32",
    DataType.CFLOAT32: "CFloat32",
    DataType.CFLOAT64: "CFloat64",
    DataType.UINT64: "UInt64",
    DataType.INT64: "Int64",
    DataType.INT8: "Int8",
}


class ExtendedDataClass(IntEnum):
    """GDAL extended data type classes (``gdal.GEDTC_*``) of multidimensional arrays."""
    NUMERIC = 0
    STRING = 1
    COMPOUND = 2


class ScalarKind(str, Enum):
    """Scalar types of the result bundle; values are the bundle slot names."""
    UINT8 = "uint8s"
    INT8 = "int8s"
    UINT16 = "uint16s"
    INT16 = "int16s"
    UINT32 = "uint32s"
    INT32 = "int32s"
    UINT64 = "uint64s"
    INT64 = "int64s"
    FLOAT32 = "floats"
    FLOAT64 = "doubles"
    COMPLEX64 = "cfloats"
    COMPLEX128 = "cdoubles"
    GAUSSIAN16 = "gauss16s"
    GAUSSIAN32 = "gauss32s"

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype used to store arrays of this kind."""
        return KIND_DTYPES[self]

    @property
    def is_floating(self) -> bool:
        return self in (ScalarKind.FLOAT32, ScalarKind.FLOAT64)


GAUSSIAN_INT16 = np.dtype([("re", np.int16), ("im", np.int16)])
GAUSSIAN_INT32 = np.dtype([("re", np.int32), ("im", np.int32)])

KIND_DTYPES = {
    ScalarKind.UINT8: np.dtype(np.uint8),
    ScalarKind.INT8: np.dtype(np.int8),
    ScalarKind.UINT16: np.dtype(np.uint16),
    ScalarKind.INT16: np.dtype(np.int16),
    ScalarKind.UINT32: np.dtype(np.uint32),
    ScalarKind.INT32: np.dtype(np.int32),
    ScalarKind.UINT64: np.dtype(np.uint64),
    ScalarKind.INT64: np.dtype(np.int64),
    ScalarKind.FLOAT32: np.dtype(np.float32),
    ScalarKind.FLOAT64: np.dtype(np.float64),
    ScalarKind.COMPLEX64: np.dtype(np.complex64),
    ScalarKind.COMPLEX128: np.dtype(np.complex128),
    ScalarKind.GAUSSIAN16: GAUSSIAN_INT16,
    ScalarKind.GAUSSIAN32: GAUSSIAN_INT32,
}


class Origin(str, Enum):
    """Vertical origin of the returned arrays."""
    UPPER = "upper"
    LOWER = "lower"


class AxisOrder(str, Enum):
    """Axis order of the returned arrays."""
    GDAL = "gdal"
    REVERSED = "reversed"


class ComplexIntegerMode(str, Enum):
    """How CInt16/CInt32 data is represented."""
    WIDEN = "widen"
    GAUSSIAN = "gaussian"


BBoxTuple = Tuple[float, float, float, float]


class BoundingBox(BaseModel):
    """Bounding box representation."""
    min_x: float = Field(..., description="Minimum X coordinate")
    min_y: float = Field(..., description="Minimum Y coordinate")
    max_x: float = Field(..., description="Maximum X coordinate")
    max_y: float = Field(..., description="Maximum Y coordinate")
    crs: Optional[str] = Field(default=None, description="Coordinate Reference System")

    @model_validator(mode='after')
    def validate_coordinates(self):
        """Validate that min coordinates are less than max coordinates."""
        if self.min_x >= self.max_x:
            raise ValueError('min_x must be less than max_x')
        if self.min_y >= self.max_y:
            raise ValueError('min_y must be less than max_y')
        return self

    def to_tuple(self) -> BBoxTuple:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class GeoTransform(BaseModel):
    """GDAL affine geotransform: pixel/line to georeferenced coordinates."""
    x_origin: float = 0.0
    pixel_width: float = 1.0
    row_rotation: float = 0.0
    y_origin: float = 0.0
    column_rotation: float = 0.0
    pixel_height: float = 1.0

    @classmethod
    def from_gdal(cls, coefficients: Optional[Tuple[float, ...]]) -> "GeoTransform":
        """Create from the 6-tuple returned by ``Dataset.GetGeoTransform``."""
        if coefficients is None:
            return cls()
        if len(coefficients) != 6:
            raise ValueError(f"Geotransform must have 6 coefficients, got {len(coefficients)}")
        x0, dx, rx, y0, ry, dy = (float(c) for c in coefficients)
        return cls(
            x_origin=x0,
            pixel_width=dx,
            row_rotation=rx,
            y_origin=y0,
            column_rotation=ry,
            pixel_height=dy,
        )

    def to_gdal(self) -> Tuple[float, float, float, float, float, float]:
        return (
            self.x_origin,
            self.pixel_width,
            self.row_rotation,
            self.y_origin,
            self.column_rotation,
            self.pixel_height,
        )

    @property
    def is_rectilinear(self) -> bool:
        """True when x depends only on the column and y only on the row."""
        return self.row_rotation == 0.0 and self.column_rotation == 0.0

    def x_coords(self, width: int) -> np.ndarray:
        """X coordinate of each column's pixel centre."""
        return self.x_origin + (np.arange(width, dtype=np.float64) + 0.5) * self.pixel_width

    def y_coords(self, height: int) -> np.ndarray:
        """Y coordinate of each row's pixel centre, top row first."""
        return self.y_origin + (np.arange(height, dtype=np.float64) + 0.5) * self.pixel_height

    def bounds(self, width: int, height: int, crs: Optional[str] = None) -> BoundingBox:
        """Outer edges of a ``width`` x ``height`` raster."""
        xs = [
            self.x_origin + col * self.pixel_width + row * self.row_rotation
            for col, row in ((0, 0), (width, 0), (0, height), (width, height))
        ]
        ys = [
            self.y_origin + col * self.column_rotation + row * self.pixel_height
            for col, row in ((0, 0), (width, 0), (0, height), (width, height))
        ]
        return BoundingBox(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys), crs=crs)


class SubdatasetRef(BaseModel):
    """One entry of a container's SUBDATASETS metadata domain."""
    index: int = Field(..., ge=1, description="1-based position in the metadata list")
    name: str = Field(..., min_length=1, description="Connection string passed to GDAL")
    description: Optional[str] = None
