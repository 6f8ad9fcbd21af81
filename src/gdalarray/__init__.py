"""gdalarray - load GDAL rasters, sub-datasets and multidimensional arrays into xarray."""

from ._version import __version__

from .api import init, list_subdatasets, load_all, open_dataarray
from .bundle import DataBundle
from .config import LoadOptions
from .convert import decode_buffer, resolve_kind, source_dtype
from .errors import (
    BufferSizeError,
    ConfigurationError,
    DatasetOpenError,
    GdalArrayError,
    InconsistentBandsError,
    ParseError,
    SubdatasetMetadataError,
    ValidationError,
)
from .types import (
    AxisOrder,
    BoundingBox,
    ComplexIntegerMode,
    DataType,
    GeoTransform,
    Origin,
    ScalarKind,
    SubdatasetRef,
)

__all__ = [
    "__version__",
    "init",
    "list_subdatasets",
    "load_all",
    "open_dataarray",
    "DataBundle",
    "LoadOptions",
    "decode_buffer",
    "resolve_kind",
    "source_dtype",
    "BufferSizeError",
    "ConfigurationError",
    "DatasetOpenError",
    "GdalArrayError",
    "InconsistentBandsError",
    "ParseError",
    "SubdatasetMetadataError",
    "ValidationError",
    "AxisOrder",
    "BoundingBox",
    "ComplexIntegerMode",
    "DataType",
    "GeoTransform",
    "Origin",
    "ScalarKind",
    "SubdatasetRef",
]
