"""
Coordinate and metadata helpers shared by the raster and multidimensional readers.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import numpy as np
import xarray as xr
from pyproj import CRS
from pyproj.exceptions import CRSError

logger = logging.getLogger(__name__)


def normalize_crs(wkt: Optional[str]) -> Optional[str]:
    """
    Normalize a GDAL projection string.

    Args:
        wkt: WKT (or any pyproj-readable definition) reported by GDAL

    Returns:
        ``EPSG:<code>`` when the CRS matches an EPSG entry, the WKT otherwise,
        or None when the dataset has no projection
    """
    if not wkt:
        return None
    try:
        crs = CRS.from_user_input(wkt)
    except CRSError as exc:
        logger.warning(f"Keeping unparseable projection verbatim: {exc}")
        return wkt

    epsg = crs.to_epsg()
    if epsg is not None:
        return f"EPSG:{epsg}"
    return crs.to_wkt()


def flip_rows(data: Any, axis: int) -> Any:
    """Reverse ``data`` along ``axis``; works for numpy and dask arrays."""
    index = [slice(None)] * data.ndim
    index[axis] = slice(None, None, -1)
    return data[tuple(index)]


def reverse_axes(array: xr.DataArray) -> xr.DataArray:
    """Transpose so the fastest-varying dimension comes first."""
    return array.transpose(*reversed(array.dims))


def stringify_metadata(metadata: Optional[Mapping[Any, Any]], prefix: str = "") -> Dict[str, str]:
    """
    Coerce GDAL metadata to a ``str -> str`` mapping.

    Args:
        metadata: Mapping returned by ``GetMetadata`` (may be None)
        prefix: Optional prefix prepended to every key

    Returns:
        New dictionary with string keys and values
    """
    if not metadata:
        return {}
    return {f"{prefix}{key}": to_text(value) for key, value in metadata.items()}


def to_text(value: Any) -> str:
    """Render a GDAL metadata or attribute value as text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, np.ndarray):
        return to_text(value.tolist())
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(item) for item in value)
    return str(value)
