# pyright: reportMissingImports=false, reportUnknownMemberType=false, reportUnknownArgumentType=false, reportUnknownVariableType=false

"""Banded raster reader: the bands of one GDAL dataset as a single DataArray."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, cast

import numpy as np
import xarray as xr
from dask.array import concatenate as da_concatenate  # type: ignore[attr-defined]
from dask.array import from_delayed as da_from_delayed  # type: ignore[attr-defined]
from dask.array import stack as da_stack  # type: ignore[attr-defined]
from dask.delayed import Delayed, delayed  # type: ignore[assignment]

from . import backend
from .config import LoadOptions
from .convert import allocate, decode_buffer, resolve_kind
from .core import flip_rows, normalize_crs, reverse_axes, stringify_metadata
from .errors import InconsistentBandsError
from .types import AxisOrder, ComplexIntegerMode, GeoTransform, Origin, ScalarKind
from .typing import RasterBand, RasterDataset

logger = logging.getLogger(__name__)

LoadedArray = Tuple[ScalarKind, xr.DataArray]


def validate_bands(dataset: RasterDataset) -> int:
    """Return the data type shared by every band of ``dataset``.

    Raises:
        InconsistentBandsError: If bands differ in data type or size, or there are none
    """

    x_size, y_size = dataset.RasterXSize, dataset.RasterYSize
    data_type: Optional[int] = None
    for index in range(1, dataset.RasterCount + 1):
        band = dataset.GetRasterBand(index)
        if data_type is None:
            data_type = band.DataType
        if band.DataType != data_type:
            raise InconsistentBandsError(
                f"Data has multiple different band types: band {index} is "
                f"{backend.data_type_name(band.DataType)}, band 1 is {backend.data_type_name(data_type)}"
            )
        if band.XSize != x_size or band.YSize != y_size:
            raise InconsistentBandsError(
                f"Data has multiple band resolutions: band {index} is "
                f"{band.XSize}x{band.YSize}, dataset is {x_size}x{y_size}"
            )
        logger.debug(f"  band {index} {backend.data_type_name(band.DataType)} {band.GetDescription()}")

    if data_type is None:
        raise InconsistentBandsError("Dataset has no raster bands")
    return data_type


def row_chunks(height: int, rows: int) -> List[Tuple[int, int]]:
    """Split ``height`` rows into ``(offset, count)`` windows of at most ``rows``."""

    if rows <= 0:
        raise ValueError("rows per chunk must be a positive integer")
    return [(start, min(rows, height - start)) for start in range(0, height, rows)]


def _chunk_rows(band: RasterBand, options: LoadOptions) -> int:
    if options.chunk_rows is not None:
        return options.chunk_rows
    block = band.GetBlockSize()
    return max(1, int(block[1])) if block else 1


def read_window(
    band: RasterBand,
    data_type: int,
    y_offset: int,
    rows: int,
    width: int,
    mode: ComplexIntegerMode = ComplexIntegerMode.WIDEN,
) -> np.ndarray:
    """Read ``rows`` full-width rows starting at ``y_offset`` (GDAL row order)."""

    raw = band.ReadRaster(xoff=0, yoff=y_offset, xsize=width, ysize=rows, buf_type=int(data_type))
    return decode_buffer(raw, data_type, (rows, width), mode)


def read_band(
    band: RasterBand,
    data_type: int,
    width: int,
    height: int,
    options: LoadOptions,
) -> np.ndarray:
    """Read a whole band into freshly allocated storage, top row first."""

    kind = cast(ScalarKind, resolve_kind(data_type, options.complex_integers))
    out = allocate(kind, (height, width))

    if options.cellwise:
        for y in range(height):
            for x in range(width):
                raw = band.ReadRaster(xoff=x, yoff=y, xsize=1, ysize=1, buf_type=int(data_type))
                out[y, x] = decode_buffer(raw, data_type, (1, 1), options.complex_integers)[0, 0]
        return out

    for start, rows in row_chunks(height, _chunk_rows(band, options)):
        out[start:start + rows] = read_window(
            band, data_type, start, rows, width, options.complex_integers
        )
    return out


def _delayed_call(func: Callable[..., Any], *args: Any) -> Delayed:
    """Typed helper around ``dask.delayed`` to satisfy static analysis."""

    return cast(Delayed, delayed(func)(*args))


def _read_window_from_source(
    source: str,
    band_index: int,
    data_type: int,
    y_offset: int,
    rows: int,
    width: int,
    options: LoadOptions,
) -> np.ndarray:
    with backend.raster_dataset(source, options) as dataset:
        band = dataset.GetRasterBand(band_index)
        return read_window(band, data_type, y_offset, rows, width, options.complex_integers)


def _lazy_band(
    source: str,
    band_index: int,
    band: RasterBand,
    data_type: int,
    width: int,
    height: int,
    options: LoadOptions,
) -> Any:
    kind = cast(ScalarKind, resolve_kind(data_type, options.complex_integers))
    blocks = []
    for start, rows in row_chunks(height, _chunk_rows(band, options)):
        task = _delayed_call(
            _read_window_from_source,
            source,
            band_index,
            data_type,
            start,
            rows,
            width,
            options,
        )
        blocks.append(da_from_delayed(task, shape=(rows, width), dtype=kind.dtype))
    return da_concatenate(blocks, axis=0)


def _raster_coords(
    transform: GeoTransform,
    width: int,
    height: int,
    bands: Sequence[RasterBand],
) -> Dict[str, Any]:
    if transform.is_rectilinear:
        coords: Dict[str, Any] = {
            "y": transform.y_coords(height),
            "x": transform.x_coords(width),
        }
    else:
        # rotated grids have no 1-D coordinates; keep pixel indices
        coords = {"y": np.arange(height), "x": np.arange(width)}
    if len(bands) > 1:
        coords["band"] = np.arange(1, len(bands) + 1)
        coords["band_description"] = ("band", [band.GetDescription() for band in bands])
    return coords


def _nodata_values(bands: Sequence[RasterBand]) -> List[Optional[float]]:
    return [band.GetNoDataValue() for band in bands]


def _same_nodata(a: Optional[float], b: Optional[float]) -> bool:
    if a is None or b is None:
        return a is b
    return a == b or bool(np.isnan(a) and np.isnan(b))


def _mask_nodata(array: xr.DataArray, nodatas: Sequence[Optional[float]]) -> xr.DataArray:
    """Replace each band's own nodata value with NaN."""

    # NaN never compares equal, so bands without nodata stay untouched
    values = [np.nan if value is None else value for value in nodatas]
    if "band" in array.dims:
        fill = xr.DataArray(values, dims="band")
    else:
        fill = values[0]
    masked = array.where(array != fill)
    masked.attrs = array.attrs
    return masked


def _raster_attrs(
    dataset: RasterDataset,
    bands: Sequence[RasterBand],
    data_type: int,
    transform: GeoTransform,
    options: LoadOptions,
) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {
        "source": dataset.GetDescription(),
        "gdal_data_type": backend.data_type_name(data_type),
        "transform": transform.to_gdal(),
        "origin": options.origin.value,
    }

    crs = normalize_crs(dataset.GetProjection())
    if crs:
        attrs["crs"] = crs

    if transform.is_rectilinear and transform.pixel_width and transform.pixel_height:
        attrs["bounds"] = transform.bounds(dataset.RasterXSize, dataset.RasterYSize).to_tuple()

    descriptions = [band.GetDescription() for band in bands]
    if len(bands) == 1:
        attrs["description"] = descriptions[0]
    else:
        attrs["band_descriptions"] = descriptions

    units = [band.GetUnitType() or "" for band in bands]
    if len(set(units)) == 1:
        if units[0]:
            attrs["units"] = units[0]
    else:
        attrs["units"] = units

    nodatas = _nodata_values(bands)
    if all(_same_nodata(value, nodatas[0]) for value in nodatas):
        if nodatas[0] is not None:
            attrs["nodata"] = nodatas[0]
    else:
        attrs["nodata"] = nodatas

    first = bands[0]
    scale, offset = first.GetScale(), first.GetOffset()
    if scale is not None and scale != 1.0:
        attrs["scale_factor"] = scale
    if offset is not None and offset != 0.0:
        attrs["add_offset"] = offset

    if len(bands) == 1:
        for key, value in stringify_metadata(first.GetMetadata()).items():
            attrs.setdefault(key, value)
    else:
        for number, band in enumerate(bands, start=1):
            attrs.update(stringify_metadata(band.GetMetadata(), prefix=f"band{number}:"))
    return attrs


def load_raster(dataset: RasterDataset, options: Optional[LoadOptions] = None) -> Optional[LoadedArray]:
    """
    Load every band of ``dataset`` into one dimensioned array.

    Args:
        dataset: Open GDAL raster dataset
        options: Load options; defaults to ``LoadOptions()``

    Returns:
        ``(kind, array)`` with dims ``(y, x)`` for a single band and
        ``(band, y, x)`` otherwise (reversed with ``axis_order=reversed``),
        or None when the dataset has no bands or an unsupported data type

    Raises:
        InconsistentBandsError: If bands differ in data type or size
    """
    opts = options or LoadOptions()
    count = dataset.RasterCount
    if count == 0:
        return None

    description = dataset.GetDescription()
    width, height = dataset.RasterXSize, dataset.RasterYSize
    logger.info(f"{description}: {width} x {height}, {count} band(s)")

    data_type = validate_bands(dataset)
    kind = resolve_kind(data_type, opts.complex_integers)
    if kind is None:
        logger.warning(
            f"Ignoring unknown data type {backend.data_type_name(data_type)} in {description}"
        )
        return None

    bands = [dataset.GetRasterBand(index) for index in range(1, count + 1)]

    data: Any
    if opts.lazy:
        data = da_stack(
            [
                _lazy_band(description, index, band, data_type, width, height, opts)
                for index, band in enumerate(bands, start=1)
            ],
            axis=0,
        )
    else:
        data = allocate(kind, (count, height, width))
        for index, band in enumerate(bands):
            data[index] = read_band(band, data_type, width, height, opts)

    transform = GeoTransform.from_gdal(dataset.GetGeoTransform())
    coords = _raster_coords(transform, width, height, bands)
    attrs = _raster_attrs(dataset, bands, data_type, transform, opts)

    # GDAL rows run top-down; a lower origin puts the bottom row first
    if opts.origin == Origin.LOWER:
        data = flip_rows(data, axis=1)
        coords["y"] = coords["y"][::-1]

    if count == 1:
        array = xr.DataArray(data[0], coords=coords, dims=("y", "x"), attrs=attrs)
    else:
        array = xr.DataArray(data, coords=coords, dims=("band", "y", "x"), attrs=attrs)

    nodatas = _nodata_values(bands)
    if opts.mask_nodata and kind.is_floating and any(value is not None for value in nodatas):
        array = _mask_nodata(array, nodatas)

    if opts.axis_order == AxisOrder.REVERSED:
        array = reverse_axes(array)

    logger.debug(f"Loaded {kind.value} array {dict(array.sizes)} from {description}")
    return kind, array
