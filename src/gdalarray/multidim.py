"""Reader for GDAL's multidimensional API (netCDF, HDF5, Zarr, ...)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple, cast

import numpy as np
import xarray as xr

from . import backend
from .config import LoadOptions
from .convert import allocate, decode_buffer, resolve_kind
from .core import to_text, flip_rows, normalize_crs, reverse_axes
from .types import AxisOrder, ExtendedDataClass, Origin, ScalarKind
from .typing import Dimension, Group, MDArray, MultidimDataset

logger = logging.getLogger(__name__)

LoadedArray = Tuple[ScalarKind, xr.DataArray]

HORIZONTAL_Y = "HORIZONTAL_Y"


def iter_arrays(group: Group) -> Iterator[MDArray]:
    """Yield every array of ``group`` and its sub-groups, depth first."""

    for name in group.GetMDArrayNames() or []:
        yield group.OpenMDArray(name)
    for name in group.GetGroupNames() or []:
        yield from iter_arrays(group.OpenGroup(name))


def _indexing_names(arrays: Sequence[MDArray]) -> Set[str]:
    names: Set[str] = set()
    for array in arrays:
        for dim in array.GetDimensions() or []:
            variable = dim.GetIndexingVariable()
            if variable is not None:
                names.add(variable.GetFullName())
    return names


def _numeric_type(array: MDArray) -> Optional[int]:
    data_type = array.GetDataType()
    if data_type.GetClass() != ExtendedDataClass.NUMERIC:
        return None
    return data_type.GetNumericDataType()


def read_mdarray(array: MDArray, options: LoadOptions) -> Optional[Tuple[ScalarKind, np.ndarray]]:
    """Read the full extent of ``array`` in GDAL axis order.

    Arrays whose first axis is longer than ``chunk_rows`` are read in slabs
    along that axis.
    """

    data_type = _numeric_type(array)
    if data_type is None:
        return None
    kind = resolve_kind(data_type, options.complex_integers)
    if kind is None:
        return None

    shape = tuple(int(dim.GetSize()) for dim in array.GetDimensions() or [])
    if not shape:
        return kind, decode_buffer(array.Read(), data_type, (), options.complex_integers)

    step = options.chunk_rows
    if step is None or step >= shape[0]:
        return kind, decode_buffer(array.Read(), data_type, shape, options.complex_integers)

    out = allocate(kind, shape)
    for start in range(0, shape[0], step):
        rows = min(step, shape[0] - start)
        count = [rows, *shape[1:]]
        raw = array.Read(array_start_idx=[start] + [0] * (len(shape) - 1), count=count)
        out[start:start + rows] = decode_buffer(raw, data_type, count, options.complex_integers)
    return kind, out


def _dimension_coords(dim: Dimension, options: LoadOptions) -> Optional[np.ndarray]:
    variable = dim.GetIndexingVariable()
    if variable is None:
        return None
    dims = variable.GetDimensions() or []
    if len(dims) != 1 or int(dims[0].GetSize()) != int(dim.GetSize()):
        logger.debug(f"Skipping indexing variable of {dim.GetName()}: not 1-D with matching size")
        return None
    loaded = read_mdarray(variable, options.model_copy(update={"chunk_rows": None}))
    if loaded is None:
        return None
    return loaded[1]


def _array_attrs(array: MDArray, data_type: int) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {
        "full_name": array.GetFullName(),
        "gdal_data_type": backend.data_type_name(data_type),
    }
    unit = array.GetUnit()
    if unit:
        attrs["units"] = unit
    nodata = array.GetNoDataValueAsDouble()
    if nodata is not None:
        attrs["nodata"] = nodata
    scale, offset = array.GetScale(), array.GetOffset()
    if scale is not None and scale != 1.0:
        attrs["scale_factor"] = scale
    if offset is not None and offset != 0.0:
        attrs["add_offset"] = offset

    srs = array.GetSpatialRef()
    if srs is not None:
        crs = normalize_crs(srs.ExportToWkt())
        if crs:
            attrs["crs"] = crs

    for attribute in array.GetAttributes() or []:
        attrs.setdefault(attribute.GetName(), to_text(attribute.Read()))
    return attrs


def load_mdarray(array: MDArray, options: Optional[LoadOptions] = None) -> Optional[LoadedArray]:
    """
    Load one multidimensional array with its coordinates and attributes.

    Args:
        array: GDAL MDArray
        options: Load options; defaults to ``LoadOptions()``

    Returns:
        ``(kind, array)`` or None when the data type is not numeric or unsupported
    """
    opts = options or LoadOptions()
    name = array.GetFullName()
    loaded = read_mdarray(array, opts)
    if loaded is None:
        logger.warning(f"Ignoring {name}: unsupported data type")
        return None
    kind, data = loaded
    data_type = cast(int, _numeric_type(array))

    dimensions = list(array.GetDimensions() or [])
    dims = [dim.GetName() for dim in dimensions]
    coords: Dict[str, Any] = {}
    for axis, dim in enumerate(dimensions):
        values = _dimension_coords(dim, opts)
        if values is None:
            continue
        # a north-up grid stores y descending; flip it for a bottom-left origin
        if (
            opts.origin == Origin.LOWER
            and dim.GetType() == HORIZONTAL_Y
            and values.size > 1
            and values[0] > values[-1]
        ):
            data = flip_rows(data, axis)
            values = values[::-1]
        coords[dim.GetName()] = values

    attrs = _array_attrs(array, data_type)
    attrs["origin"] = opts.origin.value
    result = xr.DataArray(data, coords=coords, dims=dims, attrs=attrs, name=array.GetName())

    nodata = attrs.get("nodata")
    if opts.mask_nodata and kind.is_floating and nodata is not None:
        result = result.where(result != nodata)
        result.attrs = attrs

    if opts.axis_order == AxisOrder.REVERSED:
        result = reverse_axes(result)

    logger.debug(f"Loaded {kind.value} array {name} {dict(result.sizes)}")
    return kind, result


def load_multidim(dataset: MultidimDataset, options: Optional[LoadOptions] = None) -> List[LoadedArray]:
    """Load every numeric array of a multidimensional dataset.

    Arrays that only index a dimension become coordinates of the arrays
    that use them and are not returned on their own.
    """

    opts = options or LoadOptions()
    root = dataset.GetRootGroup()
    if root is None:
        return []

    arrays = list(iter_arrays(root))
    indexing = _indexing_names(arrays)
    logger.info(
        f"{dataset.GetDescription()}: {len(arrays)} multidimensional array(s), "
        f"{len(indexing)} indexing variable(s)"
    )

    results: List[LoadedArray] = []
    for array in arrays:
        if array.GetFullName() in indexing:
            continue
        loaded = load_mdarray(array, opts)
        if loaded is not None:
            results.append(loaded)
    return results


def root_attributes(dataset: MultidimDataset) -> Dict[str, str]:
    """Attributes of the root group as strings."""

    root = dataset.GetRootGroup()
    if root is None:
        return {}
    return {attribute.GetName(): to_text(attribute.Read()) for attribute in root.GetAttributes() or []}
