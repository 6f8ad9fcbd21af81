"""
High-level entry points for loading GDAL datasets into xarray.

This module opens files, walks their sub-datasets, and collects every
array GDAL exposes into a :class:`~gdalarray.bundle.DataBundle`.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Union

import xarray as xr

from . import backend
from .bundle import DataBundle
from .config import LoadOptions
from .core import stringify_metadata
from .errors import DatasetOpenError, ValidationError
from .multidim import load_multidim, root_attributes
from .raster import load_raster
from .types import SubdatasetRef
from .typing import PathLike, RasterDataset

logger = logging.getLogger(__name__)

OptionsInput = Optional[Union[LoadOptions, Dict[str, Any]]]


def init() -> None:
    """Register GDAL drivers. Optional: every loader calls it on first use."""
    backend.init()


def load_all(path: PathLike, options: OptionsInput = None, **overrides: Any) -> DataBundle:
    """
    Load every array of a file, recursing into its sub-datasets.

    Args:
        path: File name or GDAL connection string
        options: ``LoadOptions`` or a mapping of option values
        **overrides: Individual option overrides, e.g. ``origin="upper"``

    Returns:
        Bundle of arrays grouped by scalar type, with dataset metadata in ``chars``

    Raises:
        DatasetOpenError: If GDAL cannot open the file
        InconsistentBandsError: If a dataset mixes band types or sizes
        SubdatasetMetadataError: If the SUBDATASETS domain is malformed
    """
    opts = LoadOptions.from_kwargs(options, **overrides)
    return _load(os.fspath(path), opts)


def _load(path: str, options: LoadOptions) -> DataBundle:
    use_multidim = options.multidim
    if use_multidim and options.prefer_multidim:
        bundle = _load_multidim(path, options)
        if bundle is not None and not bundle.is_empty():
            return bundle

    # only the file's own open may fall back; sub-dataset errors propagate
    try:
        dataset = backend.open_raster(path, options)
    except DatasetOpenError:
        if not use_multidim or options.prefer_multidim:
            raise
        fallback = _load_multidim(path, options)
        if fallback is None or fallback.is_empty():
            raise
        return fallback

    try:
        results = _load_raster(path, dataset, options)
    finally:
        backend.close_dataset(dataset)

    if results.is_empty() and use_multidim and not options.prefer_multidim:
        fallback = _load_multidim(path, options)
        if fallback is not None:
            results.merge(fallback)
    return results


def _load_raster(path: str, dataset: RasterDataset, options: LoadOptions) -> DataBundle:
    results = DataBundle()
    # the container's own metadata first, so sub-datasets loaded later win
    results.add_metadata(stringify_metadata(dataset.GetMetadata()))

    subdatasets = backend.read_subdatasets(dataset)
    if subdatasets and options.recurse_subdatasets:
        if options.max_depth <= 0:
            logger.warning(f"Not following {len(subdatasets)} sub-dataset(s) of {path}: max_depth reached")
        else:
            for ref in subdatasets:
                logger.debug(f"Loading sub-dataset {ref.index}: {ref.name}")
                results.merge(_load(ref.name, options.child()))

    logger.info(dataset.GetDescription())
    if dataset.RasterCount == 0:
        if subdatasets:
            logger.info("This dataset has been encoded as a set of sub-datasets")
    else:
        loaded = load_raster(dataset, options)
        if loaded is not None:
            results.add(*loaded)
    return results


def _load_multidim(path: str, options: LoadOptions) -> Optional[DataBundle]:
    dataset = backend.open_multidim(path, options)
    if dataset is None:
        return None
    try:
        bundle = DataBundle()
        bundle.add_metadata(root_attributes(dataset))
        for kind, array in load_multidim(dataset, options):
            bundle.add(kind, array)
        return bundle
    finally:
        backend.close_dataset(dataset)


def open_dataarray(path: PathLike, options: OptionsInput = None, **overrides: Any) -> xr.DataArray:
    """Load a file that holds exactly one array and return that array.

    Raises:
        ValidationError: If the file yields no array or more than one
    """

    bundle = load_all(path, options, **overrides)
    arrays = [array for _, array in bundle.arrays()]
    if len(arrays) != 1:
        raise ValidationError(
            f"{os.fspath(path)} holds {len(arrays)} arrays; use load_all() instead"
        )
    return arrays[0]


def list_subdatasets(path: PathLike, options: OptionsInput = None, **overrides: Any) -> List[SubdatasetRef]:
    """Sub-datasets advertised by a container file, in order."""

    opts = LoadOptions.from_kwargs(options, **overrides)
    with backend.raster_dataset(path, opts) as dataset:
        return backend.read_subdatasets(dataset)
