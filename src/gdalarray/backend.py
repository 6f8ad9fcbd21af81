"""Access to the GDAL bindings: initialisation, dataset opening and SUBDATASETS parsing."""

from __future__ import annotations

import logging
import os
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .config import LoadOptions
from .errors import ConfigurationError, DatasetOpenError, SubdatasetMetadataError
from .types import DataType, SubdatasetRef
from .typing import MultidimDataset, PathLike, RasterDataset

try:  # pragma: no cover - optional dependency
    from osgeo import gdal as _gdal  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    _gdal = None

__all__ = [
    "init",
    "get_gdal",
    "open_raster",
    "open_multidim",
    "raster_dataset",
    "close_dataset",
    "parse_subdatasets",
    "read_subdatasets",
    "data_type_name",
]

logger = logging.getLogger(__name__)

_SUBDATASET_ENTRY = re.compile(r"^SUBDATASET_(\d+)_(NAME|DESC)=(.*)$", re.DOTALL)

_initialized = False


def init() -> Any:
    """Register GDAL drivers and switch the bindings to raising exceptions.

    Safe to call more than once; the readers call it on first use.
    """

    global _initialized
    if _gdal is None:
        raise ConfigurationError(
            "The GDAL Python bindings (osgeo.gdal) are required. "
            "Install them with `pip install gdalarray[gdal]` or from conda-forge."
        )
    if not _initialized:
        _gdal.UseExceptions()
        _gdal.AllRegister()
        _initialized = True
        logger.debug(f"Initialized GDAL {_gdal.VersionInfo('RELEASE_NAME')}")
    return _gdal


def get_gdal() -> Any:
    """Return the initialised ``osgeo.gdal`` module."""

    return init()


def _path_str(path: PathLike) -> str:
    return os.fspath(path)


def open_raster(path: PathLike, options: Optional[LoadOptions] = None) -> RasterDataset:
    """Open ``path`` through GDAL's classic raster API."""

    gdal = get_gdal()
    opts = options or LoadOptions()
    name = _path_str(path)
    try:
        dataset = gdal.OpenEx(name, gdal.OF_RASTER | gdal.OF_READONLY, **opts.open_kwargs())
    except RuntimeError as exc:
        raise DatasetOpenError(f"GDAL could not open {name}: {exc}", cause=exc) from exc
    if dataset is None:
        raise DatasetOpenError(f"GDAL could not open {name}")
    return dataset


def open_multidim(path: PathLike, options: Optional[LoadOptions] = None) -> Optional[MultidimDataset]:
    """Open ``path`` through GDAL's multidimensional API.

    Returns None when no driver exposes the file as multidimensional data.
    """

    gdal = get_gdal()
    opts = options or LoadOptions()
    name = _path_str(path)
    try:
        dataset = gdal.OpenEx(
            name, gdal.OF_MULTIDIM_RASTER | gdal.OF_READONLY, **opts.open_kwargs()
        )
    except RuntimeError as exc:
        logger.debug(f"No multidimensional driver for {name}: {exc}")
        return None
    return dataset


def close_dataset(dataset: Any) -> None:
    """Release a GDAL dataset handle.

    ``Dataset.Close`` exists from GDAL 3.8; older bindings release the handle
    when the last reference goes away.
    """

    close = getattr(dataset, "Close", None)
    if close is not None:
        close()


@contextmanager
def raster_dataset(path: PathLike, options: Optional[LoadOptions] = None) -> Iterator[RasterDataset]:
    """Open a raster dataset and close it when the block exits."""

    dataset = open_raster(path, options)
    try:
        yield dataset
    finally:
        close_dataset(dataset)


def parse_subdatasets(entries: Optional[Sequence[str]]) -> List[SubdatasetRef]:
    """
    Parse the ``SUBDATASETS`` metadata domain.

    Args:
        entries: ``KEY=VALUE`` strings from ``GetMetadata_List("SUBDATASETS")``

    Returns:
        Sub-dataset references ordered by their index

    Raises:
        SubdatasetMetadataError: If an entry is not ``SUBDATASET_<n>_NAME|DESC=value``,
            or if a name holds more than one equal sign
    """
    if not entries:
        return []

    names: Dict[int, str] = {}
    descriptions: Dict[int, str] = {}
    for entry in entries:
        match = _SUBDATASET_ENTRY.match(entry)
        if match is None:
            raise SubdatasetMetadataError(f"Malformed SUBDATASETS metadata entry: {entry!r}")
        index, key, value = int(match.group(1)), match.group(2), match.group(3)
        if key == "NAME":
            if "=" in value:
                raise SubdatasetMetadataError(
                    f"Too many equal signs in sub-dataset name: {entry!r}"
                )
            if not value:
                raise SubdatasetMetadataError(f"Empty sub-dataset name: {entry!r}")
            names[index] = value
        else:
            descriptions[index] = value

    orphans = sorted(set(descriptions) - set(names))
    if orphans:
        logger.warning(f"Ignoring sub-dataset descriptions without a name: {orphans}")

    return [
        SubdatasetRef(index=index, name=names[index], description=descriptions.get(index))
        for index in sorted(names)
    ]


def read_subdatasets(dataset: RasterDataset) -> List[SubdatasetRef]:
    """Sub-dataset references advertised by an open dataset."""

    return parse_subdatasets(dataset.GetMetadata_List("SUBDATASETS"))


def data_type_name(code: int) -> str:
    """Human readable GDAL type name, e.g. ``Float32``."""

    data_type = DataType.from_code(code)
    return data_type.gdal_name if data_type is not None else f"Unknown({code})"
