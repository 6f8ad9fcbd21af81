"""
Shared test configuration, fixtures, and fake GDAL objects for gdalarray tests.

The fakes implement the protocols in ``gdalarray.typing`` so the readers can
be exercised without the GDAL bindings installed. Raw buffers are produced
with ``ndarray.tobytes()``, which matches GDAL's native-endian, row-major
layout (complex integers as interleaved real/imaginary pairs).
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from gdalarray import backend
from gdalarray.config import LoadOptions
from gdalarray.errors import DatasetOpenError
from gdalarray.types import DataType, ExtendedDataClass


def pytest_configure(config):
    """Configure test markers."""
    config.addinivalue_line("markers", "unit: marks unit tests (fast, pure logic)")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "gdal: marks tests that need the GDAL Python bindings")


class FakeBand:
    def __init__(
        self,
        data: np.ndarray,
        data_type: DataType,
        description: str = "",
        unit: str = "",
        nodata: Optional[float] = None,
        scale: Optional[float] = None,
        offset: Optional[float] = None,
        metadata: Optional[Dict[str, str]] = None,
        block_rows: Optional[int] = None,
    ) -> None:
        self.data = data
        self.DataType = int(data_type)
        self.YSize, self.XSize = data.shape
        self.description = description
        self.unit = unit
        self.nodata = nodata
        self.scale = scale
        self.offset = offset
        self.metadata = metadata or {}
        self.block_rows = block_rows or self.YSize
        self.reads: List[Tuple[int, int, int, int]] = []

    def GetDescription(self) -> str:
        return self.description

    def GetUnitType(self) -> str:
        return self.unit

    def GetNoDataValue(self) -> Optional[float]:
        return self.nodata

    def GetScale(self) -> Optional[float]:
        return self.scale

    def GetOffset(self) -> Optional[float]:
        return self.offset

    def GetMetadata(self, domain: str = "") -> Dict[str, str]:
        return dict(self.metadata)

    def GetBlockSize(self) -> List[int]:
        return [self.XSize, self.block_rows]

    def ReadRaster(
        self,
        xoff: int = 0,
        yoff: int = 0,
        xsize: Optional[int] = None,
        ysize: Optional[int] = None,
        buf_xsize: Optional[int] = None,
        buf_ysize: Optional[int] = None,
        buf_type: Optional[int] = None,
    ) -> bytes:
        xsize = self.XSize if xsize is None else xsize
        ysize = self.YSize if ysize is None else ysize
        assert buf_type in (None, self.DataType)
        self.reads.append((xoff, yoff, xsize, ysize))
        window = self.data[yoff:yoff + ysize, xoff:xoff + xsize]
        return np.ascontiguousarray(window).tobytes()


class FakeDataset:
    def __init__(
        self,
        bands: Sequence[FakeBand] = (),
        description: str = "fake.tif",
        geotransform: Optional[Sequence[float]] = (100.0, 10.0, 0.0, 500.0, 0.0, -10.0),
        projection: str = "",
        metadata: Optional[Dict[str, str]] = None,
        subdatasets: Optional[List[str]] = None,
        size: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.bands = list(bands)
        self.description = description
        self.geotransform = geotransform
        self.projection = projection
        self.metadata = metadata or {}
        self.subdatasets = subdatasets
        self.closed = 0
        if size is not None:
            self.RasterXSize, self.RasterYSize = size
        elif self.bands:
            self.RasterXSize, self.RasterYSize = self.bands[0].XSize, self.bands[0].YSize
        else:
            self.RasterXSize, self.RasterYSize = 0, 0

    @property
    def RasterCount(self) -> int:
        return len(self.bands)

    def GetDescription(self) -> str:
        return self.description

    def GetMetadata(self, domain: str = "") -> Dict[str, str]:
        return dict(self.metadata)

    def GetMetadata_List(self, domain: str = "") -> Optional[List[str]]:
        assert domain == "SUBDATASETS"
        return list(self.subdatasets) if self.subdatasets is not None else None

    def GetRasterBand(self, index: int) -> FakeBand:
        return self.bands[index - 1]

    def GetGeoTransform(self) -> Optional[Sequence[float]]:
        return self.geotransform

    def GetProjection(self) -> str:
        return self.projection

    def Close(self) -> None:
        self.closed += 1


class FakeExtendedDataType:
    def __init__(self, numeric_type: int, data_class: int = ExtendedDataClass.NUMERIC) -> None:
        self.numeric_type = int(numeric_type)
        self.data_class = int(data_class)

    def GetClass(self) -> int:
        return self.data_class

    def GetNumericDataType(self) -> int:
        return self.numeric_type


class FakeAttribute:
    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value

    def GetName(self) -> str:
        return self.name

    def Read(self) -> Any:
        return self.value


class FakeSpatialRef:
    def __init__(self, wkt: str) -> None:
        self.wkt = wkt

    def ExportToWkt(self) -> str:
        return self.wkt


class FakeDimension:
    def __init__(
        self,
        name: str,
        size: int,
        dim_type: str = "",
        indexing: Optional["FakeMDArray"] = None,
    ) -> None:
        self.name = name
        self.size = size
        self.dim_type = dim_type
        self.indexing = indexing

    def GetName(self) -> str:
        return self.name

    def GetSize(self) -> int:
        return self.size

    def GetType(self) -> str:
        return self.dim_type

    def GetIndexingVariable(self) -> Optional["FakeMDArray"]:
        return self.indexing


class FakeMDArray:
    def __init__(
        self,
        name: str,
        data: np.ndarray,
        data_type: DataType,
        dims: Sequence[FakeDimension] = (),
        group: str = "/",
        unit: str = "",
        nodata: Optional[float] = None,
        attributes: Optional[Dict[str, Any]] = None,
        srs: Optional[FakeSpatialRef] = None,
        data_class: int = ExtendedDataClass.NUMERIC,
    ) -> None:
        self.name = name
        self.data = data
        self.data_type = FakeExtendedDataType(data_type, data_class)
        self.dims = list(dims)
        self.group = group
        self.unit = unit
        self.nodata = nodata
        self.attributes = attributes or {}
        self.srs = srs
        self.reads: List[Tuple[Optional[List[int]], Optional[List[int]]]] = []

    def GetName(self) -> str:
        return self.name

    def GetFullName(self) -> str:
        return f"{self.group.rstrip('/')}/{self.name}"

    def GetDimensions(self) -> List[FakeDimension]:
        return list(self.dims)

    def GetDataType(self) -> FakeExtendedDataType:
        return self.data_type

    def GetUnit(self) -> str:
        return self.unit

    def GetAttributes(self) -> List[FakeAttribute]:
        return [FakeAttribute(key, value) for key, value in self.attributes.items()]

    def GetNoDataValueAsDouble(self) -> Optional[float]:
        return self.nodata

    def GetScale(self) -> Optional[float]:
        return None

    def GetOffset(self) -> Optional[float]:
        return None

    def GetSpatialRef(self) -> Optional[FakeSpatialRef]:
        return self.srs

    def Read(
        self,
        array_start_idx: Optional[Sequence[int]] = None,
        count: Optional[Sequence[int]] = None,
    ) -> bytes:
        self.reads.append(
            (list(array_start_idx) if array_start_idx is not None else None,
             list(count) if count is not None else None)
        )
        if array_start_idx is None:
            return np.ascontiguousarray(self.data).tobytes()
        index = tuple(slice(start, start + n) for start, n in zip(array_start_idx, count or []))
        return np.ascontiguousarray(self.data[index]).tobytes()


def make_coordinate(name: str, values: np.ndarray, data_type: DataType, dim_type: str = "", group: str = "/") -> FakeDimension:
    """A dimension whose indexing variable holds ``values``."""
    dim = FakeDimension(name, len(values), dim_type)
    dim.indexing = FakeMDArray(name, values, data_type, dims=[dim], group=group)
    return dim


class FakeGroup:
    def __init__(
        self,
        name: str = "/",
        arrays: Sequence[FakeMDArray] = (),
        groups: Sequence["FakeGroup"] = (),
        attributes: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self.arrays = {array.GetName(): array for array in arrays}
        self.groups = {group.GetName(): group for group in groups}
        self.attributes = attributes or {}

    def GetName(self) -> str:
        return self.name

    def GetMDArrayNames(self) -> List[str]:
        return list(self.arrays)

    def OpenMDArray(self, name: str) -> FakeMDArray:
        return self.arrays[name]

    def GetGroupNames(self) -> List[str]:
        return list(self.groups)

    def OpenGroup(self, name: str) -> "FakeGroup":
        return self.groups[name]

    def GetAttributes(self) -> List[FakeAttribute]:
        return [FakeAttribute(key, value) for key, value in self.attributes.items()]


class FakeMultidimDataset:
    def __init__(self, root: Optional[FakeGroup], description: str = "fake.nc") -> None:
        self.root = root
        self.description = description
        self.closed = 0

    def GetDescription(self) -> str:
        return self.description

    def GetRootGroup(self) -> Optional[FakeGroup]:
        return self.root

    def Close(self) -> None:
        self.closed += 1


class FakeGdal:
    """Registry of fake datasets served in place of ``gdal.OpenEx``."""

    def __init__(self) -> None:
        self.rasters: Dict[str, FakeDataset] = {}
        self.multidims: Dict[str, FakeMultidimDataset] = {}
        self.opened: List[str] = []

    def add_raster(self, path: str, dataset: FakeDataset) -> FakeDataset:
        dataset.description = path
        self.rasters[path] = dataset
        return dataset

    def add_multidim(self, path: str, dataset: FakeMultidimDataset) -> FakeMultidimDataset:
        dataset.description = path
        self.multidims[path] = dataset
        return dataset

    def open_raster(self, path: Any, options: Optional[LoadOptions] = None) -> FakeDataset:
        name = str(path)
        self.opened.append(name)
        try:
            return self.rasters[name]
        except KeyError as exc:
            raise DatasetOpenError(f"GDAL could not open {name}") from exc

    def open_multidim(self, path: Any, options: Optional[LoadOptions] = None) -> Optional[FakeMultidimDataset]:
        return self.multidims.get(str(path))


@pytest.fixture
def fake_gdal(monkeypatch: pytest.MonkeyPatch) -> FakeGdal:
    """Serve fake datasets from ``gdalarray.backend``'s open functions."""
    registry = FakeGdal()
    monkeypatch.setattr(backend, "open_raster", registry.open_raster)
    monkeypatch.setattr(backend, "open_multidim", registry.open_multidim)
    return registry


@pytest.fixture
def float_band() -> FakeBand:
    """3 x 4 Float32 band; value = 10 * row + column in GDAL (top-down) order."""
    data = (np.arange(3)[:, None] * 10 + np.arange(4)[None, :]).astype(np.float32)
    return FakeBand(data, DataType.FLOAT32, description="elevation", unit="m")
