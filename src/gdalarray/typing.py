"""Type aliases and protocols for the parts of the GDAL bindings gdalarray touches."""

from typing import TypeAlias, Protocol, Tuple, Dict, Any, List, Optional, Sequence, Union
import os

PathLike: TypeAlias = Union[str, "os.PathLike[str]"]
Metadata: TypeAlias = Dict[str, str]
Shape: TypeAlias = Tuple[int, ...]
Window: TypeAlias = Tuple[int, int, int, int]  # (xoff, yoff, xsize, ysize)


class RasterBand(Protocol):
    """Subset of ``osgeo.gdal.Band`` used by the raster reader."""

    DataType: int
    XSize: int
    YSize: int

    def GetDescription(self) -> str: ...

    def GetUnitType(self) -> str: ...

    def GetNoDataValue(self) -> Optional[float]: ...

    def GetScale(self) -> Optional[float]: ...

    def GetOffset(self) -> Optional[float]: ...

    def GetMetadata(self, domain: str = "") -> Dict[str, str]: ...

    def GetBlockSize(self) -> List[int]: ...

    def ReadRaster(
        self,
        xoff: int = 0,
        yoff: int = 0,
        xsize: Optional[int] = None,
        ysize: Optional[int] = None,
        buf_xsize: Optional[int] = None,
        buf_ysize: Optional[int] = None,
        buf_type: Optional[int] = None,
    ) -> bytes: ...


class RasterDataset(Protocol):
    """Subset of ``osgeo.gdal.Dataset`` used by the readers."""

    RasterXSize: int
    RasterYSize: int
    RasterCount: int

    def GetDescription(self) -> str: ...

    def GetMetadata(self, domain: str = "") -> Dict[str, str]: ...

    def GetMetadata_List(self, domain: str = "") -> Optional[List[str]]: ...

    def GetRasterBand(self, index: int) -> RasterBand: ...

    def GetGeoTransform(self) -> Optional[Sequence[float]]: ...

    def GetProjection(self) -> str: ...


class Dimension(Protocol):
    """Subset of ``osgeo.gdal.Dimension``."""

    def GetName(self) -> str: ...

    def GetSize(self) -> int: ...

    def GetType(self) -> str: ...

    def GetIndexingVariable(self) -> Optional["MDArray"]: ...


class ExtendedDataType(Protocol):
    def GetClass(self) -> int: ...

    def GetNumericDataType(self) -> int: ...


class Attribute(Protocol):
    def GetName(self) -> str: ...

    def Read(self) -> Any: ...


class MDArray(Protocol):
    """Subset of ``osgeo.gdal.MDArray`` used by the multidimensional reader."""

    def GetName(self) -> str: ...

    def GetFullName(self) -> str: ...

    def GetDimensions(self) -> List[Dimension]: ...

    def GetDataType(self) -> ExtendedDataType: ...

    def GetUnit(self) -> str: ...

    def GetAttributes(self) -> List[Attribute]: ...

    def GetNoDataValueAsDouble(self) -> Optional[float]: ...

    def GetScale(self) -> Optional[float]: ...

    def GetOffset(self) -> Optional[float]: ...

    def GetSpatialRef(self) -> Any: ...

    def Read(
        self,
        array_start_idx: Optional[Sequence[int]] = None,
        count: Optional[Sequence[int]] = None,
    ) -> bytes: ...


class Group(Protocol):
    """Subset of ``osgeo.gdal.Group``."""

    def GetName(self) -> str: ...

    def GetMDArrayNames(self) -> Optional[List[str]]: ...

    def OpenMDArray(self, name: str) -> MDArray: ...

    def GetGroupNames(self) -> Optional[List[str]]: ...

    def OpenGroup(self, name: str) -> "Group": ...

    def GetAttributes(self) -> List[Attribute]: ...


class MultidimDataset(Protocol):
    def GetDescription(self) -> str: ...

    def GetRootGroup(self) -> Optional[Group]: ...
