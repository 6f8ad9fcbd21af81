"""Options controlling how GDAL datasets are turned into arrays."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .errors import ConfigurationError
from .types import AxisOrder, ComplexIntegerMode, Origin


class LoadOptions(BaseModel):
    """Serializable configuration describing how to load a dataset."""

    origin: Origin = Field(
        Origin.LOWER,
        description="Row 0 of returned rasters is the bottom row (lower) or GDAL's top row (upper)",
    )
    axis_order: AxisOrder = Field(
        AxisOrder.GDAL,
        description="Keep GDAL's slowest-first axis order or reverse it so the fastest axis comes first",
    )
    complex_integers: ComplexIntegerMode = Field(
        ComplexIntegerMode.WIDEN,
        description="Widen CInt16/CInt32 to complex floats or keep them as Gaussian integers",
    )
    chunk_rows: Optional[int] = Field(
        None,
        gt=0,
        description="Rows read per ReadRaster call; defaults to the band's block height",
    )
    cellwise: bool = Field(
        False, description="Populate rasters with one 1x1 read per cell"
    )
    lazy: bool = Field(
        False, description="Return dask-backed arrays that read row chunks on compute"
    )
    recurse_subdatasets: bool = Field(
        True, description="Open and merge every entry of the SUBDATASETS domain"
    )
    max_depth: int = Field(
        8, ge=0, description="Maximum sub-dataset nesting followed by load_all"
    )
    multidim: bool = Field(
        True,
        description="Fall back to GDAL's multidimensional API when the raster view yields no arrays",
    )
    prefer_multidim: bool = Field(
        False, description="Try the multidimensional API before the raster view"
    )
    mask_nodata: bool = Field(
        False, description="Replace nodata cells of floating point arrays with NaN"
    )
    open_options: Dict[str, str] = Field(
        default_factory=dict, description="Driver open options passed to gdal.OpenEx"
    )
    allowed_drivers: List[str] = Field(
        default_factory=list, description="Restrict gdal.OpenEx to these driver short names"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_kwargs(
        cls,
        options: Optional[Union["LoadOptions", Dict[str, Any]]] = None,
        **overrides: Any,
    ) -> "LoadOptions":
        """Build options from an existing instance or mapping plus keyword overrides.

        Every override given is applied, ``None`` included, so ``chunk_rows=None``
        resets a chunk height set on ``options``.
        """

        if isinstance(options, LoadOptions):
            base: Dict[str, Any] = options.model_dump()
        else:
            base = dict(options or {})
        base.update(overrides)
        try:
            return cls(**base)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid load options: {exc}", cause=exc) from exc

    # ------------------------------------------------------------------
    # Helper accessors
    # ------------------------------------------------------------------
    def open_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments forwarded to ``gdal.OpenEx``."""

        kwargs: Dict[str, Any] = {}
        if self.open_options:
            kwargs["open_options"] = [f"{key}={value}" for key, value in self.open_options.items()]
        if self.allowed_drivers:
            kwargs["allowed_drivers"] = list(self.allowed_drivers)
        return kwargs

    def child(self) -> "LoadOptions":
        """Options for a nested sub-dataset, one level deeper."""

        return self.model_copy(update={"max_depth": self.max_depth - 1})
