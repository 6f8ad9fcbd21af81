"""Result bundle: loaded arrays grouped by scalar type, plus string metadata."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

import xarray as xr
from pydantic import BaseModel, ConfigDict, Field

from .types import ScalarKind

ArrayList = Optional[List[xr.DataArray]]


class DataBundle(BaseModel):
    """Everything loaded from one file and its sub-datasets.

    Each per-kind list stays ``None`` until the first array of that kind is
    added. Merging concatenates lists and never replaces one that exists.
    """

    chars: Optional[Dict[str, str]] = Field(None, description="Dataset-level metadata")
    uint8s: ArrayList = None
    int8s: ArrayList = None
    uint16s: ArrayList = None
    int16s: ArrayList = None
    uint32s: ArrayList = None
    int32s: ArrayList = None
    uint64s: ArrayList = None
    int64s: ArrayList = None
    floats: ArrayList = None
    doubles: ArrayList = None
    cfloats: ArrayList = Field(None, description="complex64, including widened CInt16")
    cdoubles: ArrayList = Field(None, description="complex128, including widened CInt32")
    gauss16s: ArrayList = Field(None, description="CInt16 kept as Gaussian integers")
    gauss32s: ArrayList = Field(None, description="CInt32 kept as Gaussian integers")

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

    def get(self, kind: ScalarKind) -> ArrayList:
        """The list for ``kind`` (None if nothing of that kind was loaded)."""

        return getattr(self, kind.value)

    def add(self, kind: ScalarKind, array: xr.DataArray) -> None:
        """Append ``array`` to the list for ``kind``, creating the list on first use."""

        current = self.get(kind)
        if current is None:
            current = []
            setattr(self, kind.value, current)
        current.append(array)

    def add_metadata(self, metadata: Optional[Dict[str, str]]) -> None:
        if not metadata:
            return
        if self.chars is None:
            self.chars = {}
        self.chars.update(metadata)

    def merge(self, other: "DataBundle") -> "DataBundle":
        """Fold ``other`` into this bundle and return self.

        Lists are concatenated in order; metadata keys from ``other`` win.
        """

        self.add_metadata(other.chars)
        for kind in ScalarKind:
            incoming = other.get(kind)
            if incoming is None:
                continue
            current = self.get(kind)
            if current is None:
                setattr(self, kind.value, list(incoming))
            else:
                current.extend(incoming)
        return self

    def arrays(self) -> Iterator[Tuple[ScalarKind, xr.DataArray]]:
        """Every loaded array with its kind, in kind then load order."""

        for kind in ScalarKind:
            for array in self.get(kind) or []:
                yield kind, array

    def kinds(self) -> List[ScalarKind]:
        return [kind for kind in ScalarKind if self.get(kind)]

    def count(self) -> int:
        return sum(len(self.get(kind) or []) for kind in ScalarKind)

    def is_empty(self) -> bool:
        return self.count() == 0

    def summary(self) -> Dict[str, int]:
        """Number of arrays per non-empty kind."""

        return {kind.value: len(self.get(kind) or []) for kind in self.kinds()}
