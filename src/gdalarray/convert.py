"""Scalar type dispatch and buffer marshalling.

GDAL hands back raw, native-endian byte buffers. Every GDAL type code is
routed to the numpy dtype that describes that buffer and to the bundle
kind it is stored as. Complex integers have no numpy counterpart, so they
are either widened to complex floats or kept as Gaussian integers
(structured ``re``/``im`` integer pairs).
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional, Sequence, Union

import numpy as np

from .errors import BufferSizeError
from .types import (
    GAUSSIAN_INT16,
    GAUSSIAN_INT32,
    ComplexIntegerMode,
    DataType,
    ScalarKind,
)

logger = logging.getLogger(__name__)

_SOURCE_DTYPES: Dict[DataType, np.dtype] = {
    DataType.BYTE: np.dtype(np.uint8),
    DataType.INT8: np.dtype(np.int8),
    DataType.UINT16: np.dtype(np.uint16),
    DataType.INT16: np.dtype(np.int16),
    DataType.UINT32: np.dtype(np.uint32),
    DataType.INT32: np.dtype(np.int32),
    DataType.UINT64: np.dtype(np.uint64),
    DataType.INT64: np.dtype(np.int64),
    DataType.FLOAT32: np.dtype(np.float32),
    DataType.FLOAT64: np.dtype(np.float64),
    DataType.CINT16: GAUSSIAN_INT16,
    DataType.CINT32: GAUSSIAN_INT32,
    DataType.CFLOAT32: np.dtype(np.complex64),
    DataType.CFLOAT64: np.dtype(np.complex128),
}

_KINDS: Dict[DataType, ScalarKind] = {
    DataType.BYTE: ScalarKind.UINT8,
    DataType.INT8: ScalarKind.INT8,
    DataType.UINT16: ScalarKind.UINT16,
    DataType.INT16: ScalarKind.INT16,
    DataType.UINT32: ScalarKind.UINT32,
    DataType.INT32: ScalarKind.INT32,
    DataType.UINT64: ScalarKind.UINT64,
    DataType.INT64: ScalarKind.INT64,
    DataType.FLOAT32: ScalarKind.FLOAT32,
    DataType.FLOAT64: ScalarKind.FLOAT64,
    DataType.CFLOAT32: ScalarKind.COMPLEX64,
    DataType.CFLOAT64: ScalarKind.COMPLEX128,
}

# no exact host type for these: widen to complex floats
_WIDENED: Dict[DataType, ScalarKind] = {
    DataType.CINT16: ScalarKind.COMPLEX64,
    DataType.CINT32: ScalarKind.COMPLEX128,
}

_GAUSSIAN: Dict[DataType, ScalarKind] = {
    DataType.CINT16: ScalarKind.GAUSSIAN16,
    DataType.CINT32: ScalarKind.GAUSSIAN32,
}

DataTypeLike = Union[DataType, int]


def _as_data_type(data_type: DataTypeLike) -> Optional[DataType]:
    if isinstance(data_type, DataType):
        return data_type
    return DataType.from_code(data_type)


def resolve_kind(
    data_type: DataTypeLike,
    mode: ComplexIntegerMode = ComplexIntegerMode.WIDEN,
) -> Optional[ScalarKind]:
    """Return the bundle kind for a GDAL type code, or None if it is not supported."""

    resolved = _as_data_type(data_type)
    if resolved is None:
        return None
    if resolved.is_complex_integer:
        table = _GAUSSIAN if mode == ComplexIntegerMode.GAUSSIAN else _WIDENED
        return table[resolved]
    return _KINDS.get(resolved)


def source_dtype(data_type: DataTypeLike) -> np.dtype:
    """numpy dtype describing one cell of a raw GDAL buffer."""

    resolved = _as_data_type(data_type)
    if resolved is None or resolved not in _SOURCE_DTYPES:
        raise ValueError(f"No buffer layout for GDAL data type {data_type!r}")
    return _SOURCE_DTYPES[resolved]


def allocate(kind: ScalarKind, shape: Sequence[int]) -> np.ndarray:
    """Zero-filled storage for an array of ``kind``."""

    return np.zeros(tuple(shape), dtype=kind.dtype)


def decode_buffer(
    raw: Union[bytes, bytearray, memoryview],
    data_type: DataTypeLike,
    shape: Sequence[int],
    mode: ComplexIntegerMode = ComplexIntegerMode.WIDEN,
) -> np.ndarray:
    """
    Convert a raw GDAL buffer into a writable array of the bundle dtype.

    Args:
        raw: Bytes returned by ``Band.ReadRaster`` or ``MDArray.Read``
        data_type: GDAL type code of the buffer
        shape: Shape of the window that was read, slowest axis first
        mode: Representation for complex integer data

    Returns:
        Array of shape ``shape`` in the dtype of the resolved kind

    Raises:
        BufferSizeError: If the buffer does not hold exactly ``shape`` cells
        ValueError: If ``data_type`` is not supported
    """
    kind = resolve_kind(data_type, mode)
    if kind is None:
        raise ValueError(f"Unsupported GDAL data type {data_type!r}")

    src = source_dtype(data_type)
    shape = tuple(int(n) for n in shape)
    expected = math.prod(shape) * src.itemsize
    if len(raw) != expected:
        raise BufferSizeError(
            f"Buffer holds {len(raw)} bytes; expected {expected} for shape {shape} of {src}"
        )

    cells = np.frombuffer(raw, dtype=src).reshape(shape)
    target = kind.dtype

    if src.names is not None and target.names is None:
        out = np.empty(shape, dtype=target)
        out.real = cells["re"]
        out.imag = cells["im"]
        return out

    return cells.astype(target, copy=True)
