"""Pixel type dispatch and per-slice extraction.

Every volume falls into one of five pixel types. Integer and float types are
stored as-is; packed ARGB samples are split into four uint8 channel planes.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import numpy as np

from h5stack.axes import axis_index
from h5stack.errors import UnsupportedPixelTypeError
from h5stack.storage.format import ALPHA_SENTINEL, NUM_ARGB_CHANNELS
from h5stack.volume import Axis, ImageVolume

logger = logging.getLogger(__name__)


class PixelType(str, Enum):
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    FLOAT32 = "float32"
    ARGB = "argb"


# Source sample dtype -> pixel type, for volumes that are not packed color
_PIXEL_TYPES: dict[np.dtype, PixelType] = {
    np.dtype(np.uint8): PixelType.UINT8,
    np.dtype(np.uint16): PixelType.UINT16,
    np.dtype(np.uint32): PixelType.UINT32,
    np.dtype(np.float32): PixelType.FLOAT32,
}

# Packed ARGB values arrive as 32-bit integers
_PACKED_DTYPES = (np.dtype(np.uint32), np.dtype(np.int32))

_STORAGE_DTYPES: dict[PixelType, np.dtype] = {
    PixelType.UINT8: np.dtype(np.uint8),
    PixelType.UINT16: np.dtype(np.uint16),
    PixelType.UINT32: np.dtype(np.uint32),
    PixelType.FLOAT32: np.dtype(np.float32),
    PixelType.ARGB: np.dtype(np.uint8),
}


def pixel_type_of(volume: ImageVolume) -> PixelType:
    """Classify the volume's samples.

    Raises:
        UnsupportedPixelTypeError: For any dtype outside the five handled
            kinds, e.g. int16 or float64.
    """
    dtype = np.dtype(volume.dtype).newbyteorder("=")
    if getattr(volume, "packed_color", False):
        if dtype not in _PACKED_DTYPES:
            raise UnsupportedPixelTypeError(
                f"Packed color samples must be 32-bit integers, got {dtype}"
            )
        return PixelType.ARGB

    pixel_type = _PIXEL_TYPES.get(dtype)
    if pixel_type is None:
        raise UnsupportedPixelTypeError(
            f"Unsupported pixel type: {dtype}. "
            f"Supported: {[str(d) for d in _PIXEL_TYPES]} or packed ARGB"
        )
    return pixel_type


def storage_dtype(pixel_type: PixelType) -> np.dtype:
    """On-disk element type for a pixel type."""
    try:
        return _STORAGE_DTYPES[PixelType(pixel_type)]
    except (KeyError, ValueError):
        raise UnsupportedPixelTypeError(f"Unsupported pixel type: {pixel_type!r}") from None


def channel_plan(pixel_type: PixelType, source_channels: int) -> list[int | None]:
    """Source channel to read for each output channel.

    ``None`` marks the synthetic alpha plane of a 3-channel ARGB source; the
    remaining output channels then read source channel ``c - 1``.
    """
    if pixel_type is not PixelType.ARGB:
        return list(range(source_channels))

    if source_channels >= NUM_ARGB_CHANNELS:
        return list(range(NUM_ARGB_CHANNELS))
    if source_channels == NUM_ARGB_CHANNELS - 1:
        logger.warning("Only 3 channel RGB found. Setting ALPHA channel to 0xFF (-1).")
        return [None] + list(range(NUM_ARGB_CHANNELS - 1))
    raise UnsupportedPixelTypeError(
        f"ARGB volumes need 3 or {NUM_ARGB_CHANNELS} channels, got {source_channels}"
    )


def _plane_index(volume: ImageVolume, t: int, z: int, c: int) -> tuple[Any, ...]:
    coords = {Axis.TIME: t, Axis.Z: z, Axis.CHANNEL: c}
    return tuple(coords.get(axis, slice(None)) for axis in volume.axes)


def extract_slice(
    volume: ImageVolume,
    t: int,
    z: int,
    c: int | None,
    dtype: np.dtype,
    rows: int | None = None,
    cols: int | None = None,
) -> np.ndarray:
    """Read the (rows, cols) plane at (t, z, c) as a fresh ``dtype`` buffer.

    Exactly one plane is read from the volume. Narrowing conversions wrap
    instead of clipping; values are expected to fit the target type.

    Args:
        volume: Source volume.
        t: Frame index, ignored if the volume has no time axis.
        z: Depth index, ignored if the volume has no Z axis.
        c: Channel index, ignored if the volume has no channel axis.
           None yields a plane filled with ``ALPHA_SENTINEL``.
        dtype: On-disk element type.
        rows: Plane height; needed only when ``c`` is None.
        cols: Plane width; needed only when ``c`` is None.

    Returns:
        C-contiguous array of shape (rows, cols).
    """
    if c is None:
        if rows is None or cols is None:
            raise ValueError("rows and cols are required for a synthetic plane")
        return np.full((rows, cols), ALPHA_SENTINEL, dtype=dtype)

    plane = np.asarray(volume[_plane_index(volume, t, z, c)])
    if axis_index(volume, Axis.X) < axis_index(volume, Axis.Y):
        plane = plane.T

    if getattr(volume, "packed_color", False):
        plane = plane & 0xFF

    # astype wraps out-of-range integers rather than clipping
    return plane.astype(dtype, order="C", copy=True)
