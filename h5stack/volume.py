"""Image volumes — the 5-axis sources h5stack writes from.

Any object with ``axes``, ``shape``, ``dtype``, ``packed_color`` and numpy-style
``__getitem__`` can be exported. ``ArrayVolume`` adapts plain array-likes:

    from h5stack.volume import ArrayVolume

    vol = ArrayVolume(np.load("stack.npy", mmap_mode="r"), axes="zyx")
    vol = ArrayVolume(h5_file["raw"], axes="tcyx")
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np


class Axis(str, Enum):
    """Semantic axes of an image volume."""

    TIME = "t"
    Z = "z"
    Y = "y"
    X = "x"
    CHANNEL = "c"


@runtime_checkable
class ImageVolume(Protocol):
    """Randomly addressable source of samples.

    ``axes`` lists the axes present, in native order. Indexing follows that
    order: an int picks a coordinate, ``slice(None)`` keeps the axis.
    """

    axes: tuple[Axis, ...]
    shape: tuple[int, ...]
    dtype: np.dtype
    packed_color: bool

    def __getitem__(self, index: Any) -> Any: ...


def parse_axes(axes: str | Sequence[Axis | str]) -> tuple[Axis, ...]:
    """Turn ``"tzyxc"`` or a sequence of axes into a tuple of ``Axis``."""
    try:
        parsed = tuple(Axis(a.lower() if isinstance(a, str) else a) for a in axes)
    except ValueError:
        raise ValueError(
            f"Unknown axis in {axes!r}. Valid axes: "
            f"{[a.value for a in Axis]}"
        ) from None
    if len(set(parsed)) != len(parsed):
        raise ValueError(f"Duplicate axis in {axes!r}")
    return parsed


class ArrayVolume:
    """Wraps an array-like so it can be exported.

    The array is never copied; planes are read on demand through its
    ``__getitem__``, so memory-mapped files and HDF5 datasets stay on disk.

    Args:
        data: numpy array, memmap, h5py dataset, or anything with
              ``shape``, ``dtype`` and numpy-style indexing.
        axes: Native axis order, e.g. ``"tzyxc"`` or ``"yx"``.
        packed_color: True if each sample is a packed 32-bit ARGB value.
    """

    def __init__(
        self,
        data: Any,
        axes: str | Sequence[Axis | str] = "tzyxc",
        packed_color: bool = False,
    ) -> None:
        self.axes = parse_axes(axes)
        if len(self.axes) != len(data.shape):
            raise ValueError(
                f"Axes {''.join(a.value for a in self.axes)!r} do not match "
                f"data with {len(data.shape)} dimensions"
            )
        self._data = data
        self.packed_color = packed_color

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(n) for n in self._data.shape)

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self._data.dtype)

    def __getitem__(self, index: Any) -> Any:
        return self._data[index]

    def __repr__(self) -> str:
        axes = "".join(a.value for a in self.axes)
        return f"ArrayVolume(axes='{axes}', shape={self.shape}, dtype={self.dtype})"
