"""Map a volume's native axes onto the canonical (t, z, y, x, c) shape."""

from __future__ import annotations

from h5stack.errors import InvalidShapeError
from h5stack.utils.schema import CanonicalShape
from h5stack.volume import Axis, ImageVolume


def axis_index(volume: ImageVolume, axis: Axis) -> int | None:
    """Position of ``axis`` in the volume's native order, or None if absent."""
    try:
        return volume.axes.index(axis)
    except ValueError:
        return None


def _extent(volume: ImageVolume, axis: Axis) -> int:
    idx = axis_index(volume, axis)
    if idx is None:
        return 1
    return int(volume.shape[idx])


def resolve_shape(volume: ImageVolume) -> CanonicalShape:
    """Resolve the canonical 5-axis shape of a volume.

    Time, depth and channel axes default to 1 when missing.

    Raises:
        InvalidShapeError: If the volume has no X or no Y axis.
    """
    if axis_index(volume, Axis.X) is None or axis_index(volume, Axis.Y) is None:
        axes = "".join(a.value for a in volume.axes)
        raise InvalidShapeError(f"Volume must have X and Y axes, got '{axes}'")

    return CanonicalShape(
        frames=_extent(volume, Axis.TIME),
        depth=_extent(volume, Axis.Z),
        rows=_extent(volume, Axis.Y),
        cols=_extent(volume, Axis.X),
        channels=_extent(volume, Axis.CHANNEL),
    )
