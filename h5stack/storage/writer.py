"""Incremental HDF5 writer for 5D image stacks.

Streams a volume into one chunked, gzip-compressed, resizable dataset, one
(rows, cols) slice at a time in frame -> depth -> channel order. Only a
single slice is held in memory, regardless of the volume's size.

The dataset is created at one-slice size. The first slice is written into
the whole dataset, which is then resized to the full (t, z, y, x, c) shape;
every later slice goes into its own hyperslab.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import h5py
import numpy as np

from h5stack.axes import resolve_shape
from h5stack.errors import ExportError
from h5stack.pixels import (
    PixelType,
    channel_plan,
    extract_slice,
    pixel_type_of,
    storage_dtype,
)
from h5stack.storage.format import (
    COMPRESSION,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DATASET,
    DIMENSION_ORDER,
    NUM_ARGB_CHANNELS,
)
from h5stack.utils.schema import CanonicalShape, DatasetDescriptor, ExportConfig
from h5stack.volume import ImageVolume

logger = logging.getLogger(__name__)

# Errors h5py and numpy raise for failed create/write/resize/flush calls.
# h5py maps unrecognized HDF5 library errors to RuntimeError.
_STORAGE_ERRORS = (OSError, ValueError, TypeError, KeyError, RuntimeError)


class WriterState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DATASET_CREATED = "dataset_created"
    FIRST_SLICE_WRITTEN = "first_slice_written"
    HYPERSLAB_EXTENDED = "hyperslab_extended"
    CLOSED = "closed"


@dataclass
class WriteCursor:
    """Position of the slice being written.

    ``operation`` names the storage call in progress ("write" or "extend").
    """

    t: int = 0
    z: int = 0
    c: int = 0
    is_first_slice: bool = True
    operation: str = "write"


@dataclass
class ResourceHandles:
    """Open HDF5 objects owned by a single write.

    h5py creates and releases dataspaces and property lists inside each
    call, so only the file and dataset are held here.
    """

    file: h5py.File | None = None
    dataset: h5py.Dataset | None = None

    def close(self) -> None:
        """Release every handle, newest first.

        A failing close is logged and the remaining handles are still
        released. Calling close() again does nothing.
        """
        if self.dataset is not None:
            try:
                self.dataset.flush()
            except Exception as e:
                logger.warning("Failed to flush dataset: %s", e)
            finally:
                self.dataset = None

        if self.file is not None:
            try:
                self.file.close()
            except Exception as e:
                logger.warning("Failed to close HDF5 file: %s", e)
            finally:
                self.file = None


@dataclass
class WriteSession:
    """Everything a single write() mutates."""

    cursor: WriteCursor = field(default_factory=WriteCursor)
    handles: ResourceHandles = field(default_factory=ResourceHandles)
    state: WriterState = WriterState.UNINITIALIZED
    slices_written: int = 0


def iter_coordinates(
    shape: CanonicalShape, plan: list[int | None]
) -> Iterator[tuple[int, int, int, int | None]]:
    """Yield (t, z, c, source_c) for every slice, frame-major."""
    for t in range(shape.frames):
        for z in range(shape.depth):
            for c, source_c in enumerate(plan):
                yield t, z, c, source_c


def write_slice(
    dataset: Any,
    cursor: WriteCursor,
    buffer: np.ndarray,
    descriptor: DatasetDescriptor,
) -> WriterState:
    """Write one slice buffer at the cursor.

    ``dataset`` is anything with h5py's ``__setitem__`` and ``resize``.
    ``cursor.operation`` is set before each storage call, so it names the
    call that failed if one raises.

    Returns:
        The writer state after the write.
    """
    cursor.operation = "write"
    if cursor.is_first_slice:
        # Dataset is exactly one slice big here: fill it, then grow it
        dataset[...] = buffer.reshape(descriptor.initial_shape)
        cursor.operation = "extend"
        dataset.resize(descriptor.shape)
        cursor.is_first_slice = False
        return WriterState.FIRST_SLICE_WRITTEN

    dataset[cursor.t, cursor.z, :, :, cursor.c] = buffer
    return WriterState.HYPERSLAB_EXTENDED


class StackWriter:
    """Writes an image volume to a single HDF5 dataset.

    The volume's shape is resolved and the options validated on
    construction, before anything touches the disk.

    Args:
        volume: Source volume. Must have X and Y axes.
        path: Output file. Truncated if it exists.
        dataset: Path of the dataset inside the file.
        compression_level: gzip level, 0-9.

    Raises:
        InvalidShapeError: If the volume lacks an X or Y axis.
        pydantic.ValidationError: If an option is out of range.
    """

    def __init__(
        self,
        volume: ImageVolume,
        path: str | Path,
        dataset: str = DEFAULT_DATASET,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    ) -> None:
        self.volume = volume
        self.config = ExportConfig(
            path=path, dataset=dataset, compression_level=compression_level
        )
        self._shape = resolve_shape(volume)
        self._descriptor: DatasetDescriptor | None = None
        self._session = WriteSession()

    @property
    def path(self) -> Path:
        return self.config.path

    @property
    def shape(self) -> CanonicalShape:
        """Canonical shape of the source volume."""
        return self._shape

    @property
    def descriptor(self) -> DatasetDescriptor | None:
        """Layout of the output dataset, available once write() has started."""
        return self._descriptor

    @property
    def session(self) -> WriteSession:
        return self._session

    @property
    def state(self) -> WriterState:
        return self._session.state

    @property
    def slices_written(self) -> int:
        return self._session.slices_written

    def write(self) -> Path:
        """Export the whole volume.

        Returns:
            Path to the written file.

        Raises:
            UnsupportedPixelTypeError: Before any file is created, if the
                volume's pixel type cannot be stored.
            ExportError: If any HDF5 operation fails or memory runs out.
                A partially written file may remain.
        """
        session = self._session
        if session.state is not WriterState.UNINITIALIZED:
            raise RuntimeError("StackWriter.write() can only be called once.")

        pixel_type = pixel_type_of(self.volume)
        plan = channel_plan(pixel_type, self._shape.channels)
        dtype = storage_dtype(pixel_type)
        shape = self._shape
        if pixel_type is PixelType.ARGB:
            shape = shape.with_channels(NUM_ARGB_CHANNELS)
        self._descriptor = DatasetDescriptor.build(
            shape, self.config.compression_level, dtype
        )

        logger.info("Export dimensions in %s: %s", DIMENSION_ORDER, shape)
        if pixel_type is PixelType.ARGB:
            logger.info("Writing ARGB to %d uint8 channels", NUM_ARGB_CHANNELS)
        else:
            logger.info("Writing %s", dtype.name)

        try:
            self._create_dataset()
            self._write_slices(shape, plan, dtype)
            self._flush()
        except MemoryError as e:
            self._fail("write", f"Out of memory while writing '{self.path}'", e)
        finally:
            session.handles.close()
            session.state = WriterState.CLOSED

        logger.info("Compression level: %d", self.config.compression_level)
        logger.info("Done writing %s:%s", self.path, self.config.dataset)
        return self.path

    def _fail(self, operation: str, message: str, err: BaseException) -> None:
        logger.error("%s: %s", message, err)
        raise ExportError(message, operation=operation, path=self.path) from err

    def _create_dataset(self) -> None:
        assert self._descriptor is not None
        desc = self._descriptor
        handles = self._session.handles
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handles.file = h5py.File(str(self.path), "w")
            handles.dataset = handles.file.create_dataset(
                self.config.dataset,
                shape=desc.initial_shape,
                maxshape=desc.maxshape,
                dtype=desc.dtype,
                chunks=desc.chunks,
                compression=COMPRESSION,
                compression_opts=desc.compression_level,
            )
        except _STORAGE_ERRORS as e:
            self._fail("create", f"HDF5 dataset creation failed for '{self.path}'", e)
        self._session.state = WriterState.DATASET_CREATED

    def _write_slices(
        self, shape: CanonicalShape, plan: list[int | None], dtype: np.dtype
    ) -> None:
        assert self._descriptor is not None
        session = self._session
        cursor = session.cursor
        for t, z, c, source_c in iter_coordinates(shape, plan):
            cursor.t, cursor.z, cursor.c = t, z, c
            buffer = extract_slice(
                self.volume, t, z, source_c, dtype, rows=shape.rows, cols=shape.cols
            )
            try:
                session.state = write_slice(
                    session.handles.dataset, cursor, buffer, self._descriptor
                )
            except _STORAGE_ERRORS as e:
                self._fail(
                    cursor.operation,
                    f"Error writing slice t={t} z={z} c={c} to '{self.path}'",
                    e,
                )
            session.slices_written += 1

    def _flush(self) -> None:
        """Push buffered chunks to disk; a failure here fails the export."""
        try:
            self._session.handles.file.flush()
        except _STORAGE_ERRORS as e:
            self._fail("write", f"Failed to flush '{self.path}'", e)

    def __repr__(self) -> str:
        return (
            f"StackWriter(path='{self.path}', dataset='{self.config.dataset}', "
            f"shape={self._shape}, state={self.state.value})"
        )
