"""h5stack — stream 5D image stacks into a single chunked HDF5 dataset.

Writes (time, depth, rows, cols, channels) volumes slice by slice, so the
full stack never has to fit in memory.

Quick start:
    from h5stack import ArrayVolume, StackWriter, export_hdf5

    # One call
    export_hdf5(stack, "stack.h5", axes="tczyx", compression_level=4)

    # Explicit writer
    writer = StackWriter(ArrayVolume(stack, axes="zyx"), "stack.h5", dataset="raw")
    writer.write()
    print(writer.descriptor)     # shape, chunks, dtype

    # Packed ARGB pixels become four uint8 channels
    export_hdf5(argb_planes, "rgb.h5", axes="cyx", packed_color=True)
"""

__version__ = "0.1.0"

from h5stack.errors import (
    ExportError,
    H5StackError,
    InvalidShapeError,
    UnsupportedPixelTypeError,
)
from h5stack.exporter import export_hdf5
from h5stack.pixels import PixelType
from h5stack.storage.writer import StackWriter
from h5stack.volume import ArrayVolume, Axis, ImageVolume

__all__ = [
    "ArrayVolume",
    "Axis",
    "ExportError",
    "H5StackError",
    "ImageVolume",
    "InvalidShapeError",
    "PixelType",
    "StackWriter",
    "UnsupportedPixelTypeError",
    "export_hdf5",
    "__version__",
]
