"""export_hdf5 — one-call export of an array or volume to HDF5.

Usage:
    from h5stack import export_hdf5

    export_hdf5(stack, "out.h5", axes="zyx")
    export_hdf5(np.load("big.npy", mmap_mode="r"), "out.h5", axes="tzcyx",
                compression_level=6, atomic=True)
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

from h5stack.storage.format import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DATASET,
    FILE_EXTENSION,
)
from h5stack.storage.writer import StackWriter
from h5stack.volume import ArrayVolume, Axis, ImageVolume

logger = logging.getLogger(__name__)


def export_hdf5(
    data: Any,
    path: str | Path,
    axes: str | Sequence[Axis | str] = "tzyxc",
    dataset: str = DEFAULT_DATASET,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    packed_color: bool = False,
    atomic: bool = False,
) -> Path:
    """Write ``data`` to a single chunked HDF5 dataset.

    Args:
        data: An ``ImageVolume`` or an array-like with native axis order ``axes``.
        path: Output file. Gets a ``.h5`` suffix if it has none.
        axes: Axis order of ``data``; ignored when ``data`` is already a volume.
        dataset: Path of the dataset inside the file.
        compression_level: gzip level, 0-9.
        packed_color: True if samples are packed 32-bit ARGB values.
        atomic: Write to a temporary file next to ``path`` and rename it into
                place only once the write succeeded.

    Returns:
        Path to the written file.
    """
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(FILE_EXTENSION)

    if isinstance(data, ImageVolume):
        volume = data
    else:
        volume = ArrayVolume(data, axes=axes, packed_color=packed_color)

    if not atomic:
        return StackWriter(volume, path, dataset, compression_level).write()

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.stem}-", suffix=FILE_EXTENSION, dir=path.parent
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        StackWriter(volume, tmp_path, dataset, compression_level).write()
        # mkstemp creates 0600; give the file the mode a plain open() would
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Moved %s to %s", tmp_path, path)
    return path
