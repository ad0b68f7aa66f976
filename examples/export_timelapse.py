"""Export a synthetic time-lapse stack to HDF5 without loading it into memory.

The stack lives in a memory-mapped .npy file; h5stack reads one (y, x) plane
at a time, so the stack can be far larger than available RAM.

Run:
    python examples/export_timelapse.py
"""

import logging
import tempfile
from pathlib import Path

import numpy as np

from h5stack import ArrayVolume, StackWriter

logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")


def make_stack(path: Path, frames: int = 20, depth: int = 8, size: int = 128) -> np.memmap:
    """Write a drifting-blob time-lapse to a memory-mapped .npy file."""
    stack = np.lib.format.open_memmap(
        path, mode="w+", dtype=np.uint16, shape=(frames, 2, depth, size, size)
    )
    yy, xx = np.mgrid[0:size, 0:size]
    for t in range(frames):
        cy, cx = size / 2, size / 4 + t * size / (2 * frames)
        blob = np.exp(-((yy - cy) ** 2 + (xx - cx) ** 2) / (2 * 12.0**2))
        for z in range(depth):
            stack[t, 0, z] = (blob * 4000 * (z + 1) / depth).astype(np.uint16)
            stack[t, 1, z] = 1000 + 50 * t
    stack.flush()
    return np.load(path, mmap_mode="r")


def main() -> None:
    workdir = Path(tempfile.mkdtemp(prefix="h5stack_"))
    stack = make_stack(workdir / "timelapse.npy")

    writer = StackWriter(
        ArrayVolume(stack, axes="tczyx"),
        workdir / "timelapse.h5",
        dataset="exported_data",
        compression_level=4,
    )
    out = writer.write()

    print(f"Wrote {writer.slices_written} slices to {out}")
    print(f"Layout: {writer.descriptor}")


if __name__ == "__main__":
    main()
