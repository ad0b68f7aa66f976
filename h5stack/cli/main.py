"""h5stack CLI — export image stacks to HDF5 from the command line.

Commands:
    h5stack export <input.npy> <output.h5>    Stream a .npy stack into HDF5
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import numpy as np
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from h5stack.storage.format import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DATASET,
    DIMENSION_ORDER,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
)

console = Console()


@click.group()
@click.version_option(version="0.1.0", prog_name="h5stack")
def cli() -> None:
    """h5stack — stream 5D image stacks into chunked HDF5."""
    pass


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--axes", "-a", default=DIMENSION_ORDER, show_default=True,
              help="Axis order of the input array, e.g. 'zyx' or 'tcyx'")
@click.option("--dataset", "-d", default=DEFAULT_DATASET, show_default=True,
              help="Dataset path inside the HDF5 file")
@click.option("--compression", "-c", default=DEFAULT_COMPRESSION_LEVEL, show_default=True,
              type=click.IntRange(MIN_COMPRESSION_LEVEL, MAX_COMPRESSION_LEVEL),
              help="gzip compression level")
@click.option("--argb", is_flag=True, default=False,
              help="Treat 32-bit samples as packed ARGB pixels")
@click.option("--atomic", is_flag=True, default=False,
              help="Write to a temporary file and rename on success")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show progress logs")
def export(
    input_file: Path,
    output: Path,
    axes: str,
    dataset: str,
    compression: int,
    argb: bool,
    atomic: bool,
    verbose: bool,
) -> None:
    """Export a .npy image stack to an HDF5 dataset."""
    from h5stack import H5StackError, export_hdf5

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    try:
        # Memory-mapped so only the slice being written is read from disk
        data = np.load(input_file, mmap_mode="r")
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading {input_file}: {e}[/red]")
        raise SystemExit(1)

    try:
        out_path = export_hdf5(
            data,
            output,
            axes=axes,
            dataset=dataset,
            compression_level=compression,
            packed_color=argb,
            atomic=atomic,
        )
    except (H5StackError, ValueError) as e:
        console.print(f"[red]Export failed: {e}[/red]")
        raise SystemExit(1)

    table = Table(title=f"{out_path}:{dataset}", show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Input axes", axes)
    table.add_row("Input shape", " x ".join(str(n) for n in data.shape))
    table.add_row("Dtype", "argb -> uint8" if argb else str(data.dtype))
    table.add_row("Compression", f"gzip ({compression})")

    console.print()
    console.print(table)
    console.print(f"[green]Exported {input_file} to {out_path}[/green]")


if __name__ == "__main__":
    cli()
