"""Pydantic models for h5stack shapes, dataset layout and export options."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from h5stack.storage.format import (
    CHUNK_LIMIT,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DATASET,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
)


class CanonicalShape(BaseModel):
    """Volume extents in fixed (frames, depth, rows, cols, channels) order."""

    model_config = ConfigDict(frozen=True)

    frames: int = Field(default=1, ge=1)
    depth: int = Field(default=1, ge=1)
    rows: int = Field(ge=1)
    cols: int = Field(ge=1)
    channels: int = Field(default=1, ge=1)

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (self.frames, self.depth, self.rows, self.cols, self.channels)

    @property
    def slice_shape(self) -> tuple[int, int, int, int, int]:
        """Shape of one (t, z, c) slice inside the 5D dataset."""
        return (1, 1, self.rows, self.cols, 1)

    def with_channels(self, channels: int) -> CanonicalShape:
        return self.model_copy(update={"channels": channels})

    def __str__(self) -> str:
        return "x".join(str(n) for n in self.as_tuple())


class DatasetDescriptor(BaseModel):
    """On-disk layout of the exported dataset. Fixed once built."""

    model_config = ConfigDict(frozen=True)

    shape: tuple[int, int, int, int, int]
    chunks: tuple[int, int, int, int, int]
    maxshape: tuple[int | None, ...] = (None, None, None, None, None)
    compression_level: int = Field(ge=MIN_COMPRESSION_LEVEL, le=MAX_COMPRESSION_LEVEL)
    dtype: str  # numpy dtype name, e.g. "uint16"

    @field_validator("shape", "chunks", "maxshape", mode="before")
    @classmethod
    def coerce_shape(cls, v: Any) -> tuple[Any, ...]:
        if isinstance(v, list):
            return tuple(v)
        return v

    @classmethod
    def build(
        cls, shape: CanonicalShape, compression_level: int, dtype: Any
    ) -> DatasetDescriptor:
        """Lay out a dataset for ``shape``.

        Chunks hold a single frame and channel and are capped at
        ``CHUNK_LIMIT`` along depth, rows and cols. Every dimension is
        unlimited so the dataset can be created small and extended later.
        """
        chunks = (
            1,
            min(shape.depth, CHUNK_LIMIT),
            min(shape.rows, CHUNK_LIMIT),
            min(shape.cols, CHUNK_LIMIT),
            1,
        )
        return cls(
            shape=shape.as_tuple(),
            chunks=chunks,
            compression_level=compression_level,
            dtype=np.dtype(dtype).name,
        )

    @property
    def initial_shape(self) -> tuple[int, int, int, int, int]:
        """One slice: the size the dataset is created at."""
        return (1, 1, self.shape[2], self.shape[3], 1)


class ExportConfig(BaseModel):
    """Options recognized by the writer."""

    path: Path
    dataset: str = Field(default=DEFAULT_DATASET, min_length=1)
    compression_level: int = Field(
        default=DEFAULT_COMPRESSION_LEVEL,
        ge=MIN_COMPRESSION_LEVEL,
        le=MAX_COMPRESSION_LEVEL,
    )

    @field_validator("dataset")
    @classmethod
    def strip_dataset(cls, v: str) -> str:
        if not v.strip("/"):
            raise ValueError("dataset path must name a dataset")
        return v
