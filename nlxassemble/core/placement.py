# nlxassemble/core/placement.py
"""
Sample placement: absolute record timestamps -> positions in the output buffer.

A record is written at offset round((timestamp - start) / sampling_ratio)
and covers the following samples_per_record samples. Only records whose
valid sample count equals samples_per_record are written; positions no
record reaches stay 0.0. When two records cover the same positions, the
one written last wins.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from ..config import SAMPLES_PER_RECORD
from .exceptions import PlacementError
from .metadata import SignalExtent


logger = logging.getLogger(__name__)


def buffer_length(extent: SignalExtent, samples_per_record: int = SAMPLES_PER_RECORD) -> int:
    """
    Number of samples needed to hold every record of the extent.

    1 + ceil(span / ratio) record start positions, plus the trailing
    samples of the record starting at the last position.
    """
    n_positions = 1 + math.ceil(extent.duration / extent.sampling_ratio)
    return n_positions + samples_per_record - 1


def allocate(n_rows: int, extent: SignalExtent,
             samples_per_record: int = SAMPLES_PER_RECORD) -> np.ndarray:
    return np.zeros((n_rows, buffer_length(extent, samples_per_record)), dtype=np.float64)


def sample_offsets(timestamps: np.ndarray, start_timestamp: int, sampling_ratio: float) -> np.ndarray:
    """0-based buffer offsets of records, rounding halves away from zero."""
    ts = np.asarray(timestamps)
    delta = (ts.astype(np.int64) - np.int64(start_timestamp)).astype(np.float64)
    scaled = delta / sampling_ratio
    return (np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)).astype(np.int64)


def place_records(
    row: np.ndarray,
    timestamps: np.ndarray,
    valid_sample_counts: np.ndarray,
    samples: np.ndarray,
    start_timestamp: int,
    sampling_ratio: float,
    ad_bit_volts: float,
    samples_per_record: int = SAMPLES_PER_RECORD,
) -> int:
    """
    Write the complete records of one file into `row`.

    Returns the number of records written.
    """
    timestamps = np.asarray(timestamps)
    valid_sample_counts = np.asarray(valid_sample_counts)
    samples = np.asarray(samples)

    if row.ndim != 1:
        raise ValueError(f"`row` must be 1D, got shape {row.shape}")
    if samples.ndim != 2 or samples.shape[1] != samples_per_record:
        raise ValueError(
            f"`samples` must have shape (n_records, {samples_per_record}), got {samples.shape}"
        )
    if not (timestamps.size == valid_sample_counts.size == samples.shape[0]):
        raise ValueError(
            "timestamps, valid_sample_counts and samples disagree on the record count: "
            f"{timestamps.size}, {valid_sample_counts.size}, {samples.shape[0]}"
        )

    complete = valid_sample_counts == samples_per_record
    n_dropped = int(complete.size - np.count_nonzero(complete))
    if n_dropped:
        logger.debug("Dropping %d incomplete record(s)", n_dropped)

    offsets = sample_offsets(timestamps[complete], start_timestamp, sampling_ratio)
    if offsets.size == 0:
        return 0

    if offsets.min() < 0 or offsets.max() + samples_per_record > row.size:
        raise PlacementError(
            f"Records span offsets [{offsets.min()}, {offsets.max() + samples_per_record}) "
            f"but the buffer holds {row.size} samples."
        )

    # Sequential writes keep last-write-wins for overlapping records.
    for offset, block in zip(offsets, samples[complete]):
        row[offset:offset + samples_per_record] = block * ad_bit_volts

    return int(offsets.size)
