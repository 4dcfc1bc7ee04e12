from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Sequence
import logging
import os

import numpy as np

from nlxassemble.config import DEFAULT_CONFIG, AssemblyConfig
from nlxassemble.core import ChannelFileGroup, Header, SignalExtent, buffer_length, place_records
from nlxassemble.io.decoder import Decoder, ExtractionMode, FieldSelection, NcsDecoder
from nlxassemble.io.extent import resolve_extent
from nlxassemble.io.filenames import resolve_channels, scan_directory, select_channels


logger = logging.getLogger(__name__)


ChannelCallback = Callable[[np.ndarray, Header, int], None]

MERGE_ORDERS = ("discovery", "chronological")


class AssemblyState(Enum):
    INIT = "init"
    EXTENT_RESOLVED = "extent_resolved"
    BATCH_ASSEMBLING = "batch_assembling"
    STREAMING = "streaming"
    DONE = "done"


def record_range(
    sample_range: Sequence[int] | None,
    samples_per_record: int,
) -> tuple[ExtractionMode, tuple[int, int] | None]:
    """Map a [from, to] sample range onto a decoder extraction mode.

    The range selects the first max(to // samples_per_record, 1) records
    of every file; `from` is not used.
    """
    if sample_range is None:
        return ExtractionMode.ALL, None

    if len(sample_range) != 2:
        raise ValueError(f"sample_range must be [from, to], got {sample_range!r}")
    first, last = (int(v) for v in sample_range)
    if last < first:
        raise ValueError(f"sample_range end ({last}) precedes its start ({first})")
    if first > 1:
        logger.warning(
            "sample_range start %d is ignored: records are read from the start of each file",
            first,
        )
    n_records = max(last // samples_per_record, 1)
    return ExtractionMode.RECORD_RANGE, (1, n_records)


def order_part_files(
    group: ChannelFileGroup,
    extent: SignalExtent,
    merge_order: str = "discovery",
) -> list[Path]:
    """Order in which a channel's part-files are written (later files win overlaps)."""
    if merge_order == "discovery":
        return list(group.part_files)
    if merge_order == "chronological":
        def first_timestamp(path: Path) -> tuple[int, int]:
            span = extent.file_spans.get(path)
            # files without records go last
            return (0, span[0]) if span is not None else (1, 0)

        return sorted(group.part_files, key=first_timestamp)
    raise ValueError(f"merge_order must be one of {MERGE_ORDERS}, got {merge_order!r}")


def assemble(
    path: str | os.PathLike,
    sample_range: Sequence[int] | None = None,
    channels: Iterable[int] | None = None,
    callback: ChannelCallback | None = None,
    *,
    decoder: Decoder | None = None,
    config: AssemblyConfig = DEFAULT_CONFIG,
    merge_order: str = "discovery",
) -> tuple[np.ndarray, Header]:
    """Assemble the recording files of a directory into continuous channels.

    Parameters
    ----------
    path:
        Directory holding the recording files, or one file of it (its
        directory is scanned).
    sample_range:
        Optional [from, to]. Bounds the number of records read from the
        start of each file (see record_range); default is every record.
    channels:
        Channel ids to assemble, one output row each in the given order
        (duplicates dropped). Default: every channel found, ascending.
        A requested channel without files gets a zero row. Channels are
        processed in ascending id order either way.
    callback:
        If given, channels are delivered one at a time as
        callback(buffer, header, position) with a 1 x n_samples buffer
        that is zeroed after the call returns. A first call with an
        empty buffer and position 0 announces the header.
    decoder:
        Record decoder, defaults to NcsDecoder.
    merge_order:
        "discovery" writes a channel's part-files in filename order,
        "chronological" in order of their first timestamp.

    Returns
    -------
    matrix, header
        float64 (n_channels, n_samples) matrix in volts, empty when a
        callback is given or no channel is selected. n_samples is 0 when
        the selected files hold no records.
    """
    if merge_order not in MERGE_ORDERS:
        raise ValueError(f"merge_order must be one of {MERGE_ORDERS}, got {merge_order!r}")

    decoder = decoder if decoder is not None else NcsDecoder()
    spr = config.samples_per_record
    state = AssemblyState.INIT

    mode, extraction_range = record_range(sample_range, spr)
    channel_files = resolve_channels(scan_directory(path, config.extension))
    rows = select_channels(channel_files.channel_ids, channels)

    header = Header.for_channels(rows, config.units)
    if not rows:
        logger.warning("No channel selected in %s, nothing to assemble", path)
        if callback is not None:
            callback(np.zeros((1, 0), dtype=np.float64), header, 0)
        return np.zeros((0, 0)), header

    present = sorted(c for c in rows if c in channel_files)
    extent = resolve_extent(
        decoder, channel_files, present, header,
        mode=mode, extraction_range=extraction_range, config=config,
    )
    state = _advance(state, AssemblyState.EXTENT_RESOLVED)
    n_samples = buffer_length(extent, spr) if extent is not None else 0

    if callback is None:
        state = _advance(state, AssemblyState.BATCH_ASSEMBLING)
        output = np.zeros((len(rows), n_samples), dtype=np.float64)
    else:
        state = _advance(state, AssemblyState.STREAMING)
        output = np.zeros((1, n_samples), dtype=np.float64)
        callback(np.zeros((1, 0), dtype=np.float64), header, 0)

    for channel_id in sorted(rows):
        position = header.position(channel_id)
        row = output[0] if callback is not None else output[position - 1]
        if channel_id in channel_files:
            n_records = 0
            if extent is not None:
                for part in order_part_files(channel_files[channel_id], extent, merge_order):
                    decoded = decoder.decode(part, FieldSelection.PAYLOAD, mode, extraction_range)
                    n_records += place_records(
                        row,
                        decoded.timestamps,
                        decoded.valid_sample_counts,
                        decoded.samples,
                        extent.start_timestamp,
                        extent.sampling_ratio,
                        header.ad_bit_volts[position - 1],
                        spr,
                    )
            header.observe(position, n_records, spr)
            logger.debug("Channel %d: %d record(s) placed", channel_id, n_records)

        if callback is not None:
            callback(output, header, position)
            output.fill(0.0)

    _advance(state, AssemblyState.DONE)

    if callback is not None:
        return np.zeros((0, 0)), header
    return output, header


def _advance(current: AssemblyState, new: AssemblyState) -> AssemblyState:
    logger.debug("Assembly %s -> %s", current.value, new.value)
    return new
