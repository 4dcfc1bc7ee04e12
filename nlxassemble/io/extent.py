from __future__ import annotations

from pathlib import Path
from typing import Sequence
import logging

from nlxassemble.config import DEFAULT_CONFIG, AssemblyConfig
from nlxassemble.core import ChannelFiles, Header, SignalExtent
from nlxassemble.io.decoder import Decoder, ExtractionMode, FieldSelection
from nlxassemble.io.header import extract_channel_header


logger = logging.getLogger(__name__)


def resolve_extent(
    decoder: Decoder,
    channel_files: ChannelFiles,
    selection: Sequence[int],
    header: Header,
    *,
    mode: ExtractionMode = ExtractionMode.ALL,
    extraction_range: tuple[int, int] | None = None,
    config: AssemblyConfig = DEFAULT_CONFIG,
) -> SignalExtent | None:
    """Scan timestamps and headers of every selected part-file.

    Parameters
    ----------
    decoder:
        Record decoder; called with FieldSelection.EXTENT so no sample
        payload is read.
    channel_files, selection:
        Channel -> part-files mapping and the ids of the channels to scan.
        Every id must have files and a row in `header`.
    header:
        Header aggregate, its row of each scanned channel is filled in
        place from the channel's first part-file.

    Returns
    -------
    SignalExtent or None
        Earliest first timestamp, latest last timestamp and the highest
        sampling frequency over all scanned part-files. None when none of
        the files holds a record; the header is filled all the same.
    """
    start: int | None = None
    end: int | None = None
    max_frequency = 0.0
    file_spans: dict[Path, tuple[int, int]] = {}

    for channel_id in selection:
        group = channel_files[channel_id]
        for i, path in enumerate(group.part_files):
            decoded = decoder.decode(path, FieldSelection.EXTENT, mode, extraction_range)
            channel_header = extract_channel_header(
                decoded.header_lines or [], config.header_layout, config.units
            )
            if i == 0:
                header.set_channel(channel_id, channel_header)
            max_frequency = max(max_frequency, channel_header.sampling_frequency)

            first, last = decoded.first_timestamp, decoded.last_timestamp
            if first is None or last is None:
                logger.debug("%s holds no records", path)
                continue
            file_spans[path] = (first, last)
            start = first if start is None else min(start, first)
            end = last if end is None else max(end, last)

    if start is None or end is None:
        logger.warning("No records in the files of channel(s) %s", list(selection))
        return None

    extent = SignalExtent(
        start_timestamp=start,
        end_timestamp=end,
        max_frequency=max_frequency,
        sample_resolution=config.sample_resolution,
        file_spans=file_spans,
    )
    logger.info(
        "Extent of %d channel(s): [%d, %d] at %g Hz",
        len(selection), extent.start_timestamp, extent.end_timestamp, extent.max_frequency,
    )
    return extent
