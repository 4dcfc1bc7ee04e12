from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from pathlib import Path
from typing import Protocol
import logging
import os

import numpy as np
from neo.rawio.neuralynxrawio.neuralynxrawio import NeuralynxRawIO  # NCS record layout
from neo.rawio.neuralynxrawio.nlxheader import NlxHeader

from nlxassemble.core.exceptions import DecodeError


logger = logging.getLogger(__name__)


class FieldSelection(IntFlag):
    """Which record columns a decode call returns."""

    TIMESTAMPS = 1
    CHANNEL_NUMBERS = 2
    SAMPLE_FREQUENCIES = 4
    VALID_SAMPLES = 8
    SAMPLES = 16
    HEADER = 32

    # payload passes: everything needed to place samples
    PAYLOAD = TIMESTAMPS | VALID_SAMPLES | SAMPLES | HEADER
    # extent passes: no sample payload
    EXTENT = TIMESTAMPS | HEADER


class ExtractionMode(Enum):
    ALL = "all"
    RECORD_RANGE = "record_range"  # 1-based, inclusive (first, last) record indices


@dataclass(frozen=True)
class DecodedFile:
    """
    Column-wise view of the records decoded from one file.

    Columns that were not requested are None.
    """

    path: Path
    timestamps: np.ndarray | None = field(default=None, repr=False)
    channel_numbers: np.ndarray | None = field(default=None, repr=False)
    sample_frequencies: np.ndarray | None = field(default=None, repr=False)
    valid_sample_counts: np.ndarray | None = field(default=None, repr=False)
    samples: np.ndarray | None = field(default=None, repr=False)
    header_lines: list[str] | None = field(default=None, repr=False)

    @property
    def n_records(self) -> int:
        for column in (self.timestamps, self.valid_sample_counts, self.samples):
            if column is not None:
                return int(column.shape[0])
        return 0

    @property
    def first_timestamp(self) -> int | None:
        if self.timestamps is None or self.timestamps.size == 0:
            return None
        return int(self.timestamps[0])

    @property
    def last_timestamp(self) -> int | None:
        if self.timestamps is None or self.timestamps.size == 0:
            return None
        return int(self.timestamps[-1])


class Decoder(Protocol):
    """Protocol for record decoders.

    Implementations turn one recording file into a DecodedFile and raise
    DecodeError when the file cannot be read.
    """

    def decode(
        self,
        path: str | os.PathLike,
        fields: FieldSelection = FieldSelection.PAYLOAD,
        mode: ExtractionMode = ExtractionMode.ALL,
        extraction_range: tuple[int, int] | None = None,
    ) -> DecodedFile:
        ...


def record_slice(
    n_records: int,
    mode: ExtractionMode,
    extraction_range: tuple[int, int] | None,
) -> slice:
    """Translate an extraction mode into a slice over the record axis."""
    if mode is ExtractionMode.ALL:
        return slice(0, n_records)

    if extraction_range is None:
        raise ValueError("ExtractionMode.RECORD_RANGE needs an extraction_range.")
    first, last = (int(v) for v in extraction_range)
    if first < 1 or last < first:
        raise ValueError(f"Invalid record range {extraction_range!r} (1-based, inclusive).")
    return slice(first - 1, min(last, n_records))


def split_header(text: str) -> list[str]:
    """Split a text header into lines, keeping blank lines so positions stay fixed."""
    return [line.rstrip() for line in text.splitlines()]


class NcsDecoder:
    """Decoder for Neuralynx continuously sampled (NCS) files, backed by neo.

    The text header is read with neo's NlxHeader and the records are
    mapped read-only with neo's NCS record dtype.
    """

    _ncs_dtype = np.dtype(NeuralynxRawIO._ncs_dtype)

    _columns = {
        FieldSelection.TIMESTAMPS: ("timestamp", "timestamps"),
        FieldSelection.CHANNEL_NUMBERS: ("channel_id", "channel_numbers"),
        FieldSelection.SAMPLE_FREQUENCIES: ("sample_rate", "sample_frequencies"),
        FieldSelection.VALID_SAMPLES: ("nb_valid", "valid_sample_counts"),
        FieldSelection.SAMPLES: ("samples", "samples"),
    }

    def decode(
        self,
        path: str | os.PathLike,
        fields: FieldSelection = FieldSelection.PAYLOAD,
        mode: ExtractionMode = ExtractionMode.ALL,
        extraction_range: tuple[int, int] | None = None,
    ) -> DecodedFile:
        path = Path(path)
        try:
            records = self._records(path)
            header_text = NlxHeader.get_text_header(path) if fields & FieldSelection.HEADER else None
        except (OSError, ValueError) as e:
            raise DecodeError(f"Cannot decode {path}: {e}") from e

        selected = records[record_slice(records.shape[0], mode, extraction_range)]
        logger.debug("Decoded %d record(s) from %s", selected.shape[0], path)

        columns = {}
        for flag, (name, attr) in self._columns.items():
            if fields & flag:
                columns[attr] = np.array(selected[name])
        if header_text is not None:
            columns["header_lines"] = split_header(header_text)

        return DecodedFile(path=path, **columns)

    def _records(self, path: Path) -> np.ndarray:
        size = os.path.getsize(path)
        if size < NlxHeader.HEADER_SIZE:
            raise ValueError(
                f"file is {size} bytes, shorter than the {NlxHeader.HEADER_SIZE}-byte header"
            )

        n_records, remainder = divmod(size - NlxHeader.HEADER_SIZE, self._ncs_dtype.itemsize)
        if remainder:
            logger.warning(
                "%s ends with a truncated record (%d trailing bytes ignored)", path, remainder
            )
        if n_records == 0:
            return np.zeros((0,), dtype=self._ncs_dtype)

        return np.memmap(path, dtype=self._ncs_dtype, mode="r",
                         offset=NlxHeader.HEADER_SIZE, shape=(n_records,))
