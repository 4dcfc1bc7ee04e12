# nlxassemble/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from ..config import SAMPLE_RESOLUTION, UNITS


@dataclass(frozen=True, slots=True)
class ChannelFileGroup:
    """
    All part-files recorded for one acquisition channel.

    part_files keeps discovery order, which is also the order in which
    the files are written into the output buffer.
    """
    channel_id: int
    part_files: tuple[Path, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.channel_id, int) or self.channel_id < 0:
            raise ValueError("ChannelFileGroup.channel_id must be a non-negative int.")
        object.__setattr__(self, "part_files", tuple(Path(p) for p in self.part_files))

    def __len__(self) -> int:
        return len(self.part_files)


@dataclass(frozen=True, slots=True)
class ChannelFiles:
    """Result of filename resolution: channel id -> part-files."""
    groups: Mapping[int, ChannelFileGroup] = field(default_factory=dict)
    skipped: tuple[Path, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", dict(self.groups))
        object.__setattr__(self, "skipped", tuple(Path(p) for p in self.skipped))

    @property
    def channel_ids(self) -> list[int]:
        return sorted(self.groups)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self.groups

    def __getitem__(self, channel_id: int) -> ChannelFileGroup:
        return self.groups[channel_id]


@dataclass(frozen=True, slots=True)
class ChannelHeader:
    """Properties read from the text header of one recording file."""
    time_created: str
    time_closed: str
    sampling_frequency: float
    ad_bit_volts: float
    label: str
    units: str = UNITS


@dataclass(frozen=True, slots=True)
class SignalExtent:
    """
    Global time span of a channel selection.

    Timestamps are absolute, in 1/sample_resolution seconds.
    file_spans maps each decoded part-file to its (first, last) timestamp.
    """
    start_timestamp: int
    end_timestamp: int
    max_frequency: float
    sample_resolution: int = SAMPLE_RESOLUTION
    file_spans: Mapping[Path, tuple[int, int]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.end_timestamp < self.start_timestamp:
            raise ValueError(
                f"end_timestamp ({self.end_timestamp}) precedes "
                f"start_timestamp ({self.start_timestamp})."
            )
        if not self.max_frequency > 0:
            raise ValueError("max_frequency must be > 0.")
        object.__setattr__(self, "file_spans", dict(self.file_spans))

    @property
    def sampling_ratio(self) -> float:
        """Timestamp units per output sample."""
        return self.sample_resolution / self.max_frequency

    @property
    def duration(self) -> int:
        return self.end_timestamp - self.start_timestamp


@dataclass(slots=True)
class Header:
    """
    Header of an assembled recording.

    Per-channel lists follow the output row order. records and duration
    are the largest values observed over the assembled channels.
    """
    time_created: str = ""
    time_closed: str = ""
    channels: list[int] = field(default_factory=list)
    frequency: list[float] = field(default_factory=list)
    units: list[str] = field(default_factory=list)
    label: list[str] = field(default_factory=list)
    ad_bit_volts: list[float] = field(default_factory=list)
    records: int = 0
    duration: float = 0.0

    @classmethod
    def for_channels(cls, channel_ids: Sequence[int], units: str = UNITS) -> Header:
        """Header with one placeholder entry per output row.

        Placeholders (frequency 0.0, empty label) remain for rows whose
        channel has no files.
        """
        n = len(channel_ids)
        return cls(
            channels=list(channel_ids),
            frequency=[0.0] * n,
            units=[units] * n,
            label=[""] * n,
            ad_bit_volts=[0.0] * n,
        )

    def set_channel(self, channel_id: int, channel_header: ChannelHeader) -> int:
        """Fill the row of `channel_id` and return its 1-based position.

        The first channel filled provides the recording times.
        """
        position = self.position(channel_id)
        if not any(self.frequency):
            self.time_created = channel_header.time_created
            self.time_closed = channel_header.time_closed
        i = position - 1
        self.frequency[i] = channel_header.sampling_frequency
        self.units[i] = channel_header.units
        self.label[i] = channel_header.label
        self.ad_bit_volts[i] = channel_header.ad_bit_volts
        return position

    def position(self, channel_id: int) -> int:
        return self.channels.index(channel_id) + 1

    def observe(self, position: int, n_records: int, samples_per_record: int) -> None:
        """Fold the record count of the channel at `position` into records/duration."""
        frequency = self.frequency[position - 1]
        self.records = max(self.records, n_records)
        self.duration = max(self.duration, n_records * samples_per_record / frequency)

    @property
    def n_channels(self) -> int:
        return len(self.channels)
