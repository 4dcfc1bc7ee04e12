# nlxassemble/config.py
from __future__ import annotations

from dataclasses import dataclass, field


SAMPLES_PER_RECORD = 512
SAMPLE_RESOLUTION = 1_000_000  # timestamp units per second (microseconds)
NCS_EXTENSION = ".ncs"
UNITS = "V"


@dataclass(frozen=True, slots=True)
class HeaderField:
    """
    Location of one header property.

    - line: 1-based position of the line inside the text header
    - prefix: property marker the line must start with (e.g. "-SamplingFrequency")
    """
    line: int
    prefix: str

    def __post_init__(self) -> None:
        if not isinstance(self.line, int) or self.line < 1:
            raise ValueError("HeaderField.line must be a positive integer.")
        if not isinstance(self.prefix, str) or not self.prefix.strip():
            raise ValueError("HeaderField.prefix must be a non-empty string.")


@dataclass(frozen=True, slots=True)
class HeaderLayout:
    """
    Fixed line positions of the header properties we extract.

    The positions depend on the acquisition software writing the file.
    Pass another layout when reading a different format version.
    """
    time_created: HeaderField = HeaderField(8, "-TimeCreated")
    time_closed: HeaderField = HeaderField(9, "-TimeClosed")
    sampling_frequency: HeaderField = HeaderField(15, "-SamplingFrequency")
    ad_bit_volts: HeaderField = HeaderField(17, "-ADBitVolts")
    label: HeaderField = HeaderField(18, "-AcqEntName")

    @property
    def n_lines(self) -> int:
        """Minimum number of header lines this layout needs."""
        return max(
            self.time_created.line,
            self.time_closed.line,
            self.sampling_frequency.line,
            self.ad_bit_volts.line,
            self.label.line,
        )


DEFAULT_HEADER_LAYOUT = HeaderLayout()


@dataclass(frozen=True, slots=True)
class AssemblyConfig:
    samples_per_record: int = SAMPLES_PER_RECORD
    sample_resolution: int = SAMPLE_RESOLUTION
    extension: str = NCS_EXTENSION
    units: str = UNITS
    header_layout: HeaderLayout = field(default_factory=HeaderLayout)

    def __post_init__(self) -> None:
        if self.samples_per_record < 1:
            raise ValueError("samples_per_record must be >= 1.")
        if self.sample_resolution <= 0:
            raise ValueError("sample_resolution must be > 0.")
        if not self.extension.startswith("."):
            raise ValueError("extension must start with '.'.")


DEFAULT_CONFIG = AssemblyConfig()
