from __future__ import annotations

from typing import Sequence
import re

from nlxassemble.config import DEFAULT_HEADER_LAYOUT, UNITS, HeaderField, HeaderLayout
from nlxassemble.core import ChannelHeader, HeaderParseError


def extract_field(lines: Sequence[str], header_field: HeaderField) -> str:
    """Return the value following `header_field.prefix` on its fixed line.

    Example
    -------
    line 15 = "-SamplingFrequency 32000"  -> "32000"
    """
    if len(lines) < header_field.line:
        raise HeaderParseError(
            f"Header has {len(lines)} line(s), expected '{header_field.prefix}' on line {header_field.line}"
        )

    line = lines[header_field.line - 1]
    m = re.match(rf"^\s*{re.escape(header_field.prefix)}\s+(?P<value>.*?)\s*$", line)
    if not m or not m.group("value"):
        raise HeaderParseError(
            f"Line {header_field.line} does not hold '{header_field.prefix}': {line!r}"
        )
    return m.group("value")


def _extract_float(lines: Sequence[str], header_field: HeaderField) -> float:
    value = extract_field(lines, header_field)
    try:
        # some writers put several space-separated values on one line
        number = float(value.split()[0])
    except ValueError as e:
        raise HeaderParseError(f"'{header_field.prefix}' is not numeric: {value!r}") from e
    if not number > 0:
        raise HeaderParseError(f"'{header_field.prefix}' must be > 0, got {number}")
    return number


def extract_channel_header(
    lines: Sequence[str],
    layout: HeaderLayout = DEFAULT_HEADER_LAYOUT,
    units: str = UNITS,
) -> ChannelHeader:
    """Build a ChannelHeader from the text header lines of one file."""
    return ChannelHeader(
        time_created=extract_field(lines, layout.time_created),
        time_closed=extract_field(lines, layout.time_closed),
        sampling_frequency=_extract_float(lines, layout.sampling_frequency),
        ad_bit_volts=_extract_float(lines, layout.ad_bit_volts),
        label=extract_field(lines, layout.label).strip('"'),
        units=units,
    )
