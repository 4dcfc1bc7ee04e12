"""
Core domain objects for nlxassemble.

This module defines the format-agnostic data model and the placement math:
- ChannelFileGroup / ChannelFiles: part-files grouped per channel
- ChannelHeader / Header: per-file and aggregated recording metadata
- SignalExtent: global time span of a channel selection
- placement: timestamp -> buffer offset, scaled sample writes

The core layer is independent from file decoding.
"""

from .metadata import ChannelFileGroup, ChannelFiles, ChannelHeader, Header, SignalExtent
from .placement import allocate, buffer_length, place_records, sample_offsets
from .exceptions import (
    AssemblyError,
    FilenameResolutionError,
    HeaderParseError,
    DecodeError,
    PlacementError,
)


__all__ = [
    # domain objects
    "ChannelFileGroup",
    "ChannelFiles",
    "ChannelHeader",
    "Header",
    "SignalExtent",

    # placement
    "allocate",
    "buffer_length",
    "place_records",
    "sample_offsets",

    # exceptions
    "AssemblyError",
    "FilenameResolutionError",
    "HeaderParseError",
    "DecodeError",
    "PlacementError",
]
