"""
I/O layer for nlxassemble: file discovery, record decoding, header
extraction and the assembly driver.
"""

from .driver import AssemblyState, assemble, order_part_files, record_range
from .decoder import DecodedFile, Decoder, ExtractionMode, FieldSelection, NcsDecoder
from .extent import resolve_extent
from .filenames import parse_channel_id, resolve_channels, scan_directory, select_channels
from .header import extract_channel_header, extract_field


__all__ = [
    # driver
    "assemble",
    "AssemblyState",
    "order_part_files",
    "record_range",

    # decoding
    "Decoder",
    "DecodedFile",
    "ExtractionMode",
    "FieldSelection",
    "NcsDecoder",

    # resolution
    "parse_channel_id",
    "resolve_channels",
    "scan_directory",
    "select_channels",
    "resolve_extent",

    # header
    "extract_channel_header",
    "extract_field",
]
