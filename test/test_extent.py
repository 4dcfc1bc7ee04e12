from pathlib import Path

import numpy as np
import pytest

from nlxassemble.core import Header, HeaderParseError
from nlxassemble.io.decoder import ExtractionMode, FieldSelection
from nlxassemble.io.extent import resolve_extent
from nlxassemble.io.filenames import resolve_channels

from conftest import FakeDecoder, FakeFile, header_lines, records


def _files():
    return {
        "Cage1-1_0001.ncs": FakeFile(*records([1_000, 2_000]), header_lines(frequency=2000, label="A")),
        "Cage1-1_0002.ncs": FakeFile(*records([9_000, 9_500]), header_lines(frequency=4000, label="A2")),
        "Cage1-2.ncs": FakeFile(*records([500, 3_000]), header_lines(frequency=1000, label="B")),
        "Cage1-3.ncs": FakeFile(*records([100, 50_000]), header_lines(frequency=8000, label="C")),
    }


def test_extent_spans_selected_channels_only():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    header = Header.for_channels([1, 2])

    extent = resolve_extent(decoder, channel_files, [1, 2], header)

    assert extent.start_timestamp == 500
    assert extent.end_timestamp == 9_500
    assert extent.max_frequency == 4000.0
    assert extent.file_spans[Path("Cage1-1_0002.ncs")] == (9_000, 9_500)


def test_extent_bounds_are_actual_record_timestamps():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    extent = resolve_extent(decoder, channel_files, [1, 2, 3], Header.for_channels([1, 2, 3]))

    all_ts = np.concatenate([f.timestamps for f in decoder.files.values()])
    assert extent.start_timestamp <= extent.end_timestamp
    assert extent.start_timestamp in all_ts
    assert extent.end_timestamp in all_ts


def test_extent_pass_reads_no_sample_payload():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    resolve_extent(decoder, channel_files, [1, 2, 3], Header.for_channels([1, 2, 3]))

    assert len(decoder.calls) == 4
    assert all(fields == FieldSelection.EXTENT for _, fields, _, _ in decoder.calls)
    assert not FieldSelection.EXTENT & FieldSelection.SAMPLES


def test_header_filled_from_first_part_file():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    header = Header.for_channels([1, 2])

    resolve_extent(decoder, channel_files, [1, 2], header)

    assert header.channels == [1, 2]
    assert header.frequency == [2000.0, 1000.0]
    assert header.label == ["A", "B"]
    assert header.units == ["V", "V"]
    assert header.ad_bit_volts == [0.001, 0.001]
    assert header.time_created == "2019/07/12 13:21:32"
    assert header.records == 0


def test_record_range_forwarded_to_decoder():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    extent = resolve_extent(
        decoder, channel_files, [3], Header.for_channels([3]),
        mode=ExtractionMode.RECORD_RANGE, extraction_range=(1, 1),
    )

    assert extent.end_timestamp == 100
    assert decoder.calls[0][2:] == (ExtractionMode.RECORD_RANGE, (1, 1))


def test_empty_part_file_contributes_header_only():
    files = _files()
    files["Cage1-2.ncs"] = FakeFile(*records([]), header_lines(frequency=16000, label="B"))
    decoder = FakeDecoder(files)
    channel_files = resolve_channels(sorted(decoder.files))
    header = Header.for_channels([1, 2])

    extent = resolve_extent(decoder, channel_files, [1, 2], header)

    assert extent.start_timestamp == 1_000
    assert extent.max_frequency == 16000.0
    assert header.label == ["A", "B"]


def test_no_records_at_all_returns_none_with_header_filled():
    decoder = FakeDecoder({"Cage1-1.ncs": FakeFile(*records([]), header_lines(label="A"))})
    channel_files = resolve_channels(["Cage1-1.ncs"])
    header = Header.for_channels([1])

    assert resolve_extent(decoder, channel_files, [1], header) is None
    assert header.frequency == [2000.0]
    assert header.label == ["A"]
    assert header.time_created == "2019/07/12 13:21:32"


def test_header_rows_follow_header_order_not_scan_order():
    decoder = FakeDecoder(_files())
    channel_files = resolve_channels(sorted(decoder.files))
    header = Header.for_channels([2, 5, 1])

    resolve_extent(decoder, channel_files, [1, 2], header)

    assert header.label == ["B", "", "A"]
    assert header.frequency == [1000.0, 0.0, 2000.0]


def test_bad_header_in_later_part_file_is_fatal():
    files = _files()
    files["Cage1-1_0002.ncs"].header_lines = header_lines()[:12]
    decoder = FakeDecoder(files)
    channel_files = resolve_channels(sorted(decoder.files))

    with pytest.raises(HeaderParseError):
        resolve_extent(decoder, channel_files, [1], Header.for_channels([1]))
