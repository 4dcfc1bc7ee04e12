# test/conftest.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pytest
from neo.rawio.neuralynxrawio.nlxheader import NlxHeader

from nlxassemble.config import SAMPLES_PER_RECORD
from nlxassemble.io.decoder import (
    DecodedFile,
    ExtractionMode,
    FieldSelection,
    NcsDecoder,
    record_slice,
)


def header_lines(
    frequency: float = 2000,
    ad_bit_volts: float = 0.001,
    label: str = "CSC1",
    created: str = "2019/07/12 13:21:32",
    closed: str = "2019/07/12 15:07:55",
) -> list[str]:
    """Cheetah 6 style text header matching the default HeaderLayout."""
    return [
        "######## Neuralynx Data File Header",
        "-FileType CSC",
        "-FileVersion 3.4",
        "-RecordSize 1044",
        "",
        "-CheetahRev 6.3.2",
        '-OriginalFileName "C:\\CheetahData\\CSC1.ncs"',
        f"-TimeCreated {created}",
        f"-TimeClosed {closed}",
        "",
        "-HardwareSubSystemName AcqSystem1",
        "-HardwareSubSystemType DigitalLynxSX",
        "-ADChannel 0",
        "-NumADChannels 1",
        f"-SamplingFrequency {frequency:g}",
        "-ADMaxValue 32767",
        f"-ADBitVolts {ad_bit_volts!r}",
        f"-AcqEntName {label}",
        "-InputRange 1000",
        "-InputInverted True",
    ]


def records(timestamps, value=1, valid=None) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Columns for records holding a constant raw value (scalar or one per record)."""
    ts = np.asarray(timestamps, dtype=np.uint64)
    n = ts.size
    values = np.broadcast_to(np.asarray(value, dtype=np.int16), (n,))
    samples = np.repeat(values[:, None], SAMPLES_PER_RECORD, axis=1).astype(np.int16)
    if valid is None:
        valid = np.full(n, SAMPLES_PER_RECORD, dtype=np.uint32)
    return ts, np.asarray(valid, dtype=np.uint32), samples


@dataclass
class FakeFile:
    timestamps: np.ndarray
    valid_sample_counts: np.ndarray
    samples: np.ndarray
    header_lines: list[str] = field(default_factory=header_lines)


class FakeDecoder:
    """In-memory Decoder keyed by file name, recording every call."""

    def __init__(self, files: dict[str, FakeFile], fail: dict[str, Exception] | None = None):
        self.files = files
        self.fail = fail or {}
        self.calls: list[tuple[str, FieldSelection, ExtractionMode, tuple[int, int] | None]] = []

    def decode(self, path, fields=FieldSelection.PAYLOAD, mode=ExtractionMode.ALL,
               extraction_range=None) -> DecodedFile:
        name = Path(path).name
        self.calls.append((name, fields, mode, extraction_range))
        if name in self.fail:
            raise self.fail[name]

        f = self.files[name]
        sl = record_slice(f.timestamps.size, mode, extraction_range)
        return DecodedFile(
            path=Path(path),
            timestamps=f.timestamps[sl] if fields & FieldSelection.TIMESTAMPS else None,
            valid_sample_counts=(
                f.valid_sample_counts[sl] if fields & FieldSelection.VALID_SAMPLES else None
            ),
            samples=f.samples[sl] if fields & FieldSelection.SAMPLES else None,
            header_lines=list(f.header_lines) if fields & FieldSelection.HEADER else None,
        )


def fake_directory(tmp_path: Path, files: dict[str, FakeFile]) -> Path:
    """Create empty files so directory scanning finds them."""
    for name in files:
        (tmp_path / name).touch()
    return tmp_path


def write_ncs(path: Path, timestamps, value=1, valid=None, lines: list[str] | None = None,
              channel: int = 0, frequency: int = 2000) -> Path:
    """Write a real NCS file: 16 kB text header + packed records."""
    ts, nb_valid, samples = records(timestamps, value, valid)
    data = np.zeros(ts.size, dtype=NcsDecoder._ncs_dtype)
    data["timestamp"] = ts
    data["channel_id"] = channel
    data["sample_rate"] = frequency
    data["nb_valid"] = nb_valid
    data["samples"] = samples

    text = "\r\n".join(lines if lines is not None else header_lines(frequency=frequency))
    raw = text.encode("latin-1")
    assert len(raw) <= NlxHeader.HEADER_SIZE

    with open(path, "wb") as f:
        f.write(raw.ljust(NlxHeader.HEADER_SIZE, b"\x00"))
        f.write(data.tobytes())
    return path


@pytest.fixture
def two_channel_files() -> dict[str, FakeFile]:
    """Cage1-1: records at 0, 500, 1000 us; Cage1-2: records at 0, 500 us."""
    return {
        "Cage1-1.ncs": FakeFile(*records([0, 500, 1000]), header_lines(label="CSC1")),
        "Cage1-2.ncs": FakeFile(*records([0, 500]), header_lines(label="CSC2")),
    }
