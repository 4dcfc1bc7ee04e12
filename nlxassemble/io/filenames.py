from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Iterable
import logging
import os
import re

from nlxassemble.config import NCS_EXTENSION
from nlxassemble.core import ChannelFileGroup, ChannelFiles, FilenameResolutionError


logger = logging.getLogger(__name__)


_CHANNEL_RE = re.compile(r"(?<=-)\d+")


def parse_channel_id(filename: str | os.PathLike) -> int:
    """Extract the channel id from a recording filename.

    The channel id is the last run of digits directly preceded by '-'
    in the file stem.

    Examples
    --------
    "Cage1-1.ncs"        -> 1
    "Cage1-12_0003.ncs"  -> 12
    "CSC5.ncs"           -> FilenameResolutionError
    """
    stem = Path(filename).stem
    matches = _CHANNEL_RE.findall(stem)
    if not matches:
        raise FilenameResolutionError(f"No '-<digits>' channel id in filename '{Path(filename).name}'")
    return int(matches[-1])


def scan_directory(path: str | os.PathLike, extension: str = NCS_EXTENSION) -> list[Path]:
    """List the recording files of a directory, sorted by name.

    If `path` is a file, its containing directory is scanned instead.
    The extension match is case-insensitive.
    """
    path = Path(path)
    directory = path.parent if path.is_file() else path
    if not directory.is_dir():
        raise FileNotFoundError(f"No such directory: '{directory}'")

    ext = extension.lower()
    files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ext)
    logger.debug("Found %d '%s' file(s) in %s", len(files), extension, directory)
    return files


def resolve_channels(filenames: Iterable[str | os.PathLike]) -> ChannelFiles:
    """Group part-files by channel id, keeping discovery order.

    Files without a channel id are skipped and reported in ChannelFiles.skipped.
    """
    parts: dict[int, list[Path]] = defaultdict(list)
    skipped: list[Path] = []

    for filename in filenames:
        try:
            channel_id = parse_channel_id(filename)
        except FilenameResolutionError as e:
            logger.warning("Skipping %s: %s", filename, e)
            skipped.append(Path(filename))
            continue
        parts[channel_id].append(Path(filename))

    groups = {
        channel_id: ChannelFileGroup(channel_id=channel_id, part_files=tuple(files))
        for channel_id, files in parts.items()
    }
    return ChannelFiles(groups=groups, skipped=tuple(skipped))


def select_channels(available: Iterable[int], requested: Iterable[int] | None = None) -> list[int]:
    """Resolve the channel selection into output rows.

    Without a request every available channel is selected, in ascending
    order. A request keeps the caller's order with duplicates dropped;
    requested channels without files keep their row (it stays zero). The
    selection is empty when no requested channel is available. The
    1-based position in the returned list is the output row of a channel.
    """
    available_set = set(available)
    if requested is None:
        return sorted(available_set)

    rows = list(dict.fromkeys(int(c) for c in requested))
    missing = [c for c in rows if c not in available_set]
    if len(missing) == len(rows):
        logger.warning("None of the requested channel(s) %s found", rows)
        return []
    if missing:
        logger.warning("Requested channel(s) %s not found, their rows stay zero", missing)
    return rows
