# nlxassemble/core/exceptions.py
from __future__ import annotations


class AssemblyError(Exception):
    """Base error for all nlxassemble exceptions."""


# ---- Input resolution errors ----
class FilenameResolutionError(AssemblyError, ValueError):
    """Raised when no channel id can be read from a filename."""


class HeaderParseError(AssemblyError, ValueError):
    """Raised when an expected header line is missing or does not match."""


# ---- Collaborator failures (also behave like OSError for file APIs) ----
class DecodeError(AssemblyError, OSError):
    """Raised when a recording file cannot be decoded."""


# ---- Assembly invariants ----
class PlacementError(AssemblyError, IndexError):
    """Raised when a record does not fit in the output buffer."""
