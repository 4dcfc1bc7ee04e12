"""
nlxassemble: rebuild continuous channels from fragmented Neuralynx NCS files.

    >>> from nlxassemble import assemble
    >>> matrix, header = assemble("recordings/Cage1", channels=[1, 2])
"""

from .config import AssemblyConfig, HeaderField, HeaderLayout, DEFAULT_CONFIG
from .core import ChannelHeader, Header, SignalExtent, AssemblyError
from .io import assemble, NcsDecoder


__all__ = [
    "assemble",
    "NcsDecoder",
    "AssemblyConfig",
    "HeaderField",
    "HeaderLayout",
    "DEFAULT_CONFIG",
    "ChannelHeader",
    "Header",
    "SignalExtent",
    "AssemblyError",
]
