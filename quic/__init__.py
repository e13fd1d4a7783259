"""
QUIC Header Codec

This package provides the QUIC packet header wire format:
- Long and short header models
- Header serialization and parsing
- Factories for each packet type
- A big-endian byte buffer cursor
"""

from .constants import *
from .buffer import Buffer, BufferReadError, BufferWriteError
from .errors import (
    HeaderError,
    UnassignedLongType,
    InvalidFieldAccess,
    UnsupportedPacketNumberWidth,
    MalformedHeader,
)
