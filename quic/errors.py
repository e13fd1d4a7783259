"""
QUIC Header Errors

Every failure raised by the header codec derives from ValueError, so a
protocol engine can drop a malformed packet with a single except clause.
"""


class HeaderError(ValueError):
    """Base class for header encoding/decoding failures."""


class UnassignedLongType(HeaderError):
    """A long header was measured or serialized without a packet type."""


class InvalidFieldAccess(HeaderError):
    """A format-specific field was read on a header of the other format."""


class UnsupportedPacketNumberWidth(HeaderError):
    """A packet number length code outside {1, 2, 4} bytes."""


class MalformedHeader(HeaderError):
    """Wire data does not describe a valid header."""
