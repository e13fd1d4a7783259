"""
QUIC Packet Header Building and Parsing
"""

from .header import (
    HeaderForm,
    LongPacketType,
    PacketNumberLength,
    QuicHeader,
    LongHeader,
    ShortHeader,
)
from .builders import (
    build_first_byte,
    serialize_header,
    encode_header,
    create_initial,
    create_zero_rtt,
    create_handshake,
    create_retry,
    create_short,
    create_version_negotiation,
)
from .parsers import (
    deserialize_header,
    parse_header,
)
