"""
QUIC Header Builders (RFC 9000 Section 17)
"""

from typing import Iterable

from ..buffer import Buffer
from ..constants import (
    VERSION_NEGOTIATION_VERSION,
    MAX_CONNECTION_ID_LENGTH,
    SHORT_HEADER_CONNECTION_ID_LENGTH,
    LONG_HEADER_PACKET_NUMBER_LENGTH,
)
from ..errors import HeaderError, UnassignedLongType
from .header import QuicHeader, LongHeader, ShortHeader, LongPacketType


def build_first_byte(header: QuicHeader) -> int:
    """
    Build the flags byte.

    Long:  1 F TT 0000
    Short: 0 F S 00 K PP
    """
    first_byte = (int(header.form) << 7) | ((header.fixed_bit & 0x01) << 6)

    if header.is_long():
        if header.long_type.has_wire_code:
            first_byte |= int(header.long_type) << 4
        # Version Negotiation has no type code, the bits are left at 0
    else:
        first_byte |= int(header.spin_bit) << 5
        first_byte |= int(header.key_phase_bit) << 2
        first_byte |= int(header.packet_number_length)

    return first_byte


def _check_connection_id(name: str, connection_id: int, length: int) -> None:
    if not 0 <= length <= MAX_CONNECTION_ID_LENGTH:
        raise HeaderError(
            f"{name} length {length} exceeds {MAX_CONNECTION_ID_LENGTH} bytes")
    if connection_id < 0 or connection_id >> (8 * length):
        raise HeaderError(
            f"{name} 0x{connection_id:x} does not fit in {length} bytes")


def _check_long_header(header: LongHeader) -> None:
    if header.long_type == LongPacketType.NONE:
        raise UnassignedLongType("Long header has no packet type")
    if header.long_type == LongPacketType.VERSION_NEGOTIATION and not header.is_version_negotiation():
        raise HeaderError(
            f"Version Negotiation packet must carry version 0, got 0x{header.version:08x}")
    if header.is_version_negotiation() and header.long_type != LongPacketType.VERSION_NEGOTIATION:
        raise HeaderError(
            f"{header.type_to_string()} packet cannot carry version 0, "
            f"which is reserved for Version Negotiation")
    if header.supported_versions and not header.is_version_negotiation():
        raise HeaderError(
            "Supported versions are only carried by Version Negotiation packets")
    if not 0 <= header.version <= 0xFFFFFFFF:
        raise HeaderError(f"Version {header.version} does not fit in 32 bits")

    _check_connection_id("DCID", header.destination_connection_id,
                         header.destination_connection_id_length)
    _check_connection_id("SCID", header.source_connection_id,
                         header.source_connection_id_length)

    for version in header.supported_versions:
        if not 0 <= version <= 0xFFFFFFFF:
            raise HeaderError(f"Supported version {version} does not fit in 32 bits")


def serialize_header(header: QuicHeader, buf: Buffer, debug: bool = False) -> int:
    """
    Write a header at the buffer's current position.

    Args:
        header: LongHeader or ShortHeader to encode
        buf: Buffer with at least header.get_serialized_size() bytes left
        debug: Enable debug output

    Returns:
        int: Number of bytes written
    """
    start = buf.tell()

    if header.is_long():
        _check_long_header(header)
    elif header.has_connection_id():
        _check_connection_id("DCID", header.destination_connection_id,
                             SHORT_HEADER_CONNECTION_ID_LENGTH)

    size = header.get_serialized_size()
    if debug:
        print(f"  [DEBUG] Serializing {header.type_to_string()} header ({size} bytes)")

    first_byte = build_first_byte(header)
    buf.push_uint8(first_byte)

    if header.is_long():
        buf.push_uint32(header.version)

        buf.push_uint8(header.destination_connection_id_length)
        buf.push_uint(header.destination_connection_id, header.destination_connection_id_length)

        buf.push_uint8(header.source_connection_id_length)
        buf.push_uint(header.source_connection_id, header.source_connection_id_length)

        if header.is_version_negotiation():
            for version in header.supported_versions:
                buf.push_uint32(version)
        else:
            buf.push_uint(header.packet_number, LONG_HEADER_PACKET_NUMBER_LENGTH)
    else:
        if header.has_connection_id():
            buf.push_uint(header.destination_connection_id, SHORT_HEADER_CONNECTION_ID_LENGTH)
        buf.push_uint(header.packet_number, header.packet_number_length.width)

    written = buf.tell() - start

    if debug:
        print(f"  [DEBUG] First byte: 0x{first_byte:02x}")
        print(f"  [DEBUG] Header bytes: {buf.data[start:].hex()}")

    return written


def encode_header(header: QuicHeader, debug: bool = False) -> bytes:
    """
    Encode a header into a new bytes object.

    Args:
        header: LongHeader or ShortHeader to encode
        debug: Enable debug output

    Returns:
        bytes: Encoded header
    """
    buf = Buffer(capacity=header.get_serialized_size())
    serialize_header(header, buf, debug=debug)
    return buf.data


# =============================================================================
# Header factories
# =============================================================================

def _create_long(long_type: LongPacketType, connection_id: int, version: int,
                 packet_number: int) -> LongHeader:
    return LongHeader(
        long_type=long_type,
        version=version,
        destination_connection_id=connection_id,
        packet_number=packet_number,
    )


def create_initial(connection_id: int, version: int, packet_number: int) -> LongHeader:
    """Create an Initial packet header."""
    return _create_long(LongPacketType.INITIAL, connection_id, version, packet_number)


def create_zero_rtt(connection_id: int, version: int, packet_number: int) -> LongHeader:
    """Create a 0-RTT Protected packet header."""
    return _create_long(LongPacketType.ZERO_RTT_PROTECTED, connection_id, version, packet_number)


def create_handshake(connection_id: int, version: int, packet_number: int) -> LongHeader:
    """Create a Handshake packet header."""
    return _create_long(LongPacketType.HANDSHAKE, connection_id, version, packet_number)


def create_retry(connection_id: int, version: int, packet_number: int) -> LongHeader:
    """Create a Retry packet header."""
    return _create_long(LongPacketType.RETRY, connection_id, version, packet_number)


def create_short(connection_id: int, packet_number: int, connection_id_flag: bool,
                 key_phase_bit: bool, spin_bit: bool) -> ShortHeader:
    """
    Create a short (1-RTT) header.

    The connection ID is only carried when connection_id_flag is set. The
    packet number length is the smallest one that fits packet_number.
    """
    return ShortHeader(
        destination_connection_id=connection_id if connection_id_flag else None,
        packet_number=packet_number,
        spin_bit=spin_bit,
        key_phase_bit=key_phase_bit,
    )


def create_version_negotiation(connection_id: int, version: int,
                               supported_versions: Iterable[int]) -> LongHeader:
    """
    Create a Version Negotiation header.

    The version field is always 0 on a Version Negotiation packet, whatever
    `version` the caller passes. The supported versions follow the SCID on
    the wire.

    Args:
        connection_id: Destination Connection ID
        version: Version of the packet that triggered negotiation (not encoded)
        supported_versions: Versions the endpoint accepts

    Returns:
        LongHeader: Version Negotiation header
    """
    return LongHeader(
        long_type=LongPacketType.VERSION_NEGOTIATION,
        version=VERSION_NEGOTIATION_VERSION,
        destination_connection_id=connection_id,
        supported_versions=supported_versions,
    )
