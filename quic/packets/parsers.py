"""
QUIC Header Parsers (RFC 9000 Section 17)
"""

from typing import Tuple

from ..buffer import Buffer, BufferReadError
from ..constants import (
    HEADER_FORM_BIT,
    FIXED_BIT,
    LONG_PACKET_TYPE_MASK,
    SPIN_BIT,
    KEY_PHASE_BIT,
    PACKET_NUMBER_LENGTH_MASK,
    MAX_CONNECTION_ID_LENGTH,
    SHORT_HEADER_CONNECTION_ID_LENGTH,
    LONG_HEADER_PACKET_NUMBER_LENGTH,
    VERSION_LENGTH,
)
from ..errors import HeaderError, MalformedHeader
from .header import (
    QuicHeader,
    LongHeader,
    ShortHeader,
    LongPacketType,
    PacketNumberLength,
)


def _pull_connection_id(buf: Buffer, name: str) -> Tuple[int, int]:
    length = buf.pull_uint8()
    if length > MAX_CONNECTION_ID_LENGTH:
        raise MalformedHeader(
            f"{name} length {length} exceeds {MAX_CONNECTION_ID_LENGTH} bytes")
    return length, buf.pull_uint(length)


def _parse_long_header(buf: Buffer, first_byte: int) -> LongHeader:
    header = LongHeader(
        long_type=LongPacketType((first_byte & LONG_PACKET_TYPE_MASK) >> 4),
        fixed_bit=(first_byte & FIXED_BIT) >> 6,
    )

    header.version = buf.pull_uint32()
    header.destination_connection_id_length, header.destination_connection_id = \
        _pull_connection_id(buf, "DCID")
    header.source_connection_id_length, header.source_connection_id = \
        _pull_connection_id(buf, "SCID")

    if header.is_version_negotiation():
        # Supported versions fill the rest of the datagram
        header.long_type = LongPacketType.VERSION_NEGOTIATION
        if buf.remaining() % VERSION_LENGTH:
            raise MalformedHeader(
                f"Version Negotiation payload of {buf.remaining()} bytes "
                f"is not a list of 32-bit versions")
        while not buf.eof():
            header.supported_versions.append(buf.pull_uint32())
    else:
        header.packet_number = buf.pull_uint(LONG_HEADER_PACKET_NUMBER_LENGTH)

    return header


def _parse_short_header(buf: Buffer, first_byte: int,
                        connection_id_present: bool) -> ShortHeader:
    header = ShortHeader(
        spin_bit=bool(first_byte & SPIN_BIT),
        key_phase_bit=bool(first_byte & KEY_PHASE_BIT),
        fixed_bit=(first_byte & FIXED_BIT) >> 6,
    )
    pn_length = PacketNumberLength.from_code(first_byte & PACKET_NUMBER_LENGTH_MASK)

    if connection_id_present:
        header.destination_connection_id = buf.pull_uint(SHORT_HEADER_CONNECTION_ID_LENGTH)

    header.set_packet_number(buf.pull_uint(pn_length.width), pn_length)
    return header


def deserialize_header(buf: Buffer, connection_id_present: bool = True,
                       debug: bool = False) -> Tuple[QuicHeader, int]:
    """
    Read a header from the buffer's current position.

    A short header does not say on the wire whether it carries a connection
    ID; the receiver knows this from its own connection state and passes it
    as connection_id_present. Long headers ignore the argument.

    Args:
        buf: Buffer positioned at the first byte of the header
        connection_id_present: Whether short headers carry a DCID
        debug: Enable debug output

    Returns:
        tuple: (header, bytes_consumed)

    Raises:
        MalformedHeader: Truncated or inconsistent wire data
        UnsupportedPacketNumberWidth: Short header PN length code 3
    """
    start = buf.tell()

    try:
        first_byte = buf.pull_uint8()
        if first_byte & HEADER_FORM_BIT:
            header = _parse_long_header(buf, first_byte)
        else:
            header = _parse_short_header(buf, first_byte, connection_id_present)
    except BufferReadError as e:
        raise MalformedHeader(f"Header truncated: {e}") from e

    consumed = buf.tell() - start

    if debug:
        print(f"  [DEBUG] First byte: 0x{first_byte:02x}")
        print(f"  [DEBUG] Parsed {header.type_to_string()} header ({consumed} bytes)")
        print(f"  [DEBUG] {header!r}")

    return header, consumed


def parse_header(packet: bytes, connection_id_present: bool = True,
                 debug: bool = False) -> dict:
    """
    Parse a QUIC header from raw packet bytes.

    Args:
        packet: Raw packet bytes
        connection_id_present: Whether short headers carry a DCID
        debug: Enable debug output

    Returns:
        dict: {success, header, length, error}
    """
    result = {
        "success": False,
        "header": None,
        "length": 0,
        "error": None
    }

    if not packet:
        result["error"] = "Empty packet"
        return result

    try:
        header, consumed = deserialize_header(
            Buffer(data=packet), connection_id_present=connection_id_present, debug=debug)
    except HeaderError as e:
        result["error"] = str(e)
        if debug:
            print(f"  [DEBUG] Header parse failed: {e}")
        return result

    result["success"] = True
    result["header"] = header
    result["length"] = consumed
    return result
