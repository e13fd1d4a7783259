"""
QUIC Packet Header Model (RFC 9000 Section 17)

A header is either a LongHeader or a ShortHeader. Fields that only exist in
one form live only on that class; the format-specific accessors on the
common base raise InvalidFieldAccess when asked for a field of the other
form.
"""

from enum import IntEnum
from typing import Iterable, List, Optional

from ..constants import (
    PACKET_TYPE_INITIAL,
    PACKET_TYPE_0RTT,
    PACKET_TYPE_HANDSHAKE,
    PACKET_TYPE_RETRY,
    PACKET_TYPE_NAMES,
    PACKET_NUMBER_LENGTH_NAMES,
    DEFAULT_CONNECTION_ID_LENGTH,
    SHORT_HEADER_CONNECTION_ID_LENGTH,
    LONG_HEADER_PACKET_NUMBER_LENGTH,
    VERSION_LENGTH,
    VERSION_NEGOTIATION_VERSION,
    MAX_PACKET_NUMBER,
)
from ..errors import HeaderError, InvalidFieldAccess, UnassignedLongType, UnsupportedPacketNumberWidth


class HeaderForm(IntEnum):
    """Header Form bit (most significant bit of the first byte)"""
    SHORT = 0
    LONG = 1


class LongPacketType(IntEnum):
    """Long header packet types. Only the first four have a wire code."""
    INITIAL = PACKET_TYPE_INITIAL
    ZERO_RTT_PROTECTED = PACKET_TYPE_0RTT
    HANDSHAKE = PACKET_TYPE_HANDSHAKE
    RETRY = PACKET_TYPE_RETRY
    VERSION_NEGOTIATION = 4
    NONE = 5                 # Not assigned yet

    @property
    def has_wire_code(self) -> bool:
        return self <= LongPacketType.RETRY


class PacketNumberLength(IntEnum):
    """Short header packet number length; the value is the 2-bit PP code."""
    ONE = 0
    TWO = 1
    FOUR = 2

    @property
    def width(self) -> int:
        """Width in bytes."""
        return _PACKET_NUMBER_WIDTHS[self]

    @classmethod
    def from_code(cls, code: int) -> "PacketNumberLength":
        try:
            return cls(code)
        except ValueError:
            raise UnsupportedPacketNumberWidth(
                f"Packet number length code {code} is not one of 1, 2 or 4 bytes") from None

    @classmethod
    def for_packet_number(cls, packet_number: int) -> "PacketNumberLength":
        """Smallest length that can carry `packet_number`."""
        if packet_number < 256:
            return cls.ONE
        if packet_number < 65536:
            return cls.TWO
        return cls.FOUR


_PACKET_NUMBER_WIDTHS = {
    PacketNumberLength.ONE: 1,
    PacketNumberLength.TWO: 2,
    PacketNumberLength.FOUR: 4,
}


class QuicHeader:
    """
    Fields and predicates shared by both header forms.

    Abstract: build a LongHeader or a ShortHeader instead.
    """

    form: Optional[HeaderForm] = None

    def __init__(self, destination_connection_id: int = 0, packet_number: int = 0,
                 fixed_bit: int = 1):
        if self.form is None:
            raise TypeError("QuicHeader is abstract, use LongHeader or ShortHeader")
        self.fixed_bit = fixed_bit
        self._destination_connection_id = destination_connection_id
        self._packet_number = 0
        self.packet_number = packet_number

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    @property
    def destination_connection_id(self) -> int:
        return self._destination_connection_id

    @destination_connection_id.setter
    def destination_connection_id(self, connection_id: int) -> None:
        self._destination_connection_id = connection_id

    @property
    def packet_number(self) -> int:
        return self._packet_number

    @packet_number.setter
    def packet_number(self, packet_number: int) -> None:
        self.set_packet_number(packet_number)

    def set_packet_number(self, packet_number: int,
                          packet_number_length: Optional[PacketNumberLength] = None) -> None:
        self._packet_number = packet_number & MAX_PACKET_NUMBER

    @property
    def packet_number_length(self) -> PacketNumberLength:
        return PacketNumberLength.FOUR

    # -------------------------------------------------------------------------
    # Classifier
    # -------------------------------------------------------------------------

    def is_long(self) -> bool:
        return self.form == HeaderForm.LONG

    def is_short(self) -> bool:
        return self.form == HeaderForm.SHORT

    def has_version(self) -> bool:
        return self.is_long()

    def has_connection_id(self) -> bool:
        return True

    def is_version_negotiation(self) -> bool:
        return False

    def is_initial(self) -> bool:
        return self._is_long_type(LongPacketType.INITIAL)

    def is_zero_rtt(self) -> bool:
        return self._is_long_type(LongPacketType.ZERO_RTT_PROTECTED)

    def is_handshake(self) -> bool:
        return self._is_long_type(LongPacketType.HANDSHAKE)

    def is_retry(self) -> bool:
        return self._is_long_type(LongPacketType.RETRY)

    def _is_long_type(self, long_type: LongPacketType) -> bool:
        return False

    # -------------------------------------------------------------------------
    # Format-specific accessors
    # -------------------------------------------------------------------------

    def get_version(self) -> int:
        raise InvalidFieldAccess("Version is only present on long headers")

    def get_connection_id(self) -> int:
        if not self.has_connection_id():
            raise InvalidFieldAccess("Header carries no connection ID")
        return self._destination_connection_id

    def get_spin_bit(self) -> bool:
        raise InvalidFieldAccess("Spin bit is only present on short headers")

    def get_key_phase_bit(self) -> bool:
        raise InvalidFieldAccess("Key phase bit is only present on short headers")

    # -------------------------------------------------------------------------
    # Size
    # -------------------------------------------------------------------------

    def get_packet_number_length_bits(self) -> int:
        return self.packet_number_length.width * 8

    def get_serialized_size(self) -> int:
        """Exact number of bytes serialize_header() writes for this header."""
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Equality / Debug
    # -------------------------------------------------------------------------

    def _compare_key(self) -> tuple:
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, QuicHeader):
            return NotImplemented
        if self.form != other.form:
            return False
        return self._compare_key() == other._compare_key()

    __hash__ = None

    def type_to_string(self) -> str:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self):
        return self.describe()


class LongHeader(QuicHeader):
    """
    Long header (Initial, 0-RTT, Handshake, Retry, Version Negotiation).

    Wire layout:
        Flags (8) = 1 | Fixed (1) | Type (2) | Reserved (4)
        Version (32)
        DCID Len (8), DCID (DCID Len * 8)
        SCID Len (8), SCID (SCID Len * 8)
        Packet Number (32)            # or Supported Versions (32 each) if Version == 0
    """

    form = HeaderForm.LONG

    def __init__(self, long_type: LongPacketType = LongPacketType.NONE,
                 version: int = VERSION_NEGOTIATION_VERSION,
                 destination_connection_id: int = 0,
                 source_connection_id: int = 0, packet_number: int = 0,
                 destination_connection_id_length: int = DEFAULT_CONNECTION_ID_LENGTH,
                 source_connection_id_length: int = DEFAULT_CONNECTION_ID_LENGTH,
                 supported_versions: Iterable[int] = (), fixed_bit: int = 1):
        super().__init__(destination_connection_id, packet_number, fixed_bit)
        self.long_type = LongPacketType(long_type)
        self.version = version
        self.destination_connection_id_length = destination_connection_id_length
        self.source_connection_id = source_connection_id
        self.source_connection_id_length = source_connection_id_length
        self.supported_versions: List[int] = list(supported_versions)

    def is_version_negotiation(self) -> bool:
        return self.version == VERSION_NEGOTIATION_VERSION

    def _is_long_type(self, long_type: LongPacketType) -> bool:
        return self.long_type == long_type

    def get_version(self) -> int:
        return self.version

    def get_serialized_size(self) -> int:
        if self.long_type == LongPacketType.NONE:
            raise UnassignedLongType("Long header has no packet type")

        size = 1 + VERSION_LENGTH
        size += 1 + self.destination_connection_id_length
        size += 1 + self.source_connection_id_length
        if self.is_version_negotiation():
            size += VERSION_LENGTH * len(self.supported_versions)
        else:
            size += LONG_HEADER_PACKET_NUMBER_LENGTH
        return size

    def _compare_key(self) -> tuple:
        return (
            self.long_type,
            self.version,
            self.destination_connection_id_length,
            self.destination_connection_id,
            self.source_connection_id_length,
            self.source_connection_id,
            self.packet_number,
            tuple(self.supported_versions),
        )

    def type_to_string(self) -> str:
        return PACKET_TYPE_NAMES[int(self.long_type)]

    def describe(self) -> str:
        lines = [
            f"|{int(self.form)}|{self.type_to_string()}|",
            f"|ConnectionID {self.destination_connection_id}|",
            f"|Version {self.version}|",
        ]
        if self.is_version_negotiation():
            versions = " ".join(f"0x{v:08x}" for v in self.supported_versions)
            lines.append(f"|SupportedVersions {versions}|")
        else:
            lines.append(f"|PacketNumber {self.packet_number}|")
        return "\n".join(lines) + "\n"

    def __repr__(self):
        return (f"LongHeader(long_type={self.long_type.name}, version=0x{self.version:08x}, "
                f"dcid_len={self.destination_connection_id_length}, "
                f"dcid=0x{self.destination_connection_id:x}, "
                f"scid_len={self.source_connection_id_length}, "
                f"scid=0x{self.source_connection_id:x}, "
                f"packet_number={self.packet_number}, "
                f"supported_versions={self.supported_versions})")


class ShortHeader(QuicHeader):
    """
    Short header (1-RTT).

    Wire layout:
        Flags (8) = 0 | Fixed (1) | Spin (1) | Reserved (2) | Key Phase (1) | PN Length (2)
        DCID (64)                     # only if the connection uses one
        Packet Number (8, 16 or 32)
    """

    form = HeaderForm.SHORT

    def __init__(self, destination_connection_id: Optional[int] = None, packet_number: int = 0,
                 spin_bit: bool = False, key_phase_bit: bool = False, fixed_bit: int = 1):
        self._packet_number_length = PacketNumberLength.ONE
        self.has_connection_id_flag = False
        super().__init__(0, packet_number, fixed_bit)
        self.spin_bit = bool(spin_bit)
        self.key_phase_bit = bool(key_phase_bit)
        if destination_connection_id is not None:
            self.destination_connection_id = destination_connection_id

    @QuicHeader.destination_connection_id.setter
    def destination_connection_id(self, connection_id: int) -> None:
        self._destination_connection_id = connection_id
        self.has_connection_id_flag = True

    def set_packet_number(self, packet_number: int,
                          packet_number_length: Optional[PacketNumberLength] = None) -> None:
        """
        Assign the packet number and its on-wire length.

        Without an explicit length the smallest one that fits is chosen. An
        explicit length (as announced by a received packet) must be wide
        enough for the value.
        """
        packet_number &= MAX_PACKET_NUMBER
        minimal = PacketNumberLength.for_packet_number(packet_number)
        if packet_number_length is None:
            packet_number_length = minimal
        elif packet_number_length < minimal:
            raise HeaderError(
                f"Packet number {packet_number} does not fit in {packet_number_length.width} bytes")
        self._packet_number = packet_number
        self._packet_number_length = PacketNumberLength(packet_number_length)

    @property
    def packet_number_length(self) -> PacketNumberLength:
        return self._packet_number_length

    def has_connection_id(self) -> bool:
        return self.has_connection_id_flag

    def get_spin_bit(self) -> bool:
        return self.spin_bit

    def get_key_phase_bit(self) -> bool:
        return self.key_phase_bit

    def get_serialized_size(self) -> int:
        size = 1
        if self.has_connection_id():
            size += SHORT_HEADER_CONNECTION_ID_LENGTH
        return size + self.packet_number_length.width

    def _compare_key(self) -> tuple:
        return (
            self.spin_bit,
            self.key_phase_bit,
            self.packet_number_length,
            self.destination_connection_id,
            self.packet_number,
        )

    def type_to_string(self) -> str:
        return PACKET_NUMBER_LENGTH_NAMES[int(self.packet_number_length)]

    def describe(self) -> str:
        lines = [
            f"|{int(self.form)}|{int(self.has_connection_id_flag)}|"
            f"{int(self.key_phase_bit)}|{int(self.spin_bit)}|{self.type_to_string()}|"
        ]
        if self.has_connection_id():
            lines.append(f"|ConnectionID {self.destination_connection_id}|")
        lines.append(f"|PacketNumber {self.packet_number}|")
        return "\n".join(lines) + "\n"

    def __repr__(self):
        dcid = f"0x{self.destination_connection_id:x}" if self.has_connection_id() else None
        return (f"ShortHeader(dcid={dcid}, packet_number={self.packet_number}, "
                f"packet_number_length={self.packet_number_length.name}, "
                f"spin_bit={int(self.spin_bit)}, key_phase_bit={int(self.key_phase_bit)})")
