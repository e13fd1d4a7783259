"""
Tests for the QUIC header model: packet number length, classifier,
size calculation, accessors, equality and debug output.
"""

import pytest

from quic.errors import HeaderError, InvalidFieldAccess, UnassignedLongType, UnsupportedPacketNumberWidth
from quic.packets import (
    HeaderForm,
    LongHeader,
    LongPacketType,
    PacketNumberLength,
    QuicHeader,
    ShortHeader,
    create_handshake,
    create_initial,
    create_retry,
    create_short,
    create_version_negotiation,
    create_zero_rtt,
)


@pytest.mark.parametrize("packet_number, expected", [
    (0, PacketNumberLength.ONE),
    (255, PacketNumberLength.ONE),
    (256, PacketNumberLength.TWO),
    (65535, PacketNumberLength.TWO),
    (65536, PacketNumberLength.FOUR),
    (0xFFFFFFFF, PacketNumberLength.FOUR),
])
def test_packet_number_length_selection(packet_number, expected):
    header = ShortHeader(packet_number=packet_number)
    assert header.packet_number_length == expected


def test_packet_number_length_follows_reassignment():
    header = ShortHeader(packet_number=65536)
    assert header.packet_number_length == PacketNumberLength.FOUR

    header.packet_number = 7
    assert header.packet_number_length == PacketNumberLength.ONE


def test_explicit_packet_number_length_must_fit():
    header = ShortHeader()
    header.set_packet_number(5, PacketNumberLength.FOUR)
    assert header.packet_number_length == PacketNumberLength.FOUR

    with pytest.raises(HeaderError):
        header.set_packet_number(300, PacketNumberLength.ONE)


def test_packet_number_length_codes():
    assert [pn.width for pn in PacketNumberLength] == [1, 2, 4]
    assert PacketNumberLength.from_code(1) == PacketNumberLength.TWO
    with pytest.raises(UnsupportedPacketNumberWidth):
        PacketNumberLength.from_code(3)


def test_long_header_packet_number_is_four_bytes():
    header = create_initial(1, 1, 3)
    assert header.packet_number_length == PacketNumberLength.FOUR
    assert header.get_packet_number_length_bits() == 32


def test_packet_number_wraps_to_32_bits():
    header = create_handshake(1, 1, 0x1_0000_0002)
    assert header.packet_number == 2


def test_base_header_cannot_be_built():
    with pytest.raises(TypeError):
        QuicHeader()


# =============================================================================
# Classifier
# =============================================================================

def test_long_header_classifier():
    header = create_initial(0x42, 1, 0)

    assert header.form == HeaderForm.LONG
    assert header.is_long()
    assert not header.is_short()
    assert header.has_version()
    assert header.has_connection_id()
    assert not header.is_version_negotiation()
    assert header.is_initial()
    assert not header.is_handshake()


@pytest.mark.parametrize("factory, predicate", [
    (create_initial, "is_initial"),
    (create_zero_rtt, "is_zero_rtt"),
    (create_handshake, "is_handshake"),
    (create_retry, "is_retry"),
])
def test_long_type_predicates(factory, predicate):
    header = factory(1, 1, 1)
    predicates = ["is_initial", "is_zero_rtt", "is_handshake", "is_retry"]
    for name in predicates:
        assert getattr(header, name)() == (name == predicate)


def test_short_header_classifier():
    header = create_short(0x42, 1, True, False, False)

    assert header.form == HeaderForm.SHORT
    assert header.is_short()
    assert not header.has_version()
    assert header.has_connection_id()
    assert not header.is_version_negotiation()
    assert not header.is_initial()

    header = create_short(0x42, 1, False, False, False)
    assert not header.has_connection_id()


def test_assigning_connection_id_sets_flag_on_short_header():
    header = ShortHeader()
    assert not header.has_connection_id_flag

    header.destination_connection_id = 0x1234
    assert header.has_connection_id_flag
    assert header.get_connection_id() == 0x1234


def test_version_negotiation_classifier():
    header = create_version_negotiation(0x42, 0x00000001, [1])
    assert header.version == 0
    assert header.is_version_negotiation()
    assert header.long_type == LongPacketType.VERSION_NEGOTIATION


# =============================================================================
# Accessors
# =============================================================================

def test_long_header_accessors():
    header = create_initial(0x42, 0x00000001, 0)
    assert header.get_version() == 1
    assert header.get_connection_id() == 0x42

    with pytest.raises(InvalidFieldAccess):
        header.get_spin_bit()
    with pytest.raises(InvalidFieldAccess):
        header.get_key_phase_bit()


def test_short_header_accessors():
    header = create_short(0x42, 1, True, True, False)
    assert header.get_key_phase_bit() is True
    assert header.get_spin_bit() is False

    with pytest.raises(InvalidFieldAccess):
        header.get_version()


def test_short_header_without_connection_id_has_none_to_read():
    header = create_short(0x42, 1, False, False, False)
    with pytest.raises(InvalidFieldAccess):
        header.get_connection_id()


# =============================================================================
# Size
# =============================================================================

def test_short_header_size_without_connection_id():
    header = create_short(0, 1, False, False, False)
    assert header.get_serialized_size() == 2


@pytest.mark.parametrize("packet_number, expected", [
    (1, 1 + 8 + 1),
    (1000, 1 + 8 + 2),
    (100000, 1 + 8 + 4),
])
def test_short_header_size_with_connection_id(packet_number, expected):
    header = create_short(0xAABB, packet_number, True, False, False)
    assert header.get_serialized_size() == expected


def test_long_header_size_uses_length_fields():
    header = create_initial(0x42, 1, 5)
    assert header.get_serialized_size() == 1 + 4 + 1 + 8 + 1 + 8 + 4

    header.destination_connection_id_length = 1
    header.source_connection_id_length = 0
    assert header.get_serialized_size() == 1 + 4 + 1 + 1 + 1 + 0 + 4


def test_version_negotiation_size_excludes_packet_number():
    header = create_version_negotiation(0x42, 1, [])
    assert header.get_serialized_size() == 1 + 4 + 1 + 8 + 1 + 8

    header = create_version_negotiation(0x42, 1, [0x00000001, 0xff00001d])
    assert header.get_serialized_size() == 1 + 4 + 1 + 8 + 1 + 8 + 8


def test_unassigned_long_type_cannot_be_measured():
    header = LongHeader(version=1)
    assert header.long_type == LongPacketType.NONE
    with pytest.raises(UnassignedLongType):
        header.get_serialized_size()


# =============================================================================
# Equality
# =============================================================================

def test_equality_is_reflexive_and_symmetric():
    a = create_initial(0x42, 1, 5)
    b = create_initial(0x42, 1, 5)

    assert a == a
    assert a == b
    assert b == a


def test_headers_differing_in_packet_number_are_unequal():
    assert create_initial(0x42, 1, 5) != create_initial(0x42, 1, 6)
    assert create_short(0x42, 5, True, False, False) != create_short(0x42, 6, True, False, False)


def test_headers_of_different_form_are_unequal():
    long_header = create_initial(0, 1, 0)
    short_header = create_short(0, 0, True, False, False)
    assert long_header != short_header
    assert short_header != long_header


def test_short_equality_ignores_connection_id_flag():
    with_flag = ShortHeader(destination_connection_id=0, packet_number=1)
    without_flag = ShortHeader(packet_number=1)
    assert with_flag == without_flag


def test_long_equality_compares_type_and_scid():
    assert create_initial(1, 1, 1) != create_handshake(1, 1, 1)

    a = create_initial(1, 1, 1)
    b = create_initial(1, 1, 1)
    b.source_connection_id = 9
    assert a != b


def test_headers_are_not_hashable():
    with pytest.raises(TypeError):
        hash(create_initial(1, 1, 1))


# =============================================================================
# Debug output
# =============================================================================

def test_describe_long_header():
    header = create_initial(0x1122334455667788, 1, 5)
    assert str(header) == (
        "|1|Initial|\n"
        "|ConnectionID 1234605616436508552|\n"
        "|Version 1|\n"
        "|PacketNumber 5|\n"
    )


def test_describe_short_header():
    header = create_short(0xAABB, 100, True, False, True)
    assert header.describe() == (
        "|0|1|0|1|1 Octet|\n"
        "|ConnectionID 43707|\n"
        "|PacketNumber 100|\n"
    )


def test_describe_short_header_without_connection_id():
    header = create_short(0, 300, False, True, False)
    assert header.describe() == (
        "|0|0|1|0|2 Octets|\n"
        "|PacketNumber 300|\n"
    )


def test_describe_version_negotiation():
    header = create_version_negotiation(7, 1, [0x00000001])
    assert header.describe() == (
        "|1|Version Negotiation|\n"
        "|ConnectionID 7|\n"
        "|Version 0|\n"
        "|SupportedVersions 0x00000001|\n"
    )


def test_type_to_string():
    assert create_zero_rtt(1, 1, 1).type_to_string() == "0-RTT Protected"
    assert create_short(1, 70000, True, False, False).type_to_string() == "4 Octets"
    assert "packet_number=5" in repr(create_retry(1, 1, 5))
