"""
QUIC Header Constants (RFC 9000 Section 17)
"""

# QUIC Version 1
QUIC_VERSION = 0x00000001

# Version field value reserved for Version Negotiation packets
VERSION_NEGOTIATION_VERSION = 0x00000000

# QUIC Long Header Packet Types (2-bit wire codes)
PACKET_TYPE_INITIAL = 0
PACKET_TYPE_0RTT = 1
PACKET_TYPE_HANDSHAKE = 2
PACKET_TYPE_RETRY = 3

PACKET_TYPE_NAMES = {
    0: "Initial",
    1: "0-RTT Protected",
    2: "Handshake",
    3: "Retry",
    4: "Version Negotiation",
    5: "None"
}

# Short header packet number widths, indexed by the 2-bit PP code
PACKET_NUMBER_LENGTH_NAMES = {
    0: "1 Octet",
    1: "2 Octets",
    2: "4 Octets"
}

# =============================================================================
# First byte layout
# =============================================================================
# Long:  1 F TT XXXX
# Short: 0 F S RR K PP

HEADER_FORM_BIT = 0x80
FIXED_BIT = 0x40
LONG_PACKET_TYPE_MASK = 0x30
SPIN_BIT = 0x20
KEY_PHASE_BIT = 0x04
PACKET_NUMBER_LENGTH_MASK = 0x03

# =============================================================================
# Field widths
# =============================================================================
# Connection IDs are carried as 64-bit integers. On long headers the length
# field says how many of those bytes go on the wire.

DEFAULT_CONNECTION_ID_LENGTH = 8  # bytes
MAX_CONNECTION_ID_LENGTH = 8  # bytes
SHORT_HEADER_CONNECTION_ID_LENGTH = 8  # bytes, fixed, not announced on the wire

LONG_HEADER_PACKET_NUMBER_LENGTH = 4  # bytes
VERSION_LENGTH = 4  # bytes

MAX_PACKET_NUMBER = 0xFFFFFFFF  # 32-bit sequence number space
