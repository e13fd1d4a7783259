#!/usr/bin/env python3
"""
QUIC Header Tool - Main Entry Point

Encodes QUIC packet headers to hex and decodes hex back into headers.
Supports:
- Initial, 0-RTT, Handshake and Retry long headers
- Version Negotiation headers with a supported versions list
- Short (1-RTT) headers with 1, 2 or 4 byte packet numbers

Usage:
    python main.py encode <type> [options]
    python main.py decode <hex> [options]

Examples:
    # Initial header
    python main.py encode initial --dcid 0x1122334455667788 --pn 5

    # Short header without a connection ID
    python main.py encode short --pn 300 --no-cid --spin

    # Version Negotiation header
    python main.py encode vn --dcid 0x01 --versions 0x00000001 0xff00001d

    # Decode
    python main.py decode c00000000108112233445566778808000000000000000000000005
    python main.py decode 60000000000000aabb64
"""

import argparse
import sys

from quic.constants import QUIC_VERSION
from quic.errors import HeaderError
from quic.packets import (
    create_initial,
    create_zero_rtt,
    create_handshake,
    create_retry,
    create_short,
    create_version_negotiation,
    encode_header,
    parse_header,
)


LONG_FACTORIES = {
    "initial": create_initial,
    "0rtt": create_zero_rtt,
    "handshake": create_handshake,
    "retry": create_retry,
}


def int_arg(value: str) -> int:
    """Accept decimal or 0x-prefixed hex."""
    return int(value, 0)


def build_header(args):
    """Build a header from parsed command line arguments."""
    if args.type in LONG_FACTORIES:
        header = LONG_FACTORIES[args.type](args.dcid, args.version, args.pn)
        header.source_connection_id = args.scid
        return header
    if args.type == "vn":
        return create_version_negotiation(args.dcid, args.version, args.versions)
    return create_short(args.dcid, args.pn, not args.no_cid,
                        key_phase_bit=args.key_phase, spin_bit=args.spin)


def cmd_encode(args) -> int:
    header = build_header(args)
    data = encode_header(header, debug=args.debug)

    print(header.describe(), end="")
    print(f"Header ({len(data)} bytes): {data.hex()}")
    return 0


def cmd_decode(args) -> int:
    try:
        packet = bytes.fromhex(args.hex)
    except ValueError as e:
        print(f"❌ Invalid hex: {e}")
        return 1

    result = parse_header(packet, connection_id_present=not args.no_cid, debug=args.debug)

    if not result["success"]:
        print(f"❌ Error: {result['error']}")
        return 1

    print(result["header"].describe(), end="")
    print(f"Header length: {result['length']} bytes")
    if result["length"] < len(packet):
        print(f"Remaining payload: {len(packet) - result['length']} bytes")
    return 0


def main(argv=None) -> int:
    """Main function"""
    parser = argparse.ArgumentParser(
        description="QUIC Header Tool - encode and decode QUIC packet headers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if "Examples:" in __doc__ else None
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Disable debug output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Encode a header and print it as hex")
    encode.add_argument(
        "type",
        choices=sorted(LONG_FACTORIES) + ["short", "vn"],
        help="Header type"
    )
    encode.add_argument(
        "--dcid",
        type=int_arg,
        default=0,
        help="Destination Connection ID (default: 0)"
    )
    encode.add_argument(
        "--scid",
        type=int_arg,
        default=0,
        help="Source Connection ID, long headers only (default: 0)"
    )
    encode.add_argument(
        "--version",
        type=int_arg,
        default=QUIC_VERSION,
        help=f"QUIC version (default: 0x{QUIC_VERSION:08x})"
    )
    encode.add_argument(
        "--pn",
        type=int_arg,
        default=0,
        help="Packet number (default: 0)"
    )
    encode.add_argument(
        "--versions",
        type=int_arg,
        nargs="*",
        default=[QUIC_VERSION],
        help="Supported versions for Version Negotiation"
    )
    encode.add_argument(
        "--no-cid",
        action="store_true",
        help="Short header without connection ID"
    )
    encode.add_argument(
        "--spin",
        action="store_true",
        help="Set the spin bit (short header)"
    )
    encode.add_argument(
        "--key-phase",
        action="store_true",
        help="Set the key phase bit (short header)"
    )
    encode.set_defaults(func=cmd_encode)

    decode = subparsers.add_parser("decode", help="Decode a hex header")
    decode.add_argument(
        "hex",
        help="Header bytes as hex"
    )
    decode.add_argument(
        "--no-cid",
        action="store_true",
        help="Short headers carry no connection ID"
    )
    decode.set_defaults(func=cmd_decode)

    args = parser.parse_args(argv)
    args.debug = not args.quiet

    try:
        return args.func(args)
    except HeaderError as e:
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
