#!/usr/bin/env python3
"""
Send a MIDI Identity Request (Universal SysEx) and listen for replies.

Request:  F0 7E 7F 06 01 F7  (Universal Non-Realtime, Identity Request)
Reply:    F0 7E <dev> 06 02 <manufacturer> <family> <member> <revision> F7

Usage:
    python3 midi_tools/send_identity_request.py [--port "USB Midi Cable"] [--timeout 5]
"""

import argparse
import sys
import time

import mido

from cli.display.formatters import hex_bytes
from list_ports import find_port
from midimsg.context import ReceiverContext
from midimsg.errors import ParseError
from midimsg.message import SystemExclusive, encode
from midimsg.sysex.envelope import UniversalNonRealTime, parse_system_exclusive
from midimsg.sysex.manufacturer import ALL_CALL
from midimsg.sysex.universal import IdentityReply, IdentityRequest


def identity_request(device: int = ALL_CALL) -> bytes:
    return encode(SystemExclusive(UniversalNonRealTime(IdentityRequest(), device)))


def print_reply(envelope: UniversalNonRealTime) -> None:
    reply = envelope.msg
    print("\n  Identity Reply detected!")
    print(f"  Device number: {envelope.device}")
    print(f"  Manufacturer: {reply.id}")
    print(f"  Device family: 0x{reply.family:04X}")
    print(f"  Device member: 0x{reply.family_member:04X}")
    print(f"  Software revision: {'.'.join(str(b) for b in reply.software_revision)}")


def send_identity_request(port_name=None, timeout=5, device=ALL_CALL):
    """Send Identity Request and wait for replies."""
    in_port_name = find_port(mido.get_input_names(), port_name)
    out_port_name = find_port(mido.get_output_names(), port_name)

    if not in_port_name or not out_port_name:
        print("ERROR: No MIDI ports found.")
        print("       Connect your USB-MIDI interface and try again.")
        return False

    print(f"Input port:  {in_port_name}")
    print(f"Output port: {out_port_name}")
    print()

    request = identity_request(device)
    print(f"Sending Identity Request: {hex_bytes(request)}")
    print(f"Waiting {timeout}s for response...")
    print()

    replies = 0
    with mido.open_input(in_port_name) as inport:
        with mido.open_output(out_port_name) as outport:
            # Flush any pending messages
            for _ in inport.iter_pending():
                pass

            outport.send(mido.Message.from_bytes(request))

            start = time.time()
            while time.time() - start < timeout:
                msg = inport.poll()
                if msg is None:
                    time.sleep(0.01)
                    continue
                if msg.type != "sysex":
                    print(f"  Other: {msg}")
                    continue

                raw = bytes(msg.bytes())
                print(f"SysEx received: {hex_bytes(raw, 32)}")
                try:
                    envelope, _ = parse_system_exclusive(raw, ReceiverContext.default())
                except ParseError as e:
                    print(f"  Could not decode: {e.message}")
                    continue
                if isinstance(envelope, UniversalNonRealTime) and isinstance(envelope.msg, IdentityReply):
                    replies += 1
                    print_reply(envelope)

    if not replies:
        print("No Identity Reply received.")
        print()
        print("Troubleshooting:")
        print("  1. Is the device powered on?")
        print("  2. MIDI cables correct? (device OUT -> interface IN, device IN -> interface OUT)")
        print("  3. Does the device have SysEx reception enabled?")
        return False

    return True


def main():
    parser = argparse.ArgumentParser(description="Send MIDI Identity Request")
    parser.add_argument("--port", default=None, help="MIDI port name (default: auto-detect)")
    parser.add_argument("--timeout", type=int, default=5, help="Response timeout in seconds")
    parser.add_argument("--device", type=int, default=ALL_CALL, help="Device ID (127 = all)")
    args = parser.parse_args()

    print("=" * 60)
    print("MIDI Identity Probe")
    print("=" * 60)
    print()

    success = send_identity_request(args.port, args.timeout, args.device)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
