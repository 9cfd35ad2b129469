#!/usr/bin/env python3
"""
MIDI Monitor - print incoming MIDI decoded by midimsg.

mido delivers complete messages; their bytes are fed through one
ReceiverContext, so running status, 14-bit controllers, RPN/NRPN sequences
and the MTC time code are tracked like on a real receiver.

Usage:
    python3 midi_tools/monitor.py [--port NAME] [--timeout 30] [--raw-cc]
"""

import argparse
import sys
import time

import mido

from cli.display.formatters import describe, hex_bytes
from list_ports import find_port
from midimsg.context import ReceiverContext
from midimsg.errors import ParseError
from midimsg.message import SystemRealTime, iter_decode
from midimsg.system_real_time import SystemRealTimeMsg

# Shown once, then only counted
NOISY = {SystemRealTimeMsg.TIMING_CLOCK, SystemRealTimeMsg.ACTIVE_SENSING}


def main():
    parser = argparse.ArgumentParser(description="Monitor incoming MIDI data")
    parser.add_argument("--port", default=None, help="MIDI port name")
    parser.add_argument("--timeout", type=int, default=30, help="Listen duration in seconds")
    parser.add_argument("--raw-cc", action="store_true", help="Do not pair controllers")
    args = parser.parse_args()

    port_name = find_port(mido.get_input_names(), args.port)
    if port_name is None:
        print("ERROR: No MIDI input ports found.")
        return 1

    print("=" * 60)
    print("MIDI Monitor")
    print("=" * 60)
    print(f"Port: {port_name}")
    print(f"Duration: {args.timeout}s")
    print("-" * 60)

    context = ReceiverContext.default().with_complex_cc(not args.raw_cc)
    count = 0
    seen_noisy = set()
    with mido.open_input(port_name) as inport:
        # Flush
        for _ in inport.iter_pending():
            pass

        start = time.time()
        while time.time() - start < args.timeout:
            msg = inport.poll()
            if msg is None:
                time.sleep(0.002)
                continue
            data = bytes(msg.bytes())
            elapsed = time.time() - start
            try:
                for decoded, offset, consumed in iter_decode(data, context):
                    count += 1
                    if isinstance(decoded, SystemRealTime) and decoded.msg in NOISY:
                        if decoded.msg in seen_noisy:
                            continue
                        seen_noisy.add(decoded.msg)
                    raw = hex_bytes(data[offset : offset + consumed], 8)
                    print(f"[{elapsed:6.2f}s] #{count:4d} {raw:<24} {describe(decoded)}")
            except ParseError as e:
                print(f"[{elapsed:6.2f}s] Could not decode {hex_bytes(data, 16)}: {e.message}")

    print("-" * 60)
    print(f"Total messages received: {count}")
    return 0 if count > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
