#!/usr/bin/env python3
"""
Follow MIDI Time Code from an input port.

Quarter frame data bytes are collected in an eight slot buffer; once every
slot has been seen the full time code is printed, then again after every
complete cycle. Full time code SysEx messages are printed as they arrive.

Usage:
    python3 midi_tools/read_mtc.py [--port NAME] [--timeout 60]
"""

import argparse
import sys
import time

import mido

from list_ports import find_port
from midimsg.context import ReceiverContext
from midimsg.errors import ParseError
from midimsg.message import SystemExclusive, decode_with_context
from midimsg.sysex.envelope import UniversalRealTime
from midimsg.sysex.time_code import TimeCodeFull
from midimsg.time_code import time_code_from_quarter_frames

QUARTER_FRAME = 0xF1


def main():
    parser = argparse.ArgumentParser(description="Print incoming MIDI Time Code")
    parser.add_argument("--port", default=None, help="MIDI port name")
    parser.add_argument("--timeout", type=int, default=60, help="Listen duration in seconds")
    args = parser.parse_args()

    port_name = find_port(mido.get_input_names(), args.port)
    if port_name is None:
        print("ERROR: No MIDI input ports found.")
        return 1

    print(f"Listening for MTC on {port_name} for {args.timeout}s")

    context = ReceiverContext.default()
    pieces = [None] * 8
    with mido.open_input(port_name) as inport:
        start = time.time()
        while time.time() - start < args.timeout:
            msg = inport.poll()
            if msg is None:
                time.sleep(0.001)
                continue

            data = bytes(msg.bytes())
            if data[0] == QUARTER_FRAME and len(data) > 1:
                nibble = data[1]
                index = (nibble >> 4) & 0x07
                pieces[index] = nibble
                # A full cycle ends with the hours piece
                if index == 7:
                    time_code = time_code_from_quarter_frames(pieces)
                    if time_code is not None:
                        print(f"MTC  {time_code}  ({time_code.code_type.name})")
                continue

            if msg.type != "sysex":
                continue
            try:
                decoded, _ = decode_with_context(data, context)
            except ParseError as e:
                print(f"Could not decode SysEx: {e.message}")
                continue
            if (
                isinstance(decoded, SystemExclusive)
                and isinstance(decoded.msg, UniversalRealTime)
                and isinstance(decoded.msg.msg, TimeCodeFull)
            ):
                pieces = [None] * 8
                print(f"FULL {decoded.msg.msg.time_code}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
