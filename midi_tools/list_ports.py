#!/usr/bin/env python3
"""
List available MIDI ports.

Needs a mido backend (pip install midimsg[ports]).

Usage:
    python3 midi_tools/list_ports.py
"""

import sys

import mido


def find_port(names, port_name=None):
    """
    Pick a port by exact or partial name, or the first USB/MIDI one.

    Returns None when `names` is empty or nothing matches `port_name`.
    """
    if not names:
        return None

    if port_name:
        if port_name in names:
            return port_name
        matches = [n for n in names if port_name.lower() in n.lower()]
        return matches[0] if matches else None

    for n in names:
        if "midi" in n.lower() or "usb" in n.lower():
            return n
    return names[0]


def main():
    print("=" * 60)
    print("MIDI Port Scanner")
    print("=" * 60)

    inputs = mido.get_input_names()
    outputs = mido.get_output_names()

    print(f"\nInput ports ({len(inputs)}):")
    if inputs:
        for i, name in enumerate(inputs):
            print(f"  [{i}] {name}")
    else:
        print("  (none found)")

    print(f"\nOutput ports ({len(outputs)}):")
    if outputs:
        for i, name in enumerate(outputs):
            print(f"  [{i}] {name}")
    else:
        print("  (none found)")

    default_in = find_port(inputs)
    if default_in:
        print(f"\n>>> Default input for the other tools: '{default_in}'")
    else:
        print("\n>>> No MIDI input found. Connect an interface and try again.")

    return 0 if (inputs and outputs) else 1


if __name__ == "__main__":
    sys.exit(main())
