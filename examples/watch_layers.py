#!/usr/bin/env python3
"""
Layer Watch Script.

Connects to the keyboard's raw HID interface and prints every layer
change until Ctrl+C. Unplug and replug the keyboard to see reconnects.

Usage:
  python examples/watch_layers.py
  python examples/watch_layers.py --vid 0x5957 --pid 0x0200
  python examples/watch_layers.py --list
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from layerlink import DeviceTarget, LayerWatcher, TargetSettings
from layerlink.device import ConnectionState, is_matching_device
from layerlink.transport import HidapiBackend


def hex_int(value):
    return int(value, 0)


def list_devices(target):
    devices = HidapiBackend().enumerate()
    if not devices:
        print("No HID devices found.")
        return

    print(f"Found {len(devices)} HID interface(s):\n")
    for dev in devices:
        marker = "*" if is_matching_device(dev, target) else " "
        usage = (f"usage_page=0x{dev.usage_page:04X} usage=0x{dev.usage:02X}"
                 if dev.usage_known else "usage=N/A")
        print(f" {marker} {dev.vendor_id:04X}:{dev.product_id:04X} {usage} "
              f"iface={dev.interface_number} {dev.product or 'Unknown'}")
        print(f"      path: {dev.display_path}")


def main():
    defaults = DeviceTarget.default()
    parser = argparse.ArgumentParser(description="Print keyboard layer changes")
    parser.add_argument("--vid", type=hex_int, default=defaults.vendor_id)
    parser.add_argument("--pid", type=hex_int, default=defaults.product_id)
    parser.add_argument("--usage-page", type=hex_int, default=defaults.usage_page)
    parser.add_argument("--usage", type=hex_int, default=defaults.usage)
    parser.add_argument("--list", action="store_true", help="list HID devices and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    target = DeviceTarget(
        vendor_id=args.vid,
        product_id=args.pid,
        usage_page=args.usage_page,
        usage=args.usage,
    )

    if args.list:
        list_devices(target)
        return

    settings = TargetSettings(target)

    def on_state(state, device):
        if state is ConnectionState.CONNECTED:
            print(f"Connected: {device.product or device.display_path}")
        else:
            print("Disconnected, waiting for keyboard...")

    watcher = LayerWatcher(settings, status_sink=print)
    watcher.subscribe_state(on_state)

    print(f"Watching for {target.describe()} (Ctrl+C to stop)...")
    try:
        with watcher:
            while True:
                time.sleep(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    print("Done.")


if __name__ == "__main__":
    main()
