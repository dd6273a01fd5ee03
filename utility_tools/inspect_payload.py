#!/usr/bin/env python3
"""
Gateway Payload Inspector

Decodes stored gateway JSON payloads (e.g. the golden fixtures) and prints
a readable summary of the uplink packets, gateway status and downlink.

Usage:
    python utility_tools/inspect_payload.py test_data/marshal_rxpk_stat
    python utility_tools/inspect_payload.py test_data/*
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from packet_forwarder import Payload

CRC_STATUS = {1: 'OK', -1: 'FAIL', 0: 'NO CRC'}


def summarize(payload: Payload) -> list:
    """Summary lines for one decoded payload"""
    lines = []

    if payload.rxpk is not None:
        lines.append(f"Uplink packets: {len(payload.rxpk)}")
        for index, rx in enumerate(payload.rxpk):
            lines.append(f"  [{index}] {rx.modu or '?'} @ {rx.freq or 0:.6f} MHz, datr={rx.datr}")
            lines.append(f"      RSSI: {rx.rssi} dBm, SNR: {rx.lsnr} dB, "
                         f"CRC: {CRC_STATUS.get(rx.stat or 0, rx.stat)}")
            lines.append(f"      Size: {rx.size} bytes, tmst: {rx.tmst}, time: {rx.time}")

    if payload.stat is not None:
        stat = payload.stat
        lines.append("Gateway status:")
        lines.append(f"  Time: {stat.time}")
        lines.append(f"  Position: lat={stat.lati} long={stat.long} alt={stat.alti}")
        lines.append(f"  Packets received: {stat.rxnb}, valid: {stat.rxok}, forwarded: {stat.rxfw}")
        lines.append(f"  Acknowledged upstream: {stat.ackr}%")
        lines.append(f"  Downlink received: {stat.dwnb}, emitted: {stat.txnb}")

    if payload.txpk is not None:
        tx = payload.txpk
        when = 'immediately' if tx.imme else f"tmst={tx.tmst} time={tx.time}"
        lines.append(f"Downlink: {tx.modu or '?'} @ {tx.freq or 0:.6f} MHz, datr={tx.datr}, "
                     f"power={tx.powe} dBm, {when}")

    if not lines:
        lines.append("Empty payload")
    return lines


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Decode and summarize gateway payload files')
    parser.add_argument('paths', nargs='+', help='Files holding raw JSON payloads')
    args = parser.parse_args(argv)

    failed = 0
    for path in args.paths:
        with open(path, 'rb') as f:
            raw = f.read()

        print(f"=== {path} ({len(raw)} bytes)")
        payload = Payload.deserialize(raw)
        if payload is None:
            print("  ✗ Could not decode payload")
            failed += 1
            continue

        for line in summarize(payload):
            print(line)
        print()

    if failed:
        logging.error(f"{failed} of {len(args.paths)} payloads failed to decode")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
