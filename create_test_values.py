#!/usr/bin/env python3
"""
Gateway Payload Fixture Generator

Encodes the sample gateway payloads (status, uplink batch, uplink batch
plus status, downlink) and writes the raw bytes as golden fixtures.
Each payload is also printed as text and as a hex dump.

Usage:
    python create_test_values.py
    python create_test_values.py --output-dir ./test_data --only marshal_txpk
    FIXTURE_DIR=/tmp/fixtures python create_test_values.py --quiet
"""

import argparse
import logging
import logging.handlers
import os
import sys
from dotenv import load_dotenv

load_dotenv()

from packet_forwarder.config import (
    DEBUG, LOG_DIR, LOG_FILENAME, MAX_LOG_SIZE, BACKUP_COUNT, FIXTURE_DIR
)
from packet_forwarder.samples import SAMPLES, hex_dump


def setup_logging():
    """Attach the rotating log file handler to the root logger, once per log file"""
    log_path = os.path.abspath(f'{LOG_DIR}/{LOG_FILENAME}')
    for existing in logging.getLogger().handlers:
        if getattr(existing, 'baseFilename', None) == log_path:
            return existing

    try:
        handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT
        )
        log_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
        handler.setFormatter(log_formatter)
        logging.getLogger().addHandler(handler)
        logging.getLogger().setLevel(logging.DEBUG if DEBUG else logging.INFO)
        return handler
    except OSError as e:
        print(f'Error creating log object: {e}')
        return None


def print_raw(label: str, raw: bytes):
    """Print payload text followed by its hex dump"""
    print(f"{label}:       {raw.decode('utf-8')}")
    print(f"Raw {label}:      {hex_dump(raw)}")
    print("\n\n")


def write_fixture(output_dir: str, name: str, raw: bytes) -> str:
    """Write raw payload bytes to output_dir/name, returns the path"""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, name)
    with open(path, 'wb') as f:
        f.write(raw)
    os.chmod(path, 0o644)
    return path


def generate(output_dir: str, names=None, quiet: bool = False) -> list:
    """
    Encode and write the selected samples

    Args:
        output_dir: Directory receiving the fixture files
        names: Sample names to generate (all when None)
        quiet: Skip the text/hex dump output

    Returns:
        List of written file paths

    Raises:
        KeyError: unknown sample name
        OSError: a fixture file could not be written
    """
    selected = names or list(SAMPLES)
    written = []

    for name in selected:
        label, build = SAMPLES[name]
        raw = build().serialize()

        if not quiet:
            print_raw(label, raw)

        path = write_fixture(output_dir, name, raw)
        logging.info(f"Wrote {name}: {len(raw)} bytes -> {path}")
        written.append(path)

    return written


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate gateway payload golden fixtures')
    parser.add_argument('--output-dir', default=FIXTURE_DIR,
                        help=f'Directory for fixture files (default: {FIXTURE_DIR})')
    parser.add_argument('--only', action='append', choices=list(SAMPLES), metavar='NAME',
                        help='Generate only this sample (repeatable)')
    parser.add_argument('--quiet', action='store_true', help='Do not print payloads')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()

    logging.info(f"Generating fixtures in {args.output_dir}")
    try:
        generate(args.output_dir, args.only, args.quiet)
    except OSError as e:
        logging.error(f"Failed to write fixture: {e}")
        print(f"Failed to write fixture: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
