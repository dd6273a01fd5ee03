#!/usr/bin/env python3
"""
Unit Test: Payload Decoding

Tests parsing received gateway JSON back into records, including the
golden fixtures and malformed input.
"""

import sys
import os
from datetime import datetime, timezone

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from packet_forwarder import (
    Datarate, DecodeError, Payload, RXPK, TXPK, TimeLayout, decode, encode
)
from packet_forwarder.samples import SAMPLES

TEST_DATA = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'test_data'))


def read_fixture(name: str) -> bytes:
    with open(os.path.join(TEST_DATA, name), 'rb') as f:
        return f.read()


def test_decode_golden_rxpk_stat():
    """Test decoding the combined uplink/status fixture"""
    print("Testing decode of marshal_rxpk_stat...")

    payload = decode(read_fixture('marshal_rxpk_stat'))
    assert payload.txpk is None
    assert len(payload.rxpk) == 2

    lora, fsk = payload.rxpk
    assert lora.chan == 2 and lora.rfch is None
    assert lora.datr == Datarate.identifier('SF7BW125')
    assert lora.freq == 866.349812
    assert lora.rssi == -35 and lora.lsnr == 5.1
    assert lora.crc_ok
    assert lora.tmst == 3512348611
    assert lora.time.instant == datetime(2013, 3, 31, 16, 21, 17, 528002, tzinfo=timezone.utc)
    assert lora.time.layout is TimeLayout.RFC3339_NANO

    assert fsk.datr == Datarate.numeric(50000)
    assert fsk.modu == 'FSK' and fsk.rfch == 1

    stat = payload.stat
    assert stat.ackr == 100.0 and isinstance(stat.ackr, float), "Float fields accept integer tokens"
    assert stat.alti == 145
    assert stat.time.instant == datetime(2014, 1, 12, 8, 59, 28, tzinfo=timezone.utc)
    assert stat.time.layout is TimeLayout.EXPANDED

    print("  ✓ All fields recovered")


def test_golden_reencode():
    """Test decoding then encoding reproduces every fixture exactly"""
    print("\nTesting fixture decode/encode...")

    for name in SAMPLES:
        raw = read_fixture(name)
        again = encode(decode(raw))
        assert again == raw, f"{name} changed after re-encoding: {again}"
        print(f"  ✓ {name}")


def test_decoded_equals_sample():
    """Test decoded fixtures equal the sample records"""
    print("\nTesting decoded records against samples...")

    for name, (label, build) in SAMPLES.items():
        decoded = decode(read_fixture(name))
        expected = decode(build().serialize())
        assert decoded == expected, f"{name} decoded differently"
    print("  ✓ Decoded records match")


def test_zero_sentinel_not_recoverable():
    """Test zero values dropped on the wire come back as absent"""
    print("\nTesting zero-value round trip...")

    payload = Payload(txpk=TXPK(imme=False, rfch=0, powe=14))

    default = decode(payload.serialize())
    assert default.txpk.imme is None and default.txpk.rfch is None
    assert default.txpk.powe == 14

    explicit = decode(payload.serialize(omit_zero=False))
    assert explicit.txpk.imme is False and explicit.txpk.rfch == 0

    print("  ✓ Zero values only survive with omit_zero=False")


def test_offset_time_roundtrip():
    """Test a non-UTC timestamp is re-encoded unchanged"""
    print("\nTesting offset timestamp...")

    raw = b'{"txpk":{"time":"2013-03-31T18:21:17.5+02:00"}}'
    payload = decode(raw)
    assert payload.txpk.time.instant == datetime(2013, 3, 31, 16, 21, 17, 500000, tzinfo=timezone.utc)
    assert encode(payload) == raw

    print("  ✓ Offset preserved")


def test_lenient_input():
    """Test unknown keys and nulls are ignored, text input accepted"""
    print("\nTesting lenient decoding...")

    payload = decode('{"rxpk":[{"chan":3,"tmms":1000,"brd":0,"rssi":null}],"foo":1}')
    assert payload.rxpk == [RXPK(chan=3)]
    assert payload.stat is None

    assert decode(b'{}') == Payload()
    assert decode(b' {"rxpk":[]} ') == Payload(rxpk=[])

    print("  ✓ Unknown keys and nulls skipped")


def test_malformed_input():
    """Test malformed payloads raise DecodeError"""
    print("\nTesting malformed payloads...")

    bad_payloads = [
        b'',
        b'{"rxpk":',
        b'\xff\xfe',
        b'[]',
        b'{"rxpk":{}}',
        b'{"rxpk":[1]}',
        b'{"stat":[]}',
        b'{"rxpk":[{"size":-16}]}',
        b'{"rxpk":[{"tmst":4294967296}]}',
        b'{"rxpk":[{"rssi":-35.5}]}',
        b'{"rxpk":[{"chan":true}]}',
        b'{"rxpk":[{"freq":"868.1"}]}',
        b'{"rxpk":[{"datr":1.5}]}',
        b'{"rxpk":[{"datr":""}]}',
        b'{"rxpk":[{"datr":-1}]}',
        b'{"rxpk":[{"time":"yesterday"}]}',
        b'{"rxpk":[{"time":1364746877}]}',
        b'{"txpk":{"imme":1}}',
        b'{"rxpk":[{"freq":1' + b'0' * 400 + b'}]}',
        b'{"rxpk":[{"lsnr":NaN}]}',
        b'{"stat":{"lati":Infinity}}',
        b'{"stat":{"long":-Infinity}}',
        b'{"txpk":{"freq":1e400}}',
        b'[' * 100000 + b']' * 100000,
    ]
    for raw in bad_payloads:
        with pytest.raises(DecodeError):
            decode(raw)

    print(f"  ✓ {len(bad_payloads)} payloads rejected")


def test_error_reports_field_path():
    """Test decode errors name the offending field"""
    print("\nTesting decode error paths...")

    with pytest.raises(DecodeError, match=r'rxpk\[1\]\.size'):
        decode(b'{"rxpk":[{"size":1},{"size":-1}]}')

    print("  ✓ Error message carries the field path")


def test_deserialize_returns_none():
    """Test Payload.deserialize logs and returns None on failure"""
    print("\nTesting Payload.deserialize...")

    assert Payload.deserialize(b'not json') is None
    assert Payload.deserialize(b'{"stat":{"rxnb":-1}}') is None
    assert Payload.deserialize(b'{"stat":{"lati":1' + b'0' * 400 + b'}}') is None
    assert Payload.deserialize(b'{"rxpk":[{"lsnr":NaN}]}') is None

    payload = Payload.deserialize(read_fixture('marshal_txpk'))
    assert payload is not None and payload.txpk.imme is True

    print("  ✓ Invalid payloads -> None")


def main():
    """Run all decoding tests"""
    print("=" * 60)
    print("PAYLOAD DECODING TESTS")
    print("=" * 60)

    tests = [
        test_decode_golden_rxpk_stat,
        test_golden_reencode,
        test_decoded_equals_sample,
        test_zero_sentinel_not_recoverable,
        test_offset_time_roundtrip,
        test_lenient_input,
        test_malformed_input,
        test_error_reports_field_path,
        test_deserialize_returns_none,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  ✗ FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"  ✗ ERROR: {e}")
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
