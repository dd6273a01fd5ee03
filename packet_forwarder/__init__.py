"""
Gateway Protocol Message Package

JSON codec for the messages exchanged between a LoRa packet forwarder
and a network server:
- RXPK uplink reports, Stat gateway status, TXPK downlink instructions
- Payload envelope carrying any combination of them
- Zero-value omission on encode (omit_zero)
- Datarate (number or identifier) and Time (layout-driven) value types
"""

from packet_forwarder.field_types import Datarate, DatarateKind, Time, TimeLayout
from packet_forwarder.codec import EncodeError, DecodeError
from packet_forwarder.messages import Stat, RXPK, TXPK, Payload, encode, decode

__all__ = [
    'Datarate',
    'DatarateKind',
    'Time',
    'TimeLayout',
    'EncodeError',
    'DecodeError',
    'Stat',
    'RXPK',
    'TXPK',
    'Payload',
    'encode',
    'decode',
]
