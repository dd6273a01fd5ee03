"""
Gateway Message Records

JSON message formats exchanged between a LoRa packet forwarder and the
network server:
- RXPK: uplink radio packet reported by the gateway
- Stat: periodic gateway status report
- TXPK: downlink packet the gateway is asked to transmit
- Payload: the envelope carrying any of the above

Every field defaults to None (not set). Field order is the wire order.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

from packet_forwarder.codec import (
    BOOL, DATARATE, FLOAT, INT, RECORD, RECORD_LIST, STRING, TIME, UINT,
    DecodeError, EncodeError, decode_record, encode_record, wire,
)
from packet_forwarder.field_types import Datarate, Time


@dataclass
class Stat:
    """Gateway status snapshot"""

    ackr: Optional[float] = wire('ackr', FLOAT)     # % of upstream datagrams acknowledged
    alti: Optional[int] = wire('alti', INT)         # GPS altitude in meters
    dwnb: Optional[int] = wire('dwnb', UINT)        # Downlink datagrams received
    lati: Optional[float] = wire('lati', FLOAT)     # GPS latitude, N is +
    long: Optional[float] = wire('long', FLOAT)     # GPS longitude, E is +
    rxfw: Optional[int] = wire('rxfw', UINT)        # Radio packets forwarded
    rxnb: Optional[int] = wire('rxnb', UINT)        # Radio packets received
    rxok: Optional[int] = wire('rxok', UINT)        # Radio packets received with valid CRC
    time: Optional[Time] = wire('time', TIME)       # Gateway system time, "expanded" layout
    txnb: Optional[int] = wire('txnb', UINT)        # Packets emitted


@dataclass
class RXPK:
    """Radio packet received by the gateway"""

    chan: Optional[int] = wire('chan', UINT)            # Concentrator IF channel
    codr: Optional[str] = wire('codr', STRING)          # LoRa coding rate, e.g. "4/6"
    data: Optional[str] = wire('data', STRING)          # Base64 RF payload
    datr: Optional[Datarate] = wire('datr', DATARATE)
    freq: Optional[float] = wire('freq', FLOAT)         # Center frequency, MHz
    lsnr: Optional[float] = wire('lsnr', FLOAT)         # LoRa SNR, dB
    modu: Optional[str] = wire('modu', STRING)          # "LORA" or "FSK"
    rfch: Optional[int] = wire('rfch', UINT)            # Concentrator RF chain
    rssi: Optional[int] = wire('rssi', INT)             # dBm
    size: Optional[int] = wire('size', UINT)            # Payload size in bytes
    stat: Optional[int] = wire('stat', INT)             # CRC: 1 ok, -1 fail, 0 none
    time: Optional[Time] = wire('time', TIME)           # RX time, "compact" layout
    tmst: Optional[int] = wire('tmst', UINT, bits=32)   # Internal "RX finished" timestamp

    @property
    def crc_ok(self) -> bool:
        return self.stat == 1


@dataclass
class TXPK:
    """Packet the gateway is asked to transmit"""

    codr: Optional[str] = wire('codr', STRING)
    data: Optional[str] = wire('data', STRING)
    datr: Optional[Datarate] = wire('datr', DATARATE)
    fdev: Optional[int] = wire('fdev', UINT)            # FSK frequency deviation, Hz
    freq: Optional[float] = wire('freq', FLOAT)
    imme: Optional[bool] = wire('imme', BOOL)           # Send immediately, ignores tmst/time
    ipol: Optional[bool] = wire('ipol', BOOL)           # LoRa polarization inversion
    modu: Optional[str] = wire('modu', STRING)
    ncrc: Optional[bool] = wire('ncrc', BOOL)           # Disable physical layer CRC
    powe: Optional[int] = wire('powe', UINT)            # TX power, dBm
    prea: Optional[int] = wire('prea', UINT)            # Preamble size
    rfch: Optional[int] = wire('rfch', UINT)
    size: Optional[int] = wire('size', UINT)
    time: Optional[Time] = wire('time', TIME)           # Send at time (needs GPS)
    tmst: Optional[int] = wire('tmst', UINT, bits=32)   # Send at internal timestamp


@dataclass
class Payload:
    """Envelope holding an uplink batch, a status report and/or a downlink"""

    rxpk: Optional[List[RXPK]] = wire('rxpk', RECORD_LIST, record=RXPK)
    stat: Optional[Stat] = wire('stat', RECORD, record=Stat)
    txpk: Optional[TXPK] = wire('txpk', RECORD, record=TXPK)

    def serialize(self, omit_zero: bool = True) -> bytes:
        """Convert payload to JSON bytes for transmission"""
        return encode(self, omit_zero=omit_zero)

    @classmethod
    def deserialize(cls, data) -> Optional['Payload']:
        """Parse received JSON into a Payload, None if it is malformed"""
        try:
            return decode(data)
        except DecodeError as e:
            logging.error(f"Failed to decode payload: {e}")
            return None

    def __str__(self) -> str:
        """String representation for logging"""
        parts = []
        if self.rxpk is not None:
            parts.append(f"rxpk={len(self.rxpk)}")
        if self.stat is not None:
            parts.append("stat")
        if self.txpk is not None:
            parts.append("txpk")
        return f"Payload({', '.join(parts)})"


def encode(payload: Payload, omit_zero: bool = True) -> bytes:
    """
    Encode an envelope to the JSON bytes sent on the wire

    Raises:
        EncodeError: a field holds a value its wire type cannot carry
    """
    if not isinstance(payload, Payload):
        raise EncodeError(f"Expected a Payload, got {type(payload).__name__}")
    return encode_record(payload, omit_zero=omit_zero)


def decode(data) -> Payload:
    """
    Decode received JSON bytes (or text) into an envelope

    Raises:
        DecodeError: data is not valid JSON or does not match the message schema
    """
    return decode_record(Payload, data)
