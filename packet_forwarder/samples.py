"""
Sample Gateway Payloads

Builds the canonical sample envelopes used as golden fixtures:
status only, uplink batch, uplink batch plus status, and downlink only.
Every builder is pure and returns a fresh Payload.
"""

from datetime import datetime, timezone

from packet_forwarder.field_types import Datarate, Time, TimeLayout
from packet_forwarder.messages import Payload, RXPK, Stat, TXPK


def sample_rxpks() -> list:
    """One LoRa and one FSK uplink packet"""
    return [
        RXPK(
            time=Time(datetime(2013, 3, 31, 16, 21, 17, 528002, tzinfo=timezone.utc),
                      TimeLayout.RFC3339_NANO),
            tmst=3512348611,
            chan=2,
            rfch=0,
            freq=866.349812,
            stat=1,
            modu='LORA',
            datr=Datarate.identifier('SF7BW125'),
            codr='4/6',
            rssi=-35,
            lsnr=5.1,
            size=32,
            data='-DS4CGaDCdG+48eJNM3Vai-zDpsR71Pn9CPA9uCON84',
        ),
        RXPK(
            chan=9,
            data='VEVTVF9QQUNLRVRfMTIzNA==',
            datr=Datarate.numeric(50000),
            freq=869.1,
            modu='FSK',
            rfch=1,
            rssi=-75,
            size=16,
            stat=1,
            time=Time(datetime(2013, 3, 31, 16, 21, 17, 530974, tzinfo=timezone.utc),
                      TimeLayout.RFC3339_NANO),
            tmst=3512348514,
        ),
    ]


def sample_stat() -> Stat:
    return Stat(
        ackr=100.0,
        alti=145,
        long=3.25230,
        rxok=2,
        rxfw=2,
        rxnb=2,
        lati=46.24,
        dwnb=2,
        txnb=2,
        time=Time(datetime(2014, 1, 12, 8, 59, 28, tzinfo=timezone.utc), TimeLayout.EXPANDED),
    )


def sample_txpk() -> TXPK:
    """Immediate LoRa downlink; rfch and ipol are left at their zero values"""
    return TXPK(
        imme=True,
        freq=864.123456,
        rfch=0,
        powe=14,
        modu='LORA',
        datr=Datarate.identifier('SF11BW125'),
        codr='4/6',
        ipol=False,
        size=32,
        data='H3P3N2i9qc4yt7rK7ldqoeCVJGBybzPY5h1Dd7P7p8v',
    )


def stat_payload() -> Payload:
    return Payload(stat=sample_stat())


def rxpk_payload() -> Payload:
    return Payload(rxpk=sample_rxpks())


def rxpk_stat_payload() -> Payload:
    return Payload(rxpk=sample_rxpks(), stat=sample_stat())


def txpk_payload() -> Payload:
    return Payload(txpk=sample_txpk())


# Artifact name -> (label, builder), in the order the fixtures are generated
SAMPLES = {
    'marshal_stat': ('Stat', stat_payload),
    'marshal_rxpk': ('RXPKs', rxpk_payload),
    'marshal_rxpk_stat': ('RXPKsStats', rxpk_stat_payload),
    'marshal_txpk': ('TXPK', txpk_payload),
}


def hex_dump(raw: bytes) -> str:
    """Comma-terminated hex bytes, e.g. '0x7b,0x7d,'"""
    return ''.join(f"0x{byte:x}," for byte in raw)
