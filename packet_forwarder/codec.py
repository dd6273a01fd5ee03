"""
Gateway JSON Codec

Generic encoder/decoder for the gateway message records. Records are
dataclasses whose fields are declared with wire(); the codec walks those
declarations, so the record schemas carry no encoding logic of their own.

Output is compact UTF-8 JSON in declaration order, token-for-token
compatible with the golden payloads in test_data/:
- absent fields (None) are omitted, and so are zero values unless
  omit_zero is disabled
- integral floats lose their fraction (100.0 -> 100)
- '<', '>' and '&' are written as \\u escapes
"""

from dataclasses import field, fields, is_dataclass
from decimal import Decimal
from typing import Any, Type, TypeVar
import json
import logging
import math

from packet_forwarder.field_types import Datarate, Time


class EncodeError(ValueError):
    """A record holds a value that cannot be written to the wire"""


class DecodeError(ValueError):
    """Received JSON does not describe a valid record"""


# Field kinds
UINT = 'uint'
INT = 'int'
FLOAT = 'float'
STRING = 'str'
BOOL = 'bool'
TIME = 'time'
DATARATE = 'datr'
RECORD = 'record'
RECORD_LIST = 'records'

_HTML_ESCAPES = (
    ('<', '\\u003c'),
    ('>', '\\u003e'),
    ('&', '\\u0026'),
    ('\u2028', '\\u2028'),
    ('\u2029', '\\u2029'),
)

R = TypeVar('R')


def wire(key: str, kind: str, bits: int = None, record: type = None):
    """
    Declare a protocol field on a record dataclass

    Args:
        key: Wire name of the field (e.g. 'rssi')
        kind: One of the field kinds defined in this module
        bits: Width limit for integer kinds (None = unbounded)
        record: Record class for RECORD / RECORD_LIST fields
    """
    return field(default=None, metadata={
        'key': key, 'kind': kind, 'bits': bits, 'record': record
    })


def _wire_fields(cls):
    return [f for f in fields(cls) if 'key' in f.metadata]


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _format_float(value: float) -> str:
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        mantissa, exponent = repr(value).split('e')
        return f"{mantissa}e{exponent[0]}{exponent[1:].lstrip('0')}"

    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def _write_string(text: str) -> str:
    token = json.dumps(text, ensure_ascii=False)
    for char, escape in _HTML_ESCAPES:
        token = token.replace(char, escape)
    return token


def _check_integer(value: Any, spec: dict, where: str, error: Type[ValueError]) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{where}: expected an integer, got {type(value).__name__}")

    bits = spec['bits']
    if spec['kind'] == UINT:
        if value < 0:
            raise error(f"{where}: unsigned field cannot hold {value}")
        if bits and value >= 1 << bits:
            raise error(f"{where}: {value} does not fit in {bits} bits")
    elif bits and not -(1 << (bits - 1)) <= value < 1 << (bits - 1):
        raise error(f"{where}: {value} does not fit in signed {bits} bits")
    return value


def _is_zero(value: Any) -> bool:
    if isinstance(value, (Time, Datarate)) or is_dataclass(value):
        return False
    if isinstance(value, (list, tuple)):
        return False
    return value == 0 or value == '' or value is False


def _write_value(value: Any, spec: dict, omit_zero: bool, where: str) -> str:
    kind = spec['kind']

    if kind in (UINT, INT):
        return str(_check_integer(value, spec, where, EncodeError))

    if kind == FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodeError(f"{where}: expected a number, got {type(value).__name__}")
        if not math.isfinite(value):
            raise EncodeError(f"{where}: unsupported value {value}")
        return _format_float(float(value))

    if kind == STRING:
        if not isinstance(value, str):
            raise EncodeError(f"{where}: expected a string, got {type(value).__name__}")
        return _write_string(value)

    if kind == BOOL:
        if not isinstance(value, bool):
            raise EncodeError(f"{where}: expected a bool, got {type(value).__name__}")
        return 'true' if value else 'false'

    if kind == TIME:
        if not isinstance(value, Time):
            raise EncodeError(f"{where}: expected a Time, got {type(value).__name__}")
        try:
            return _write_string(value.format())
        except (ValueError, OverflowError) as e:
            raise EncodeError(f"{where}: cannot format time: {e}") from e

    if kind == DATARATE:
        if not isinstance(value, Datarate):
            raise EncodeError(f"{where}: expected a Datarate, got {type(value).__name__}")
        if value.is_numeric:
            return value.token
        return _write_string(value.token)

    if kind == RECORD:
        if not isinstance(value, spec['record']):
            raise EncodeError(f"{where}: expected {spec['record'].__name__}, got {type(value).__name__}")
        return _write_record(value, omit_zero, where)

    if kind == RECORD_LIST:
        if not isinstance(value, (list, tuple)):
            raise EncodeError(f"{where}: expected a list, got {type(value).__name__}")
        items = []
        for index, item in enumerate(value):
            item_where = f"{where}[{index}]"
            if not isinstance(item, spec['record']):
                raise EncodeError(f"{item_where}: expected {spec['record'].__name__}, got {type(item).__name__}")
            items.append(_write_record(item, omit_zero, item_where))
        return '[' + ','.join(items) + ']'

    raise EncodeError(f"{where}: unsupported field kind {kind!r}")


def _write_record(record: Any, omit_zero: bool, path: str) -> str:
    members = []
    for f in _wire_fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue

        key = f.metadata['key']
        token = _write_value(value, f.metadata, omit_zero, _join(path, key))
        if omit_zero and _is_zero(value):
            continue
        members.append(f"{_write_string(key)}:{token}")

    return '{' + ','.join(members) + '}'


def encode_record(record: Any, omit_zero: bool = True) -> bytes:
    """
    Encode a record dataclass to compact UTF-8 JSON

    Args:
        record: Instance of a record declared with wire() fields
        omit_zero: Also omit fields equal to their type's zero value
                   (0, 0.0, "", False); the default wire behaviour

    Raises:
        EncodeError: a field holds a value its wire type cannot carry
    """
    if not is_dataclass(record) or isinstance(record, type):
        raise EncodeError(f"Cannot encode {type(record).__name__}: not a record")

    text = _write_record(record, omit_zero, '')
    try:
        raw = text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise EncodeError(f"Cannot encode {type(record).__name__} as UTF-8: {e}") from e

    logging.debug(f"Encoded {type(record).__name__}: {len(raw)} bytes")
    return raw


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _reject_constant(name: str):
    raise DecodeError(f"Unsupported JSON constant: {name}")


def _read_value(raw: Any, spec: dict, where: str) -> Any:
    kind = spec['kind']

    if kind in (UINT, INT):
        return _check_integer(raw, spec, where, DecodeError)

    if kind == FLOAT:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise DecodeError(f"{where}: expected a number, got {type(raw).__name__}")
        try:
            value = float(raw)
        except OverflowError as e:
            raise DecodeError(f"{where}: number out of range: {e}") from e
        if not math.isfinite(value):
            raise DecodeError(f"{where}: unsupported value {value}")
        return value

    if kind == STRING:
        if not isinstance(raw, str):
            raise DecodeError(f"{where}: expected a string, got {type(raw).__name__}")
        return raw

    if kind == BOOL:
        if not isinstance(raw, bool):
            raise DecodeError(f"{where}: expected a bool, got {type(raw).__name__}")
        return raw

    if kind == TIME:
        if not isinstance(raw, str):
            raise DecodeError(f"{where}: expected a time string, got {type(raw).__name__}")
        try:
            return Time.parse(raw)
        except ValueError as e:
            raise DecodeError(f"{where}: {e}") from e

    if kind == DATARATE:
        # Number -> FSK bits per second, string -> LoRa identifier
        try:
            if isinstance(raw, int) and not isinstance(raw, bool):
                return Datarate.numeric(raw)
            if isinstance(raw, str):
                return Datarate.identifier(raw)
        except ValueError as e:
            raise DecodeError(f"{where}: {e}") from e
        raise DecodeError(f"{where}: expected an unsigned integer or string, got {raw!r}")

    if kind == RECORD:
        return _read_record(spec['record'], raw, where)

    if kind == RECORD_LIST:
        if not isinstance(raw, list):
            raise DecodeError(f"{where}: expected a list, got {type(raw).__name__}")
        return [_read_record(spec['record'], item, f"{where}[{index}]")
                for index, item in enumerate(raw)]

    raise DecodeError(f"{where}: unsupported field kind {kind!r}")


def _read_record(cls: Type[R], obj: Any, path: str) -> R:
    if not isinstance(obj, dict):
        raise DecodeError(f"{path or cls.__name__}: expected a JSON object, got {type(obj).__name__}")

    by_key = {f.metadata['key']: f for f in _wire_fields(cls)}
    values = {}
    for key, raw in obj.items():
        where = _join(path, key)
        f = by_key.get(key)
        if f is None:
            logging.debug(f"Ignoring unknown key: {where}")
            continue
        if raw is None:
            continue
        values[f.name] = _read_value(raw, f.metadata, where)

    return cls(**values)


def decode_record(cls: Type[R], data) -> R:
    """
    Decode JSON bytes (or text) into a record dataclass

    Raises:
        DecodeError: data is not valid JSON or does not match the record schema
    """
    # ValueError covers malformed JSON, bad UTF-8 and oversized integer literals
    try:
        obj = json.loads(data, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    record = _read_record(cls, obj, '')
    logging.debug(f"Decoded {cls.__name__} from {len(data)} bytes")
    return record
