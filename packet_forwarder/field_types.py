"""
Gateway Protocol Value Types

Defines the two field values whose JSON rendering is not a plain scalar:
the datarate (bare number for FSK, quoted identifier for LoRa) and the
timestamp (rendered under an explicit layout).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union
import re


class DatarateKind(Enum):
    """How a datarate token is written on the wire"""
    NUMERIC = 'numeric'          # FSK bits per second, bare JSON number
    IDENTIFIER = 'identifier'    # LoRa "SFxBWy" identifier, JSON string


_UNSIGNED_DECIMAL = re.compile(r'(0|[1-9][0-9]*)\Z')


@dataclass(frozen=True)
class Datarate:
    """Either a numeric (FSK) or an identifier (LoRa) datarate"""

    kind: DatarateKind
    token: str

    def __post_init__(self):
        if not isinstance(self.kind, DatarateKind):
            raise TypeError(f"Datarate kind must be a DatarateKind, got {self.kind!r}")
        if not isinstance(self.token, str):
            raise TypeError(f"Datarate token must be a string, got {type(self.token).__name__}")
        if self.kind is DatarateKind.NUMERIC and not _UNSIGNED_DECIMAL.match(self.token):
            raise ValueError(f"Numeric datarate must be an unsigned decimal integer: {self.token!r}")
        if self.kind is DatarateKind.IDENTIFIER and not self.token:
            raise ValueError("Datarate identifier must not be empty")

    @classmethod
    def numeric(cls, bps: int) -> 'Datarate':
        """FSK datarate in bits per second"""
        if isinstance(bps, bool) or not isinstance(bps, int):
            raise TypeError(f"Numeric datarate must be an int, got {type(bps).__name__}")
        return cls(DatarateKind.NUMERIC, str(bps))

    @classmethod
    def identifier(cls, name: str) -> 'Datarate':
        """LoRa datarate identifier such as 'SF7BW125'"""
        return cls(DatarateKind.IDENTIFIER, name)

    @property
    def is_numeric(self) -> bool:
        return self.kind is DatarateKind.NUMERIC

    @property
    def bps(self) -> Optional[int]:
        """Bits per second for numeric datarates, None for identifiers"""
        return int(self.token) if self.is_numeric else None

    def __str__(self) -> str:
        return self.token


class TimeLayout(Enum):
    """Built-in textual layouts for protocol timestamps"""
    RFC3339 = '2006-01-02T15:04:05Z07:00'
    RFC3339_NANO = '2006-01-02T15:04:05.999999999Z07:00'   # "compact", us precision
    EXPANDED = '2006-01-02 15:04:05 GMT'                   # gateway system time


_RFC3339_PATTERN = re.compile(
    r'(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})'
    r'(?:\.(\d+))?'
    r'(Z|[+-]\d{2}:\d{2})\Z'
)
_EXPANDED_PATTERN = re.compile(
    r'(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2}) GMT\Z'
)


def _as_aware(instant: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def _date_time(instant: datetime, sep: str) -> str:
    return (f"{instant.year:04d}-{instant.month:02d}-{instant.day:02d}{sep}"
            f"{instant.hour:02d}:{instant.minute:02d}:{instant.second:02d}")


def _utc_offset(instant: datetime) -> str:
    offset = instant.utcoffset()
    if not offset:
        return 'Z'
    minutes = int(offset.total_seconds()) // 60
    sign = '-' if minutes < 0 else '+'
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_time(instant: datetime, layout: Union[TimeLayout, str]) -> str:
    """Render an instant under a built-in layout or a strftime pattern"""
    if isinstance(layout, str):
        return instant.strftime(layout)

    instant = _as_aware(instant)

    if layout is TimeLayout.EXPANDED:
        return _date_time(instant.astimezone(timezone.utc), ' ') + ' GMT'

    text = _date_time(instant, 'T')
    if layout is TimeLayout.RFC3339_NANO and instant.microsecond:
        text += '.' + f"{instant.microsecond:06d}".rstrip('0')
    return text + _utc_offset(instant)


def _parse_rfc3339(text: str) -> Optional[datetime]:
    match = _RFC3339_PATTERN.match(text)
    if not match:
        return None
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    if offset == 'Z':
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == '-' else 1
        tz = timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6])))
    # Sub-microsecond digits are truncated
    microsecond = int((fraction or '0')[:6].ljust(6, '0'))
    return datetime(int(year), int(month), int(day), int(hour), int(minute),
                    int(second), microsecond, tzinfo=tz)


def _parse_expanded(text: str) -> Optional[datetime]:
    match = _EXPANDED_PATTERN.match(text)
    if not match:
        return None
    return datetime(*(int(part) for part in match.groups()), tzinfo=timezone.utc)


def parse_time(text: str, layout: Union[TimeLayout, str]) -> datetime:
    """Parse text rendered under the given layout; ValueError if it does not match"""
    if isinstance(layout, str):
        return datetime.strptime(text, layout)

    # Both RFC3339 layouts accept an optional fraction when parsing
    if layout is TimeLayout.EXPANDED:
        instant = _parse_expanded(text)
    else:
        instant = _parse_rfc3339(text)

    if instant is None:
        raise ValueError(f"Time {text!r} does not match layout {layout.name}")
    return instant


@dataclass(frozen=True)
class Time:
    """A timestamp paired with the layout it is rendered under"""

    instant: datetime
    layout: Union[TimeLayout, str] = TimeLayout.RFC3339_NANO

    def __post_init__(self):
        if not isinstance(self.instant, datetime):
            raise TypeError(f"Time instant must be a datetime, got {type(self.instant).__name__}")
        if not isinstance(self.layout, (TimeLayout, str)):
            raise TypeError(f"Time layout must be a TimeLayout or strftime pattern, got {self.layout!r}")

    def format(self) -> str:
        return format_time(self.instant, self.layout)

    @classmethod
    def parse(cls, text: str, layout: Union[TimeLayout, str, None] = None) -> 'Time':
        """
        Parse a protocol timestamp

        Args:
            text: Timestamp text as found on the wire
            layout: Layout to parse with; detected among the built-in
                    layouts when omitted

        Raises:
            ValueError: text does not match the layout (or any built-in one)
        """
        if layout is not None:
            return cls(parse_time(text, layout), layout)

        instant = _parse_rfc3339(text)
        if instant is not None:
            return cls(instant, TimeLayout.RFC3339_NANO if '.' in text else TimeLayout.RFC3339)

        instant = _parse_expanded(text)
        if instant is not None:
            return cls(instant, TimeLayout.EXPANDED)

        raise ValueError(f"Unrecognised time format: {text!r}")

    def __str__(self) -> str:
        return self.format()
