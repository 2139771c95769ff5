"""
Разбор terse-вывода `nmcli -t -f ALL dev wifi list`.

Порядок полей (18 штук):
NAME, SSID, SSID-HEX, BSSID, MODE, CHAN, FREQ, RATE, BANDWIDTH, SIGNAL,
BARS, SECURITY, WPA-FLAGS, RSN-FLAGS, DEVICE, ACTIVE, IN-USE, DBUS-PATH
"""
from pydantic import ValidationError

from wapwatch.exceptions import MalformedRecordError
from wapwatch.schemas.wap import AccessPointObservation

REQUIRED_FIELDS = 18
ERROR_PREFIX = "Error:"
OPEN_SECURITY = "Open"

# nmcli экранирует ':' внутри значений как '\:'
_ESCAPED_COLON = "\\:"
_SENTINEL = "\x00"

# Индексы полей (NAME=0 и BARS=10 не используются)
SSID, SSID_HEX, BSSID, MODE = 1, 2, 3, 4
CHAN, FREQ, RATE, BANDWIDTH, SIGNAL = 5, 6, 7, 8, 9
SECURITY, WPA_FLAGS, RSN_FLAGS = 11, 12, 13
DEVICE, ACTIVE, IN_USE, DBUS_PATH = 14, 15, 16, 17


def split_fields(line: str) -> list[str]:
    """Делит строку по неэкранированным ':'; в BSSID экранированные ':' восстанавливаются."""
    fields = line.replace(_ESCAPED_COLON, _SENTINEL).split(":")
    if len(fields) > BSSID:
        fields[BSSID] = fields[BSSID].replace(_SENTINEL, ":")
    return fields


def leading_int(value: str, name: str, line: str) -> int:
    """
    '2437 MHz' -> 2437, '130 Mbit/s' -> 130, '-45' -> -45.
    Нет числа в начале -> MalformedRecordError.
    """
    parts = value.split()
    if not parts:
        raise MalformedRecordError(f"empty {name} field", line)
    try:
        return int(parts[0])
    except ValueError:
        raise MalformedRecordError(f"non-numeric {name} field: {parts[0]!r}", line)


def parse_line(line: str) -> AccessPointObservation | None:
    """
    Одна строка nmcli -> AccessPointObservation.
    Пустые строки и строки 'Error: ...' дают None.
    """
    line = line.strip()
    if not line or line.startswith(ERROR_PREFIX):
        return None

    fields = split_fields(line)
    if len(fields) < REQUIRED_FIELDS:
        raise MalformedRecordError(
            f"incorrect number of fields: {len(fields)} < {REQUIRED_FIELDS}",
            line,
            field_count=len(fields),
        )

    try:
        return _build(fields, line)
    except ValidationError as e:
        raise MalformedRecordError(f"invalid record: {e.error_count()} validation error(s)", line) from e


def _build(fields: list[str], line: str) -> AccessPointObservation:
    return AccessPointObservation(
        ssid=fields[SSID],
        ssid_hex=fields[SSID_HEX],
        bssid=fields[BSSID],
        mode=fields[MODE],
        chan=leading_int(fields[CHAN], "channel", line),
        freq=leading_int(fields[FREQ], "frequency", line),
        rate=leading_int(fields[RATE], "rate", line),
        bandwidth=leading_int(fields[BANDWIDTH], "bandwidth", line),
        signal=leading_int(fields[SIGNAL], "signal", line),
        security=fields[SECURITY] or OPEN_SECURITY,
        wpa_flags=fields[WPA_FLAGS],
        rsn_flags=fields[RSN_FLAGS],
        device=fields[DEVICE],
        active=fields[ACTIVE],
        in_use=fields[IN_USE] == "*",
        dbus_path=fields[DBUS_PATH],
    )
