"""Helpers for decoding Gmail message payloads and headers."""

from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# "Display Name" <addr@example.com>
_SENDER_RE = re.compile(r"^(.*?)\s*<([^<>]+)>\s*$", re.S)
_CHARSET_RE = re.compile(r'charset="?([A-Za-z0-9_\-]+)"?', re.I)


def b64url_decode(data: str | bytes | None) -> bytes:
    """
    Decode the URL-safe base64 blobs Gmail returns (without guaranteed padding).
    Returns b"" for empty or undecodable input.
    """
    if not data:
        return b""
    if isinstance(data, str):
        raw = data.encode()
    else:
        raw = data
    raw = raw.replace(b"-", b"+").replace(b"_", b"/")
    padding = (-len(raw)) % 4
    if padding:
        raw += b"=" * padding
    try:
        return base64.b64decode(raw)
    except (binascii.Error, ValueError):
        return b""


def charset_from(content_type: str | None) -> Optional[str]:
    if not content_type:
        return None
    m = _CHARSET_RE.search(content_type)
    return m.group(1) if m else None


def decode_to_text(b: bytes, charset: Optional[str] = None) -> str:
    """
    Decode bytes into text with a safe fallback order: the declared charset,
    then utf-8, then latin-1, which maps every byte to one character.
    """
    for enc in ([charset] if charset else []) + ["utf-8"]:
        try:
            return b.decode(enc)
        except (LookupError, UnicodeDecodeError):
            continue
    return b.decode("latin-1")


def parse_sender(value: str | None) -> Tuple[str, str]:
    """
    Split a From header into (name, email).

    Without an angle-bracket address the raw value is used for both.
    """
    value = value or ""
    m = _SENDER_RE.match(value)
    if not m:
        return value, value
    name = m.group(1).strip().strip('"').strip()
    return name, m.group(2).strip()


def millis_to_iso(internal_date: str | int) -> str:
    """
    Format Gmail's internalDate (epoch millis) as 2023-11-14T22:13:20.000Z.
    """
    dt = _EPOCH + timedelta(milliseconds=int(internal_date))
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


__all__ = ["b64url_decode", "charset_from", "decode_to_text", "millis_to_iso", "parse_sender"]
