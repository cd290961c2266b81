from __future__ import annotations

import hashlib
import re
from typing import Any, Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_BODY = re.compile(r"^(?:[0-9a-fA-F]{2})*$")
_INT_TEXT = re.compile(r"^[+-]?\d+$")


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_byte_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value
    )


def to_bytes(value: Union[BytesLike, Iterable[int]]) -> bytes:
    if isinstance(value, bytes):
        return value
    if is_bytes_like(value):
        return bytes(value)
    return bytes(list(value))


def strip_hex_prefix(text: str) -> str:
    return text[2:] if text[:2] in ("0x", "0X") else text


def is_hex_text(text: Any) -> bool:
    """Even-length hex digits, optionally prefixed with ``0x``."""
    return isinstance(text, str) and bool(_HEX_BODY.match(strip_hex_prefix(text)))


def bytes_to_hex(value: Union[BytesLike, Iterable[int]], *, prefix: bool = True) -> str:
    body = to_bytes(value).hex()
    return f"0x{body}" if prefix else body


def hex_to_bytes(text: str) -> bytes:
    body = strip_hex_prefix(text)
    if not _HEX_BODY.match(body):
        raise ValueError(f"Invalid hex string: {text!r}")
    return bytes.fromhex(body)


def sha256_hex(value: Union[BytesLike, Iterable[int]]) -> str:
    return hashlib.sha256(to_bytes(value)).hexdigest()


def is_int_text(text: Any) -> bool:
    return isinstance(text, str) and bool(_INT_TEXT.match(text.strip()))


def parse_int_text(text: str) -> int:
    """Parse base-10 integer text exactly. Never goes through float."""
    if not is_int_text(text):
        raise ValueError(f"Invalid integer text: {text!r}")
    return int(text.strip(), 10)
