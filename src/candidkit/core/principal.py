"""Principal identifiers and their canonical textual form.

The textual form is the lowercase base32 (no padding) encoding of
``crc32(raw) || raw``, split into groups of five characters joined by ``-``.
"""

from __future__ import annotations

import base64
import re
import zlib
from typing import Union

MAX_PRINCIPAL_BYTES = 29

# Group boundaries are checked after the checksum so that only the grammar is
# enforced here.
_TEXT_PATTERN = re.compile(r"^[a-z2-7]{1,5}(-[a-z2-7]{1,5})*$")

_SELF_AUTHENTICATING_TAG = 0x02
_ANONYMOUS_TAG = 0x04


class PrincipalError(ValueError):
    pass


def _crc32_bytes(raw: bytes) -> bytes:
    return (zlib.crc32(raw) & 0xFFFFFFFF).to_bytes(4, "big")


def _group(encoded: str) -> str:
    return "-".join(encoded[i : i + 5] for i in range(0, len(encoded), 5))


class Principal:
    """Immutable principal identifier (the native identifier wire type)."""

    __slots__ = ("_raw",)

    def __init__(self, raw: Union[bytes, bytearray] = b""):
        raw = bytes(raw)
        if len(raw) > MAX_PRINCIPAL_BYTES:
            raise PrincipalError(f"Principal is at most {MAX_PRINCIPAL_BYTES} bytes, got {len(raw)}")
        object.__setattr__(self, "_raw", raw)

    def __setattr__(self, name, value):
        raise AttributeError("Principal is immutable")

    @classmethod
    def from_text(cls, text: str) -> "Principal":
        if not isinstance(text, str):
            raise PrincipalError(f"Expected principal text, got {type(text).__name__}")
        canonical = text.strip().lower()
        if not _TEXT_PATTERN.match(canonical):
            raise PrincipalError(f"Invalid principal text: {text!r}")
        compact = canonical.replace("-", "")
        padded = compact.upper() + "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(padded)
        except (ValueError, TypeError) as exc:
            raise PrincipalError(f"Invalid principal text: {text!r}") from exc
        if len(decoded) < 4:
            raise PrincipalError(f"Invalid principal text: {text!r}")
        checksum, raw = decoded[:4], decoded[4:]
        if _crc32_bytes(raw) != checksum:
            raise PrincipalError(f"Principal checksum mismatch: {text!r}")
        principal = cls(raw)
        if principal.to_text() != canonical:
            raise PrincipalError(f"Principal text is not canonical: {text!r}")
        return principal

    @classmethod
    def from_hex(cls, value: str) -> "Principal":
        return cls(bytes.fromhex(value))

    @classmethod
    def management_canister(cls) -> "Principal":
        return cls(b"")

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(bytes([_ANONYMOUS_TAG]))

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def is_anonymous(self) -> bool:
        return self._raw == bytes([_ANONYMOUS_TAG])

    @property
    def is_self_authenticating(self) -> bool:
        return bool(self._raw) and self._raw[-1] == _SELF_AUTHENTICATING_TAG

    def to_text(self) -> str:
        encoded = base64.b32encode(_crc32_bytes(self._raw) + self._raw).decode("ascii")
        return _group(encoded.rstrip("=").lower())

    def to_hex(self) -> str:
        return self._raw.hex().upper()

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"Principal({self.to_text()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Principal):
            return self._raw == other._raw
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("principal", self._raw))


def is_principal_text(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        Principal.from_text(value)
    except PrincipalError:
        return False
    return True


def is_canister_id(value: object) -> bool:
    """Canister ids are 10-byte opaque principals, 27 characters ending in ``-cai``."""
    if not isinstance(value, str) or len(value) != 27 or not value.endswith("-cai"):
        return False
    return is_principal_text(value)
