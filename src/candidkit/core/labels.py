from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Literal, Optional

from candidkit.core.principal import is_canister_id


TextFormat = Literal[
    "plain",
    "timestamp",
    "uuid",
    "url",
    "email",
    "phone",
    "btc",
    "eth",
    "account-id",
    "principal",
]
NumberFormat = Literal["timestamp", "cycle", "value", "normal"]

_TUPLE_LABEL = re.compile(r"^_(\d+)_$")
_EDGE_UNDERSCORES = re.compile(r"^_+|_+$")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")

TIMESTAMP_KEYS = (
    "time",
    "date",
    "deadline",
    "timestamp",
    "timestamp_nanos",
    "statusAt",
    "createdAt",
    "updatedAt",
    "deletedAt",
    "validUntil",
    "status_at",
    "created_at",
    "updated_at",
    "deleted_at",
    "valid_until",
)
CYCLE_KEYS = ("cycle", "cycles")

_ACCOUNT_ID_KEYS = re.compile(r"account_identifier|ledger_account|block_hash|transaction_hash|tx_hash", re.I)

_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I)
_BTC_BECH32 = re.compile(r"^(bc1|tb1|bcrt1)[a-zA-HJ-NP-Z0-9]{25,60}$")
_BTC_BASE58 = re.compile(r"^[13mn2][a-km-zA-HJ-NP-Z1-9]{25,34}$")
_ETH = re.compile(r"^0x[a-fA-F0-9]{40}$")
_ACCOUNT_ID = re.compile(r"^[a-fA-F0-9]{64}$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})$")
_IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".svg")


def format_label(label: str) -> str:
    """Turn a raw Candid label into a human-readable one.

    >>> format_label("__arg0")
    'Arg 0'
    >>> format_label("_0_")
    'Item 0'
    >>> format_label("created_at")
    'Created At'
    >>> format_label("userAddress")
    'User Address'
    """
    if label.startswith("__arg"):
        return f"Arg {label[5:]}"

    tuple_match = _TUPLE_LABEL.match(label)
    if tuple_match:
        return f"Item {tuple_match.group(1)}"

    if label.endswith("_item"):
        return "Item"

    cleaned = _EDGE_UNDERSCORES.sub("", label).replace("_", " ")
    cleaned = _CAMEL_BOUNDARY.sub(r"\1 \2", cleaned)
    return " ".join(word[:1].upper() + word[1:] for word in cleaned.split(" "))


def _key_matcher(keys: Iterable[str]) -> Callable[[str], bool]:
    # Plain substring matching; no regex backtracking on user labels.
    lowered = tuple(k.lower() for k in keys)

    def _matches(label: str) -> bool:
        text = label.lower()
        return any(key in text for key in lowered)

    return _matches


is_timestamp_key = _key_matcher(TIMESTAMP_KEYS)
is_cycle_key = _key_matcher(CYCLE_KEYS)


def _tokenize(label: str) -> set[str]:
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", label.replace("_", " ")).lower()
    return set(re.split(r"[\s-]+", spaced))


def check_text_format(label: Optional[str]) -> TextFormat:
    if not label:
        return "plain"
    if is_timestamp_key(label):
        return "timestamp"
    if _ACCOUNT_ID_KEYS.search(label):
        return "account-id"

    tokens = _tokenize(label)
    if tokens & {"email", "mail"}:
        return "email"
    if tokens & {"phone", "tel", "mobile"}:
        return "phone"
    if tokens & {"url", "link", "website"}:
        return "url"
    if tokens & {"uuid", "guid"}:
        return "uuid"
    if tokens & {"btc", "bitcoin"}:
        return "btc"
    if tokens & {"eth", "ethereum"}:
        return "eth"
    if tokens & {"principal", "canister"}:
        return "principal"
    return "plain"


def check_number_format(label: Optional[str]) -> NumberFormat:
    if not label:
        return "normal"
    if is_timestamp_key(label):
        return "timestamp"
    if is_cycle_key(label):
        return "cycle"
    return "normal"


def is_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("http")


def is_image(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return value.startswith("data:image") or value.endswith(_IMAGE_SUFFIXES)


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID.match(value))


def is_btc_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_BTC_BECH32.match(value) or _BTC_BASE58.match(value))


def is_eth_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ETH.match(value))


def is_account_identifier(value: Any) -> bool:
    return isinstance(value, str) and bool(_ACCOUNT_ID.match(value))


def is_iso_date(value: Any) -> bool:
    return isinstance(value, str) and bool(_ISO_DATE.match(value))


def detect_text_format(label: Optional[str], value: Any = None) -> TextFormat:
    """Value-shape detection first, then the label keywords."""
    if isinstance(value, str):
        if is_image(value):
            return "plain"
        if is_btc_address(value):
            return "btc"
        if is_eth_address(value):
            return "eth"
        if is_account_identifier(value):
            return "account-id"
        if is_uuid(value):
            return "uuid"
        if is_iso_date(value):
            return "timestamp"
        if is_canister_id(value):
            return "principal"
        if is_url(value):
            return "url"
    return check_text_format(label)
