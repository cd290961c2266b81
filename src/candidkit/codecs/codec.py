from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterable, List, Tuple, TypeVar

from candidkit.core.exceptions import ShapeMismatchError, describe_value

Display = TypeVar("Display")
Wire = TypeVar("Wire")

# (value, path) -> converted value
Step = Callable[[Any, str], Any]


class Codec(Generic[Display, Wire]):
    """Pure bidirectional mapping between wire and display values for one type.

    ``as_display`` converts a decoded wire value into its JSON/text-safe form,
    ``as_candid`` converts a display value back into the wire form. Codecs hold
    no state beyond their children and can be cached and shared.
    """

    __slots__ = ("candid_type", "_to_display", "_to_candid")

    def __init__(self, candid_type: str, to_display: Step, to_candid: Step):
        self.candid_type = candid_type
        self._to_display = to_display
        self._to_candid = to_candid

    def as_display(self, value: Wire) -> Display:
        return self._to_display(value, "")

    def as_candid(self, value: Display) -> Wire:
        return self._to_candid(value, "")

    # Path-aware variants used by parent codecs.
    def display_at(self, value: Any, path: str) -> Any:
        return self._to_display(value, path)

    def candid_at(self, value: Any, path: str) -> Any:
        return self._to_candid(value, path)

    def __repr__(self) -> str:
        return f"Codec({self.candid_type})"


def _identity(value: Any, path: str) -> Any:
    return value


def identity_codec(candid_type: str) -> Codec:
    return Codec(candid_type, _identity, _identity)


def mismatch(path: str, expected: str, value: Any, reason: str | None = None) -> ShapeMismatchError:
    return ShapeMismatchError(path=path, expected=expected, actual=describe_value(value), reason=reason)


def child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def vector_codec(candid_type: str, item: Codec) -> Codec:
    def _map(step: Callable[[Any, str], Any]) -> Step:
        def run(value: Any, path: str) -> List[Any]:
            if not isinstance(value, (list, tuple)):
                raise mismatch(path, candid_type, value)
            return [step(elem, index_path(path, i)) for i, elem in enumerate(value)]

        return run

    return Codec(candid_type, _map(item.display_at), _map(item.candid_at))


def optional_codec(candid_type: str, inner: Codec) -> Codec:
    def to_display(value: Any, path: str) -> Any:
        if value is None:
            return None
        if not isinstance(value, (list, tuple)) or len(value) > 1:
            raise mismatch(path, candid_type, value, "expected [] or [value]")
        if not value:
            return None
        return inner.display_at(value[0], path)

    def to_candid(value: Any, path: str) -> List[Any]:
        if value is None:
            return []
        return [inner.candid_at(value, path)]

    return Codec(candid_type, to_display, to_candid)


def record_codec(candid_type: str, fields: Iterable[Tuple[str, Codec, bool]]) -> Codec:
    """``fields`` holds ``(key, codec, is_optional)``; absent optional keys mean "none"."""
    entries = tuple(fields)

    def _map(pick: Callable[[Codec], Step], absent: Callable[[], Any]) -> Step:
        def run(value: Any, path: str) -> Dict[str, Any]:
            if not isinstance(value, dict):
                raise mismatch(path, candid_type, value)
            out: Dict[str, Any] = {}
            for key, codec, optional in entries:
                if key in value:
                    out[key] = pick(codec)(value[key], child_path(path, key))
                elif optional:
                    out[key] = absent()
                else:
                    raise mismatch(child_path(path, key), codec.candid_type, None, "missing field")
            return out

        return run

    return Codec(
        candid_type,
        _map(lambda c: c.display_at, lambda: None),
        _map(lambda c: c.candid_at, list),
    )


def tuple_codec(candid_type: str, components: Iterable[Codec]) -> Codec:
    codecs = tuple(components)

    def _check(value: Any, path: str) -> None:
        if not isinstance(value, (list, tuple)) or len(value) != len(codecs):
            raise mismatch(path, candid_type, value, f"expected {len(codecs)} elements")

    def to_display(value: Any, path: str) -> List[Any]:
        _check(value, path)
        return [codec.display_at(elem, index_path(path, i)) for i, (codec, elem) in enumerate(zip(codecs, value))]

    def to_candid(value: Any, path: str) -> Tuple[Any, ...]:
        _check(value, path)
        return tuple(codec.candid_at(elem, index_path(path, i)) for i, (codec, elem) in enumerate(zip(codecs, value)))

    return Codec(candid_type, to_display, to_candid)


def variant_codec(candid_type: str, options: Iterable[Tuple[str, Codec, str]]) -> Codec:
    """``options`` holds ``(tag, codec, payload)`` where payload is one of
    ``"null"`` (tag only), ``"optional"`` (may be omitted) or ``"value"``."""
    table = {tag: (codec, payload) for tag, codec, payload in options}

    def to_display(value: Any, path: str) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise mismatch(path, candid_type, value)
        if "_type" in value and value["_type"] in table:
            # already in display form
            return value
        if len(value) != 1:
            raise mismatch(path, candid_type, value, "expected exactly one tag")
        tag, inner = next(iter(value.items()))
        if tag not in table:
            raise mismatch(path, candid_type, value, f"unknown tag {tag!r}")
        codec, payload = table[tag]
        if payload == "null":
            return {"_type": tag}
        return {"_type": tag, tag: codec.display_at(inner, child_path(path, tag))}

    def to_candid(value: Any, path: str) -> Dict[str, Any]:
        if not isinstance(value, dict) or "_type" not in value:
            raise mismatch(path, candid_type, value, "expected a discriminated object with _type")
        tag = value["_type"]
        if tag not in table:
            raise mismatch(path, candid_type, value, f"unknown tag {tag!r}")
        codec, payload = table[tag]
        if payload == "null":
            return {tag: None}
        if tag not in value:
            if payload == "optional":
                return {tag: []}
            raise mismatch(child_path(path, tag), codec.candid_type, None, "missing payload")
        return {tag: codec.candid_at(value[tag], child_path(path, tag))}

    return Codec(candid_type, to_display, to_candid)


def lazy_codec(candid_type: str, resolve: Callable[[], Codec]) -> Codec:
    """Codec whose target is built on first use (recursive types)."""

    def to_display(value: Any, path: str) -> Any:
        return resolve().display_at(value, path)

    def to_candid(value: Any, path: str) -> Any:
        return resolve().candid_at(value, path)

    return Codec(candid_type, to_display, to_candid)
