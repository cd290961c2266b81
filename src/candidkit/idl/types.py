"""Candid type tree.

Nodes are immutable and shared read-only by every producer. ``RecursiveType``
is the one exception: its target is bound exactly once through ``fill`` by
whoever loads the interface, after which it is read-only as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from candidkit.core.exceptions import ConstructionError


class Shape(str, Enum):
    PRIMITIVE = "primitive"
    RECORD = "record"
    TUPLE = "tuple"
    VECTOR = "vector"
    OPTIONAL = "optional"
    VARIANT = "variant"
    RECURSIVE = "recursive"
    FUNCTION = "function"
    SERVICE = "service"
    UNKNOWN = "unknown"


class PrimitiveKind(str, Enum):
    TEXT = "text"
    BOOL = "bool"
    NULL = "null"
    RESERVED = "reserved"
    EMPTY = "empty"
    INT = "int"
    NAT = "nat"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    NAT8 = "nat8"
    NAT16 = "nat16"
    NAT32 = "nat32"
    NAT64 = "nat64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    PRINCIPAL = "principal"


_FIXED_BITS = {
    PrimitiveKind.INT8: 8,
    PrimitiveKind.INT16: 16,
    PrimitiveKind.INT32: 32,
    PrimitiveKind.INT64: 64,
    PrimitiveKind.NAT8: 8,
    PrimitiveKind.NAT16: 16,
    PrimitiveKind.NAT32: 32,
    PrimitiveKind.NAT64: 64,
    PrimitiveKind.FLOAT32: 32,
    PrimitiveKind.FLOAT64: 64,
}

_UNSIGNED = {
    PrimitiveKind.NAT,
    PrimitiveKind.NAT8,
    PrimitiveKind.NAT16,
    PrimitiveKind.NAT32,
    PrimitiveKind.NAT64,
}

_INTEGERS = _UNSIGNED | {
    PrimitiveKind.INT,
    PrimitiveKind.INT8,
    PrimitiveKind.INT16,
    PrimitiveKind.INT32,
    PrimitiveKind.INT64,
}


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind

    @property
    def shape(self) -> Shape:
        return Shape.PRIMITIVE

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def bits(self) -> Optional[int]:
        """Width for fixed-size numbers, ``None`` for unbounded ones."""
        return _FIXED_BITS.get(self.kind)

    @property
    def is_integer(self) -> bool:
        return self.kind in _INTEGERS

    @property
    def is_unsigned(self) -> bool:
        return self.kind in _UNSIGNED

    @property
    def is_float(self) -> bool:
        return self.kind in (PrimitiveKind.FLOAT32, PrimitiveKind.FLOAT64)

    @property
    def is_number(self) -> bool:
        return self.is_integer or self.is_float

    @property
    def is_big_integer(self) -> bool:
        """Integers that do not fit a JSON number safely (unbounded and 64-bit)."""
        return self.is_integer and (self.bits is None or self.bits > 32)

    def int_range(self) -> Tuple[Optional[int], Optional[int]]:
        if not self.is_integer:
            return None, None
        bits = self.bits
        if bits is None:
            return (0, None) if self.is_unsigned else (None, None)
        if self.is_unsigned:
            return 0, 2**bits - 1
        return -(2 ** (bits - 1)), 2 ** (bits - 1) - 1


@dataclass(frozen=True)
class RecordType:
    fields: Tuple[Tuple[str, "TypeNode"], ...]

    def __post_init__(self) -> None:
        keys = [key for key, _ in self.fields]
        if len(keys) != len(set(keys)):
            raise ConstructionError(reason="Record has duplicate field keys", details={"keys": keys})

    @property
    def shape(self) -> Shape:
        return Shape.RECORD

    @property
    def name(self) -> str:
        inner = "; ".join(f"{key}: {child.name}" for key, child in self.fields)
        return f"record {{{inner}}}"

    def field_type(self, key: str) -> Optional["TypeNode"]:
        for name, child in self.fields:
            if name == key:
                return child
        return None


@dataclass(frozen=True)
class TupleType:
    components: Tuple["TypeNode", ...]

    @property
    def shape(self) -> Shape:
        return Shape.TUPLE

    @property
    def name(self) -> str:
        return "record {" + "; ".join(child.name for child in self.components) + "}"


@dataclass(frozen=True)
class VectorType:
    item: "TypeNode"

    @property
    def shape(self) -> Shape:
        return Shape.VECTOR

    @property
    def is_blob(self) -> bool:
        return isinstance(self.item, PrimitiveType) and self.item.kind == PrimitiveKind.NAT8

    @property
    def name(self) -> str:
        return "blob" if self.is_blob else f"vec {self.item.name}"


@dataclass(frozen=True)
class OptionalType:
    inner: "TypeNode"

    @property
    def shape(self) -> Shape:
        return Shape.OPTIONAL

    @property
    def name(self) -> str:
        return f"opt {self.inner.name}"


@dataclass(frozen=True)
class VariantType:
    options: Tuple[Tuple[str, "TypeNode"], ...]

    def __post_init__(self) -> None:
        tags = [tag for tag, _ in self.options]
        if not tags:
            raise ConstructionError(reason="Variant has no options")
        if len(tags) != len(set(tags)):
            raise ConstructionError(reason="Variant has duplicate tags", details={"tags": tags})

    @property
    def shape(self) -> Shape:
        return Shape.VARIANT

    @property
    def name(self) -> str:
        inner = "; ".join(
            tag if is_null_type(child) else f"{tag}: {child.name}" for tag, child in self.options
        )
        return f"variant {{{inner}}}"

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(tag for tag, _ in self.options)

    def option_type(self, tag: str) -> Optional["TypeNode"]:
        for name, child in self.options:
            if name == tag:
                return child
        return None

    @property
    def is_result(self) -> bool:
        return set(self.tags) == {"Ok", "Err"}


@dataclass(eq=False)
class RecursiveType:
    """Self-referential type; identity-hashed so caches can key on it."""

    label: str = "Rec"
    _target: Optional["TypeNode"] = field(default=None, repr=False)

    @property
    def shape(self) -> Shape:
        return Shape.RECURSIVE

    @property
    def name(self) -> str:
        return self.label

    @property
    def is_filled(self) -> bool:
        return self._target is not None

    def fill(self, target: "TypeNode") -> "RecursiveType":
        if self._target is not None:
            raise ConstructionError(reason="Recursive type is already filled", details={"name": self.label})
        if target is self:
            raise ConstructionError(reason="Recursive type cannot point at itself", details={"name": self.label})
        self._target = target
        return self

    def resolve(self) -> "TypeNode":
        if self._target is None:
            raise ConstructionError(reason="Recursive type was never filled", details={"name": self.label})
        return self._target


@dataclass(frozen=True)
class FunctionType:
    args: Tuple["TypeNode", ...] = ()
    rets: Tuple["TypeNode", ...] = ()
    annotations: Tuple[str, ...] = ()

    @property
    def shape(self) -> Shape:
        return Shape.FUNCTION

    @property
    def is_query(self) -> bool:
        return "query" in self.annotations or "composite_query" in self.annotations

    @property
    def function_kind(self) -> str:
        return "query" if self.is_query else "update"

    @property
    def name(self) -> str:
        args = ", ".join(a.name for a in self.args)
        rets = ", ".join(r.name for r in self.rets)
        suffix = "".join(f" {a}" for a in self.annotations)
        return f"func ({args}) -> ({rets}){suffix}"


@dataclass(frozen=True)
class ServiceType:
    methods: Tuple[Tuple[str, FunctionType], ...] = ()

    @property
    def shape(self) -> Shape:
        return Shape.SERVICE

    @property
    def name(self) -> str:
        return "service"

    def method(self, name: str) -> FunctionType:
        for method_name, func in self.methods:
            if method_name == name:
                return func
        raise KeyError(name)


@dataclass(frozen=True)
class UnknownType:
    """Shapes not specifically modeled; producers treat them as opaque."""

    type_name: str = "unknown"

    @property
    def shape(self) -> Shape:
        return Shape.UNKNOWN

    @property
    def name(self) -> str:
        return self.type_name


TypeNode = Union[
    PrimitiveType,
    RecordType,
    TupleType,
    VectorType,
    OptionalType,
    VariantType,
    RecursiveType,
    FunctionType,
    ServiceType,
    UnknownType,
]


def is_null_type(node: "TypeNode") -> bool:
    return isinstance(node, PrimitiveType) and node.kind == PrimitiveKind.NULL


def unwrap_recursive(node: "TypeNode") -> "TypeNode":
    """Follow recursive indirections until a concrete node is reached."""
    seen = set()
    while isinstance(node, RecursiveType):
        if id(node) in seen:
            raise ConstructionError(reason="Recursive type resolves to itself", details={"name": node.label})
        seen.add(id(node))
        node = node.resolve()
    return node
