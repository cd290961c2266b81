"""Constructors for building type trees in code.

Example:
    >>> from candidkit.idl import builders as IDL
    >>> Account = IDL.Record({"owner": IDL.Principal, "subaccount": IDL.Opt(IDL.Vec(IDL.Nat8))})
    >>> Tree = IDL.Rec("Tree")
    >>> Tree.fill(IDL.Variant({"Leaf": IDL.Nat, "Node": IDL.Vec(Tree)}))
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence, Union

from candidkit.idl.types import (
    FunctionType,
    OptionalType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    RecursiveType,
    ServiceType,
    TupleType,
    TypeNode,
    UnknownType,
    VariantType,
    VectorType,
)

Text = PrimitiveType(PrimitiveKind.TEXT)
Bool = PrimitiveType(PrimitiveKind.BOOL)
Null = PrimitiveType(PrimitiveKind.NULL)
Reserved = PrimitiveType(PrimitiveKind.RESERVED)
Empty = PrimitiveType(PrimitiveKind.EMPTY)
Int = PrimitiveType(PrimitiveKind.INT)
Nat = PrimitiveType(PrimitiveKind.NAT)
Int8 = PrimitiveType(PrimitiveKind.INT8)
Int16 = PrimitiveType(PrimitiveKind.INT16)
Int32 = PrimitiveType(PrimitiveKind.INT32)
Int64 = PrimitiveType(PrimitiveKind.INT64)
Nat8 = PrimitiveType(PrimitiveKind.NAT8)
Nat16 = PrimitiveType(PrimitiveKind.NAT16)
Nat32 = PrimitiveType(PrimitiveKind.NAT32)
Nat64 = PrimitiveType(PrimitiveKind.NAT64)
Float32 = PrimitiveType(PrimitiveKind.FLOAT32)
Float64 = PrimitiveType(PrimitiveKind.FLOAT64)
Principal = PrimitiveType(PrimitiveKind.PRINCIPAL)

FieldSpec = Union[Mapping[str, TypeNode], Iterable[tuple]]


def _pairs(entries: FieldSpec) -> tuple:
    items = entries.items() if isinstance(entries, Mapping) else entries
    return tuple((str(key), value) for key, value in items)


def Record(fields: FieldSpec) -> RecordType:
    return RecordType(_pairs(fields))


def Tuple(*components: TypeNode) -> TupleType:
    return TupleType(tuple(components))


def Vec(item: TypeNode) -> VectorType:
    return VectorType(item)


def Blob() -> VectorType:
    return VectorType(Nat8)


def Opt(inner: TypeNode) -> OptionalType:
    return OptionalType(inner)


def Variant(options: FieldSpec) -> VariantType:
    return VariantType(_pairs(options))


def Rec(name: Optional[str] = None) -> RecursiveType:
    return RecursiveType(label=name or "Rec")


def Func(
    args: Sequence[TypeNode] = (),
    rets: Sequence[TypeNode] = (),
    annotations: Sequence[str] = (),
) -> FunctionType:
    return FunctionType(tuple(args), tuple(rets), tuple(annotations))


def Service(methods: Union[Mapping[str, FunctionType], Iterable[tuple]]) -> ServiceType:
    return ServiceType(_pairs(methods))


def Unknown(name: str = "unknown") -> UnknownType:
    return UnknownType(name)
