"""Type tree shared by every producer.

Runtime-only types; no pydantic models here so the tree can be built and
shared cheaply.
"""

from candidkit.idl.types import (
    FunctionType,
    OptionalType,
    PrimitiveKind,
    PrimitiveType,
    RecordType,
    RecursiveType,
    ServiceType,
    Shape,
    TupleType,
    TypeNode,
    UnknownType,
    VariantType,
    VectorType,
    is_null_type,
    unwrap_recursive,
)

__all__ = [
    "FunctionType",
    "OptionalType",
    "PrimitiveKind",
    "PrimitiveType",
    "RecordType",
    "RecursiveType",
    "ServiceType",
    "Shape",
    "TupleType",
    "TypeNode",
    "UnknownType",
    "VariantType",
    "VectorType",
    "is_null_type",
    "unwrap_recursive",
]
