from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from candidkit.fields import schema as schemas
from candidkit.fields.helpers import to_form_value
from candidkit.fields.schema import FieldSchema
from candidkit.fields.types import FieldNode
from candidkit.fields.visitor import FieldMetadataVisitor
from candidkit.idl.types import FunctionType, ServiceType, TypeNode


@dataclass(frozen=True)
class MethodFields:
    """Form metadata for the arguments of one method (or one bare value)."""

    function_name: str
    function_type: str
    candid_type: str
    fields: Tuple[FieldNode, ...]
    defaults: List[Any]
    schema: FieldSchema = field(compare=False, repr=False)

    @property
    def arg_count(self) -> int:
        return len(self.fields)

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def validate(self, values: Sequence[Any]) -> bool:
        return self.schema.is_valid(list(values))

    def to_form_values(self, decoded_args: Sequence[Any]) -> List[Any]:
        """Form values for already-decoded wire arguments (pre-filling a form)."""
        return [
            to_form_value(f, decoded_args[i] if i < len(decoded_args) else None)
            for i, f in enumerate(self.fields)
        ]


def _method_fields(
    visitor: FieldMetadataVisitor,
    types: Sequence[TypeNode],
    function_name: str,
    function_type: str,
    candid_type: str,
) -> MethodFields:
    fields = tuple(visitor.build(t, label=f"__arg{i}", path=f"[{i}]") for i, t in enumerate(types))
    return MethodFields(
        function_name=function_name,
        function_type=function_type,
        candid_type=candid_type,
        fields=fields,
        defaults=[f.get_default() for f in fields],
        schema=FieldSchema(schemas.tuple_annotation([f.schema.annotation for f in fields])),
    )


def build_method_fields(
    func: FunctionType,
    function_name: str,
    visitor: Optional[FieldMetadataVisitor] = None,
) -> MethodFields:
    visitor = visitor or FieldMetadataVisitor()
    return _method_fields(visitor, func.args, function_name, func.function_kind, func.name)


def build_value_fields(
    value_type: TypeNode,
    function_name: str = "__value",
    visitor: Optional[FieldMetadataVisitor] = None,
) -> MethodFields:
    """Metadata for editing a single bare value as if it were a one-argument call."""
    visitor = visitor or FieldMetadataVisitor()
    return _method_fields(visitor, [value_type], function_name, "value", value_type.name)


def build_service_fields(service: ServiceType) -> Dict[str, MethodFields]:
    visitor = FieldMetadataVisitor()
    return {name: build_method_fields(func, name, visitor) for name, func in service.methods}
