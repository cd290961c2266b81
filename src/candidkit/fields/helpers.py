from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Dict, List

from candidkit.core.encoding import bytes_to_hex, is_byte_list, is_bytes_like
from candidkit.core.principal import Principal
from candidkit.fields.types import (
    COMPOUND_KINDS,
    PRIMITIVE_KINDS,
    FieldNode,
    OptionalField,
    RecordField,
    RecursiveField,
    TupleField,
    VariantField,
    VectorField,
)
from candidkit.visitor.thunk import RecursiveThunk


def is_compound_field(field: FieldNode) -> bool:
    return field.kind in COMPOUND_KINDS


def is_primitive_field(field: FieldNode) -> bool:
    return field.kind in PRIMITIVE_KINDS


def clone_field(field: FieldNode) -> FieldNode:
    """Copy a field. Composites are cloned deeply, primitives shallowly."""
    if not is_compound_field(field):
        return replace(field)

    default = copy.deepcopy(field.default)
    if isinstance(field, (RecordField, TupleField)):
        return replace(field, default=default, fields=tuple(clone_field(f) for f in field.fields))
    if isinstance(field, VariantField):
        return replace(field, default=default, options=tuple(clone_field(o) for o in field.options))
    if isinstance(field, OptionalField):
        inner = clone_field(field.inner) if field.inner is not None else None
        return replace(field, default=default, inner=inner)
    if isinstance(field, VectorField):
        item = clone_field(field.item_field) if field.item_field is not None else None
        return replace(field, default=default, item_field=item)
    if isinstance(field, RecursiveField):
        # A clone starts unexpanded with its own memo.
        thunk = RecursiveThunk(field.expand) if field.expand is not None else None
        return replace(field, default=default, thunk=thunk)
    return replace(field, default=default)


def _principal_text(raw: Any) -> str:
    if isinstance(raw, Principal):
        return raw.to_text()
    return "" if raw is None else str(raw)


def to_form_value(field: FieldNode, raw: Any) -> Any:
    """Convert a decoded wire value into the value a form bound to ``field`` holds."""
    kind = field.kind

    if isinstance(field, RecordField):
        obj: Dict[str, Any] = raw if isinstance(raw, dict) else {}
        return {child.label: to_form_value(child, obj.get(child.label)) for child in field.fields}

    if isinstance(field, TupleField):
        items: List[Any] = list(raw) if isinstance(raw, (list, tuple)) else []
        return [to_form_value(child, items[i] if i < len(items) else None) for i, child in enumerate(field.fields)]

    if isinstance(field, VariantField):
        obj = raw if isinstance(raw, dict) else {}
        tag = field.get_selected_key(obj)
        option = field.get_option(tag)
        if option.kind == "null":
            return {"_type": tag}
        return {"_type": tag, tag: to_form_value(option, obj.get(tag))}

    if isinstance(field, OptionalField):
        if isinstance(raw, (list, tuple)):
            if not raw:
                return None
            raw = raw[0]
        if raw is None or field.inner is None:
            return None
        return to_form_value(field.inner, raw)

    if isinstance(field, VectorField):
        if not isinstance(raw, (list, tuple)):
            return []
        return [to_form_value(field.create_item_field(i), v) for i, v in enumerate(raw)]

    if isinstance(field, RecursiveField):
        return None if raw is None else to_form_value(field.extract(), raw)

    if kind == "blob":
        if is_bytes_like(raw) or is_byte_list(raw):
            return bytes_to_hex(raw)
        return raw if isinstance(raw, str) else ""
    if kind == "principal":
        return _principal_text(raw)
    if kind == "text":
        return "" if raw is None else str(raw)
    if kind == "number":
        return "" if raw is None else str(raw)
    if kind == "boolean":
        return bool(raw)
    if kind == "null":
        return None
    if kind == "function":
        if isinstance(raw, (list, tuple)) and len(raw) == 2:
            return [_principal_text(raw[0]), str(raw[1])]
        return ["", ""]
    return raw
