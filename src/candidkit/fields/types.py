from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from candidkit.core.exceptions import UnknownOptionError
from candidkit.fields.schema import FieldSchema
from candidkit.visitor.thunk import RecursiveThunk


FieldKind = Literal[
    "record",
    "tuple",
    "variant",
    "optional",
    "vector",
    "blob",
    "recursive",
    "principal",
    "text",
    "number",
    "boolean",
    "null",
    "function",
    "unknown",
]

ComponentType = Literal[
    "record-container",
    "tuple-container",
    "variant-select",
    "optional-toggle",
    "vector-list",
    "blob-upload",
    "principal-input",
    "text-input",
    "number-input",
    "boolean-checkbox",
    "null-hidden",
    "recursive-lazy",
    "function-input",
    "unknown-fallback",
]

InputType = Literal["text", "number", "checkbox", "select", "file", "textarea"]

COMPOUND_KINDS = frozenset({"record", "tuple", "variant", "optional", "vector", "recursive"})
PRIMITIVE_KINDS = frozenset({"blob", "principal", "text", "number", "boolean", "null", "function", "unknown"})


@dataclass(frozen=True)
class RenderHint:
    is_compound: bool
    is_primitive: bool
    input_type: Optional[InputType] = None


@dataclass(frozen=True)
class FieldNode:
    """Form metadata for one position of a type tree.

    ``default`` always satisfies ``schema``. Nodes are immutable snapshots;
    helpers that hand out defaults return copies.
    """

    kind: FieldKind
    label: str
    display_label: str
    path: str
    candid_type: str
    default: Any
    component: ComponentType
    render_hint: RenderHint
    schema: FieldSchema = field(compare=False, repr=False)

    def validate(self, value: Any) -> bool:
        return self.schema.is_valid(value)

    def errors(self, value: Any) -> List[Dict[str, Any]]:
        return self.schema.errors(value)

    def get_default(self) -> Any:
        return copy.deepcopy(self.default)

    @property
    def is_compound(self) -> bool:
        return self.kind in COMPOUND_KINDS


# ---------------------------------------------------------------------------
# Compound fields
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecordField(FieldNode):
    fields: Tuple[FieldNode, ...] = ()

    def get_field(self, key: str) -> FieldNode:
        for child in self.fields:
            if child.label == key:
                return child
        raise KeyError(key)


@dataclass(frozen=True)
class TupleField(FieldNode):
    fields: Tuple[FieldNode, ...] = ()


@dataclass(frozen=True)
class VariantField(FieldNode):
    options: Tuple[FieldNode, ...] = ()
    default_option: str = ""

    @property
    def option_keys(self) -> Tuple[str, ...]:
        return tuple(option.label for option in self.options)

    def get_option(self, tag: str) -> FieldNode:
        for option in self.options:
            if option.label == tag:
                return option
        raise UnknownOptionError(tag, list(self.option_keys))

    def get_option_default(self, tag: str) -> Dict[str, Any]:
        option = self.get_option(tag)
        if option.kind == "null":
            return {"_type": tag}
        return {"_type": tag, tag: option.get_default()}

    def get_selected_key(self, value: Any) -> str:
        if isinstance(value, dict):
            selected = value.get("_type")
            if isinstance(selected, str):
                return selected
            keys = self.option_keys
            for key in value:
                if key in keys:
                    return key
        return self.default_option

    def get_selected_option(self, value: Any) -> FieldNode:
        return self.get_option(self.get_selected_key(value))


@dataclass(frozen=True)
class OptionalField(FieldNode):
    inner: Optional[FieldNode] = None

    def is_enabled(self, value: Any) -> bool:
        return value is not None

    def get_inner_default(self) -> Any:
        return self.inner.get_default() if self.inner is not None else None


@dataclass(frozen=True)
class VectorField(FieldNode):
    item_field: Optional[FieldNode] = None
    item_factory: Optional[Callable[[int, Optional[str]], FieldNode]] = field(
        default=None, compare=False, repr=False
    )

    def create_item_field(self, index: int, label: Optional[str] = None) -> FieldNode:
        """Fresh item field addressed at ``path[index]``."""
        if self.item_factory is None:
            raise RuntimeError(f"Vector field {self.path!r} cannot create items")
        return self.item_factory(index, label)

    def get_item_default(self) -> Any:
        return self.item_field.get_default() if self.item_field is not None else None


@dataclass(frozen=True)
class RecursiveField(FieldNode):
    type_name: str = ""
    recursion_depth: int = 0
    expand: Optional[Callable[[], FieldNode]] = field(default=None, compare=False, repr=False)
    thunk: Optional[RecursiveThunk[FieldNode]] = field(default=None, compare=False, repr=False)

    def extract(self) -> FieldNode:
        """Expand the inner field. Memoized for this node only."""
        if self.thunk is None:
            raise RuntimeError(f"Recursive field {self.path!r} has nothing to expand")
        return self.thunk.get()

    @property
    def is_expanded(self) -> bool:
        return self.thunk is not None and self.thunk.is_resolved

    def get_inner_default(self) -> Any:
        return self.extract().get_default()


# ---------------------------------------------------------------------------
# Primitive fields
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NumberField(FieldNode):
    unsigned: bool = False
    is_float: bool = False
    bits: Optional[int] = None
    min: Optional[str] = None
    max: Optional[str] = None
    placeholder: str = "0"


@dataclass(frozen=True)
class TextField(FieldNode):
    placeholder: str = "Enter text..."


@dataclass(frozen=True)
class PrincipalField(FieldNode):
    min_length: int = 7
    max_length: int = 64
    placeholder: str = "aaaaa-aa or full principal ID"


@dataclass(frozen=True)
class BlobField(FieldNode):
    accepted_formats: Tuple[str, ...] = ("hex", "file")


@dataclass(frozen=True)
class BooleanField(FieldNode):
    pass


@dataclass(frozen=True)
class NullField(FieldNode):
    pass


@dataclass(frozen=True)
class FunctionField(FieldNode):
    function_kind: str = "update"


@dataclass(frozen=True)
class UnknownField(FieldNode):
    pass
