"""
FieldMetadataVisitor generates form metadata from Candid type trees.

Design:

1. Works from the type tree only; no value dependencies.
2. Form-framework agnostic: each field carries a binding ``path``
   (``"[0].owner"``, ``"tags[1]"``), a ``default``, a pydantic-backed
   ``schema`` and a ``component`` tag with render hints.
3. Never expands more than the type requires: vector items are created on
   demand through ``create_item_field`` and recursive fields through
   ``extract``.

Example:
    >>> from candidkit.idl import builders as IDL
    >>> field = FieldMetadataVisitor().build(IDL.Record({"to": IDL.Principal, "amount": IDL.Nat}))
    >>> field.default
    {'to': '', 'amount': ''}
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from candidkit.core.labels import format_label
from candidkit.core.logger import get_logger
from candidkit.fields import schema as schemas
from candidkit.fields.schema import FieldSchema
from candidkit.fields.types import (
    BlobField,
    BooleanField,
    FieldNode,
    FunctionField,
    NullField,
    NumberField,
    OptionalField,
    PrincipalField,
    RecordField,
    RecursiveField,
    RenderHint,
    TextField,
    TupleField,
    UnknownField,
    VariantField,
    VectorField,
)
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
    VariantType,
    VectorType,
    is_null_type,
)
from candidkit.visitor.node_builder import Build, NodeBuilder, VisitContext, type_name
from candidkit.visitor.thunk import RecursiveThunk

logger = get_logger(__name__)

_COMPOUND = RenderHint(is_compound=True, is_primitive=False)


def _primitive_hint(input_type: Optional[str]) -> RenderHint:
    return RenderHint(is_compound=False, is_primitive=True, input_type=input_type)


def _base(ctx: VisitContext, candid_type: str) -> Dict[str, Any]:
    return {
        "label": ctx.label,
        "display_label": format_label(ctx.label),
        "path": ctx.path,
        "candid_type": candid_type,
    }


def _payload_kind(node: TypeNode) -> str:
    if is_null_type(node):
        return "null"
    if isinstance(node, OptionalType):
        return "optional"
    return "value"


class FieldMetadataHandlers:
    """Per-shape form metadata rules."""

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def on_primitive(self, node: PrimitiveType, ctx: VisitContext, build: Build) -> FieldNode:
        kind = node.kind
        base = _base(ctx, node.name)

        if node.is_number:
            low, high = node.int_range()
            return NumberField(
                kind="number",
                default="",
                component="number-input",
                render_hint=_primitive_hint("number"),
                schema=FieldSchema(schemas.number_annotation(node)),
                unsigned=node.is_unsigned,
                is_float=node.is_float,
                bits=node.bits,
                min=str(low) if low is not None else None,
                max=str(high) if high is not None else None,
                placeholder="0.0" if node.is_float else "0",
                **base,
            )
        if kind == PrimitiveKind.TEXT:
            return TextField(
                kind="text",
                default="",
                component="text-input",
                render_hint=_primitive_hint("text"),
                schema=FieldSchema(schemas.TEXT_ANNOTATION),
                **base,
            )
        if kind == PrimitiveKind.BOOL:
            return BooleanField(
                kind="boolean",
                default=False,
                component="boolean-checkbox",
                render_hint=_primitive_hint("checkbox"),
                schema=FieldSchema(schemas.BOOL_ANNOTATION),
                **base,
            )
        if kind == PrimitiveKind.NULL:
            return NullField(
                kind="null",
                default=None,
                component="null-hidden",
                render_hint=_primitive_hint(None),
                schema=FieldSchema(schemas.NULL_ANNOTATION),
                **base,
            )
        if kind == PrimitiveKind.PRINCIPAL:
            return PrincipalField(
                kind="principal",
                default="",
                component="principal-input",
                render_hint=_primitive_hint("text"),
                schema=FieldSchema(schemas.PRINCIPAL_ANNOTATION),
                **base,
            )
        # reserved / empty carry no editable value
        return self._unknown(ctx, node.name)

    # ------------------------------------------------------------------
    # Compound types
    # ------------------------------------------------------------------

    def on_record(self, node: RecordType, ctx: VisitContext, build: Build) -> FieldNode:
        fields = tuple(build(child, ctx.field(key)) for key, child in node.fields)
        return RecordField(
            kind="record",
            default={f.label: f.get_default() for f in fields},
            component="record-container",
            render_hint=_COMPOUND,
            schema=FieldSchema(schemas.record_annotation(ctx.path, [(f.label, f.schema.annotation) for f in fields])),
            fields=fields,
            **_base(ctx, node.name),
        )

    def on_tuple(self, node: TupleType, ctx: VisitContext, build: Build) -> FieldNode:
        fields = tuple(build(child, ctx.index(i)) for i, child in enumerate(node.components))
        return TupleField(
            kind="tuple",
            default=[f.get_default() for f in fields],
            component="tuple-container",
            render_hint=_COMPOUND,
            schema=FieldSchema(schemas.tuple_annotation([f.schema.annotation for f in fields])),
            fields=fields,
            **_base(ctx, node.name),
        )

    def on_variant(self, node: VariantType, ctx: VisitContext, build: Build) -> FieldNode:
        options = tuple(build(child, ctx.option(tag)) for tag, child in node.options)
        annotation = schemas.variant_annotation(
            ctx.path,
            [(tag, option.schema.annotation, _payload_kind(child)) for (tag, child), option in zip(node.options, options)],
        )
        # Variant defaults select the first declared option.
        first = options[0]
        default = {"_type": first.label} if first.kind == "null" else {"_type": first.label, first.label: first.get_default()}
        return VariantField(
            kind="variant",
            default=default,
            component="variant-select",
            render_hint=RenderHint(is_compound=True, is_primitive=False, input_type="select"),
            schema=FieldSchema(annotation),
            options=options,
            default_option=first.label,
            **_base(ctx, node.name),
        )

    def on_optional(self, node: OptionalType, ctx: VisitContext, build: Build) -> FieldNode:
        inner = build(node.inner, ctx.inner())
        return OptionalField(
            kind="optional",
            default=None,
            component="optional-toggle",
            render_hint=RenderHint(is_compound=True, is_primitive=False, input_type="checkbox"),
            schema=FieldSchema(schemas.optional_annotation(inner.schema.annotation)),
            inner=inner,
            **_base(ctx, node.name),
        )

    def on_vector(self, node: VectorType, ctx: VisitContext, build: Build) -> FieldNode:
        if node.is_blob:
            return BlobField(
                kind="blob",
                default="",
                component="blob-upload",
                render_hint=_primitive_hint("file"),
                schema=FieldSchema(schemas.BLOB_ANNOTATION),
                **_base(ctx, node.name),
            )

        item_type = node.item
        template = build(item_type, ctx.item(0))

        def item_factory(index: int, label: Optional[str] = None) -> FieldNode:
            return build(item_type, ctx.item(index, label))

        return VectorField(
            kind="vector",
            default=[],
            component="vector-list",
            render_hint=_COMPOUND,
            schema=FieldSchema(schemas.vector_annotation(template.schema.annotation)),
            item_field=template,
            item_factory=item_factory,
            **_base(ctx, node.name),
        )

    def on_recursive(self, node: RecursiveType, ctx: VisitContext, build: Build) -> FieldNode:
        target = node.resolve()
        inner_ctx = ctx.enter_recursive(node.name)

        def expand() -> FieldNode:
            return build(target, inner_ctx)

        thunk: RecursiveThunk[FieldNode] = RecursiveThunk(expand)
        return RecursiveField(
            kind="recursive",
            default=None,
            component="recursive-lazy",
            render_hint=_COMPOUND,
            schema=FieldSchema(schemas.lazy_annotation(lambda: thunk.get().schema)),
            type_name=node.name,
            recursion_depth=ctx.depth_of(node.name),
            expand=expand,
            thunk=thunk,
            **_base(ctx, node.name),
        )

    # ------------------------------------------------------------------
    # References and fallbacks
    # ------------------------------------------------------------------

    def on_function(self, node: FunctionType, ctx: VisitContext, build: Build) -> FieldNode:
        return FunctionField(
            kind="function",
            default=["", ""],
            component="function-input",
            render_hint=_primitive_hint("text"),
            schema=FieldSchema(schemas.FUNCTION_ANNOTATION),
            function_kind=node.function_kind,
            **_base(ctx, node.name),
        )

    def on_service(self, node: ServiceType, ctx: VisitContext, build: Build) -> FieldNode:
        return PrincipalField(
            kind="principal",
            default="",
            component="principal-input",
            render_hint=_primitive_hint("text"),
            schema=FieldSchema(schemas.PRINCIPAL_ANNOTATION),
            **_base(ctx, node.name),
        )

    def on_unknown(self, node: Any, ctx: VisitContext, build: Build) -> FieldNode:
        return self._unknown(ctx, type_name(node))

    def _unknown(self, ctx: VisitContext, candid_type: str) -> FieldNode:
        return UnknownField(
            kind="unknown",
            default=None,
            component="unknown-fallback",
            render_hint=_primitive_hint("textarea"),
            schema=FieldSchema(schemas.ANY_ANNOTATION),
            **_base(ctx, candid_type),
        )


class FieldMetadataVisitor:
    """Builds ``FieldNode`` trees from type trees."""

    def __init__(self) -> None:
        self._builder: NodeBuilder[FieldNode] = NodeBuilder(FieldMetadataHandlers())

    def build(self, node: TypeNode, label: str = "", path: str = "") -> FieldNode:
        field = self._builder.visit(node, VisitContext(path=path, label=label))
        logger.debug(f"Built {field.kind} field for {type_name(node)} at {path or '<root>'}")
        return field
