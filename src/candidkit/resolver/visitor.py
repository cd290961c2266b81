"""
ValueResolver zips a type tree with a concrete wire value.

The result is a ``ResolvedNode`` tree that a renderer can walk without knowing
anything about Candid: every node carries its display value, the raw value,
and formatting hints derived from labels and value shapes.

Only the parts of the type the value actually uses are visited. An absent
optional never touches its inner type, a variant only resolves its selected
option and recursive positions carry their display value but build no child
nodes until ``extract`` is called.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from candidkit.core.encoding import bytes_to_hex, is_byte_list, is_bytes_like, sha256_hex, to_bytes
from candidkit.core.exceptions import ShapeMismatchError, describe_value
from candidkit.core.labels import check_number_format, detect_text_format
from candidkit.core.logger import get_logger
from candidkit.core.principal import Principal, is_principal_text
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
from candidkit.models.options import DisplayOptions, resolve_options
from candidkit.resolver.types import LargeBlob, MismatchNode, RecursiveResolvedNode, ResolvedNode
from candidkit.visitor.node_builder import Build, NodeBuilder, VisitContext, type_name
from candidkit.visitor.thunk import RecursiveThunk

logger = get_logger(__name__)

_MISSING = object()


def _mismatch(ctx: VisitContext, expected: str, reason: Optional[str] = None) -> ShapeMismatchError:
    return ShapeMismatchError(path=ctx.path, expected=expected, actual=describe_value(ctx.payload), reason=reason)


def _principal_text(value: Any, ctx: VisitContext, expected: str) -> str:
    if isinstance(value, Principal):
        return value.to_text()
    if isinstance(value, str) and is_principal_text(value):
        return value
    raise _mismatch(ctx, expected)


class ValueResolverHandlers:
    """Per-shape rules pairing a type with the value in ``ctx.payload``.

    With ``expand_recursive`` set, recursive positions are resolved inline
    instead of being wrapped in a lazy node. The lazy handlers use such an
    expanding builder to compute the display value of a recursive position
    without keeping the nodes it produced.
    """

    def __init__(self, options: DisplayOptions, expand_recursive: bool = False):
        self.options = options
        self.expand_recursive = expand_recursive
        self._display_builder: Optional[NodeBuilder[ResolvedNode]] = None
        if not expand_recursive:
            self._display_builder = NodeBuilder(ValueResolverHandlers(options, expand_recursive=True))

    def _node(self, ctx: VisitContext, node: TypeNode, **kwargs: Any) -> ResolvedNode:
        kwargs.setdefault("raw", ctx.payload)
        return ResolvedNode(label=ctx.label, path=ctx.path, candid_type=node.name, **kwargs)

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def on_primitive(self, node: PrimitiveType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        kind = node.kind

        if node.is_number:
            return self._number(node, ctx)
        if kind == PrimitiveKind.TEXT:
            if not isinstance(value, str):
                raise _mismatch(ctx, node.name)
            return self._node(
                ctx, node, kind="text", display_type="string", value=value,
                text_format=detect_text_format(ctx.label, value),
            )
        if kind == PrimitiveKind.BOOL:
            if not isinstance(value, bool):
                raise _mismatch(ctx, node.name)
            return self._node(ctx, node, kind="boolean", display_type="boolean", value=value)
        if kind == PrimitiveKind.NULL:
            if value is not None:
                raise _mismatch(ctx, node.name)
            return self._node(ctx, node, kind="null", display_type="null", value=None)
        if kind == PrimitiveKind.PRINCIPAL:
            return self._node(
                ctx, node, kind="principal", display_type="string",
                value=_principal_text(value, ctx, node.name),
                display_hint="truncate", text_format="principal",
            )
        # reserved / empty: whatever came over the wire is passed through
        return self._node(ctx, node, kind="unknown", display_type="unknown", value=value)

    def _number(self, node: PrimitiveType, ctx: VisitContext) -> ResolvedNode:
        value = ctx.payload
        if isinstance(value, bool):
            raise _mismatch(ctx, node.name)

        if node.is_float:
            if not isinstance(value, (int, float)):
                raise _mismatch(ctx, node.name)
            return self._node(
                ctx, node, kind="number", display_type="number", value=value, number_format="value"
            )

        if not isinstance(value, int):
            raise _mismatch(ctx, node.name)
        low, high = node.int_range()
        if (low is not None and value < low) or (high is not None and value > high):
            raise _mismatch(ctx, node.name, "out of range")
        return self._node(
            ctx,
            node,
            kind="number",
            display_type="string" if node.is_big_integer else "number",
            value=str(value) if node.is_big_integer else value,
            number_format=check_number_format(ctx.label),
        )

    # ------------------------------------------------------------------
    # Compound types
    # ------------------------------------------------------------------

    def on_record(self, node: RecordType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        if not isinstance(value, dict):
            raise _mismatch(ctx, node.name)

        children = []
        for key, child in node.fields:
            item = value.get(key, _MISSING)
            if item is _MISSING:
                if not isinstance(child, OptionalType) and not is_null_type(child):
                    raise ShapeMismatchError(
                        path=ctx.field(key).path, expected=child.name, actual="missing"
                    )
                item = None
            children.append(build(child, ctx.field(key, item)))

        hint = "truncate" if len(children) > self.options.large_record_fields else "none"
        return self._node(
            ctx, node, kind="record", display_type="object", display_hint=hint,
            value={c.label: c.value for c in children}, children=tuple(children),
        )

    def on_tuple(self, node: TupleType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        if not isinstance(value, (list, tuple)) or len(value) != len(node.components):
            raise _mismatch(ctx, node.name, f"expected {len(node.components)} components")
        children = tuple(
            build(child, ctx.index(i, payload=value[i])) for i, child in enumerate(node.components)
        )
        return self._node(
            ctx, node, kind="tuple", display_type="array",
            value=[c.value for c in children], children=children,
        )

    def on_variant(self, node: VariantType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        if not isinstance(value, dict):
            raise _mismatch(ctx, node.name)

        if len(value) != 1:
            raise _mismatch(ctx, node.name, "expected exactly one variant tag")
        tag = next(iter(value))
        option = node.option_type(tag)
        if option is None:
            raise _mismatch(ctx, node.name, f"unknown tag {tag!r}")

        selected = build(option, ctx.option(tag, value.get(tag)))
        display: Dict[str, Any] = {"_type": tag}
        if not is_null_type(option):
            display[tag] = selected.value
        return self._node(
            ctx, node, kind="variant",
            display_type="result" if node.is_result else "variant",
            value=display, children=(selected,), selected=tag,
        )

    def on_optional(self, node: OptionalType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        if value is None or (isinstance(value, (list, tuple)) and len(value) == 0):
            return self._node(ctx, node, kind="optional", display_type="nullable", value=None)
        if not isinstance(value, (list, tuple)) or len(value) != 1:
            raise _mismatch(ctx, node.name, "expected [] or [value]")
        inner = build(node.inner, ctx.inner(value[0]))
        return self._node(
            ctx, node, kind="optional", display_type="nullable", value=inner.value, children=(inner,)
        )

    def on_vector(self, node: VectorType, ctx: VisitContext, build: Build) -> ResolvedNode:
        if node.is_blob:
            return self._blob(node, ctx)
        value = ctx.payload
        if not isinstance(value, (list, tuple)):
            raise _mismatch(ctx, node.name)
        children = tuple(build(node.item, ctx.item(i, payload=item)) for i, item in enumerate(value))
        return self._node(
            ctx, node, kind="vector", display_type="array",
            value=[c.value for c in children], children=children,
        )

    def _blob(self, node: VectorType, ctx: VisitContext) -> ResolvedNode:
        value = ctx.payload
        if not (is_bytes_like(value) or is_byte_list(value)):
            raise _mismatch(ctx, node.name)
        raw = to_bytes(value)
        if len(raw) <= self.options.blob_hex_threshold:
            return self._node(
                ctx, node, kind="blob", display_type="string", display_hint="hex",
                value=bytes_to_hex(raw, prefix=self.options.hex_prefix),
            )
        return self._node(
            ctx, node, kind="blob-large", display_type="object", display_hint="hex",
            value=LargeBlob(length=len(raw), sha256=sha256_hex(raw), value=raw),
        )

    def on_recursive(self, node: RecursiveType, ctx: VisitContext, build: Build) -> ResolvedNode:
        target = node.resolve()
        inner_ctx = ctx.enter_recursive(node.name)
        if self._display_builder is None:
            return build(target, inner_ctx)

        # Only the display value is kept; the node tree stays behind the thunk.
        display = self._display_builder.visit(target, inner_ctx).value
        thunk: RecursiveThunk[ResolvedNode] = RecursiveThunk(lambda: build(target, inner_ctx))
        return RecursiveResolvedNode(
            kind="recursive",
            label=ctx.label,
            path=ctx.path,
            candid_type=node.name,
            display_type="recursive",
            value=display,
            raw=ctx.payload,
            type_name=node.name,
            thunk=thunk,
        )

    # ------------------------------------------------------------------
    # References and fallbacks
    # ------------------------------------------------------------------

    def on_function(self, node: FunctionType, ctx: VisitContext, build: Build) -> ResolvedNode:
        value = ctx.payload
        if not isinstance(value, (list, tuple)) or len(value) != 2 or not isinstance(value[1], str):
            raise _mismatch(ctx, node.name, "expected [service, method]")
        service = _principal_text(value[0], ctx.index(0, payload=value[0]), "principal")
        return self._node(ctx, node, kind="function", display_type="array", value=[service, value[1]])

    def on_service(self, node: ServiceType, ctx: VisitContext, build: Build) -> ResolvedNode:
        return self._node(
            ctx, node, kind="principal", display_type="string",
            value=_principal_text(ctx.payload, ctx, node.name),
            display_hint="truncate", text_format="principal",
        )

    def on_unknown(self, node: Any, ctx: VisitContext, build: Build) -> ResolvedNode:
        return ResolvedNode(
            kind="unknown",
            label=ctx.label,
            path=ctx.path,
            candid_type=type_name(node),
            display_type="unknown",
            value=ctx.payload,
            raw=ctx.payload,
        )


class ValueResolver:
    """Resolves wire values against type trees.

    Example:
        >>> from candidkit.idl import builders as IDL
        >>> node = ValueResolver().resolve(IDL.Record({"balance": IDL.Nat}), {"balance": 10})
        >>> node.value
        {'balance': '10'}
    """

    def __init__(self, options: Optional[DisplayOptions] = None):
        self.options = resolve_options(options)
        self._builder: NodeBuilder[ResolvedNode] = NodeBuilder(ValueResolverHandlers(self.options))

    def resolve(self, node: TypeNode, value: Any, label: str = "", path: str = "") -> ResolvedNode:
        """Resolve ``value`` against ``node``; raises ``ShapeMismatchError``."""
        return self._builder.visit(node, VisitContext(path=path, label=label, payload=value))

    def resolve_or_mismatch(self, node: TypeNode, value: Any, label: str = "", path: str = "") -> ResolvedNode:
        """Like ``resolve`` but returns a ``MismatchNode`` instead of raising."""
        try:
            return self.resolve(node, value, label=label, path=path)
        except ShapeMismatchError as exc:
            logger.debug(f"Falling back to raw render for {type_name(node)}: {exc}")
            return MismatchNode(
                kind="mismatch",
                label=label,
                path=exc.path,
                candid_type=type_name(node),
                display_type="unknown",
                value=value,
                raw=value,
                error=exc,
            )

    def resolve_many(self, nodes: List[TypeNode], values: List[Any], prefix: str = "__ret") -> List[ResolvedNode]:
        if len(nodes) != len(values):
            raise ShapeMismatchError(
                path="", expected=f"{len(nodes)} values", actual=f"{len(values)} values"
            )
        return [
            self.resolve(node, value, label=f"{prefix}{i}", path=f"[{i}]")
            for i, (node, value) in enumerate(zip(nodes, values))
        ]
