from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from candidkit.codecs.codec import (
    Codec,
    identity_codec,
    index_path,
    lazy_codec,
    mismatch,
    optional_codec,
    record_codec,
    tuple_codec,
    variant_codec,
    vector_codec,
)
from candidkit.codecs.registry import CodecRegistry
from candidkit.core.encoding import (
    bytes_to_hex,
    hex_to_bytes,
    is_byte_list,
    is_bytes_like,
    is_hex_text,
    parse_int_text,
    to_bytes,
)
from candidkit.core.logger import get_logger
from candidkit.core.principal import Principal, PrincipalError
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
from candidkit.visitor.node_builder import Build, NodeBuilder, VisitContext, type_name
from candidkit.visitor.thunk import RecursiveThunk

logger = get_logger(__name__)


def _big_int_codec(node: PrimitiveType) -> Codec:
    """Exact integers on the wire, base-10 text for display."""
    low, high = node.int_range()
    name = node.name

    def to_display(value: Any, path: str) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            try:
                return str(parse_int_text(value))
            except ValueError:
                pass
        raise mismatch(path, name, value)

    def to_candid(value: Any, path: str) -> int:
        if isinstance(value, bool):
            raise mismatch(path, name, value)
        if isinstance(value, int):
            number = value
        elif isinstance(value, str):
            try:
                number = parse_int_text(value)
            except ValueError as exc:
                raise mismatch(path, name, value, str(exc)) from exc
        else:
            raise mismatch(path, name, value)
        if (low is not None and number < low) or (high is not None and number > high):
            raise mismatch(path, name, value, "out of range")
        return number

    return Codec(name, to_display, to_candid)


def _principal_codec(name: str = "principal") -> Codec:
    def to_display(value: Any, path: str) -> str:
        if isinstance(value, Principal):
            return value.to_text()
        if isinstance(value, str):
            return value
        raise mismatch(path, name, value)

    def to_candid(value: Any, path: str) -> Principal:
        if isinstance(value, Principal):
            return value
        if isinstance(value, str):
            try:
                return Principal.from_text(value)
            except PrincipalError as exc:
                raise mismatch(path, name, value, str(exc)) from exc
        raise mismatch(path, name, value)

    return Codec(name, to_display, to_candid)


def _blob_codec(options: DisplayOptions) -> Codec:
    threshold = options.blob_hex_threshold
    prefix = options.hex_prefix

    def to_display(value: Any, path: str) -> Any:
        if is_bytes_like(value) or is_byte_list(value):
            raw = to_bytes(value)
            if len(raw) <= threshold:
                return bytes_to_hex(raw, prefix=prefix)
            return raw
        if is_hex_text(value):
            return value
        raise mismatch(path, "blob", value)

    def to_candid(value: Any, path: str) -> bytes:
        if isinstance(value, str):
            try:
                return hex_to_bytes(value)
            except ValueError as exc:
                raise mismatch(path, "blob", value, str(exc)) from exc
        if is_bytes_like(value) or is_byte_list(value):
            return to_bytes(value)
        raise mismatch(path, "blob", value)

    return Codec("blob", to_display, to_candid)


def _function_codec(name: str) -> Codec:
    principal = _principal_codec()

    def _check(value: Any, path: str) -> None:
        if not isinstance(value, (list, tuple)) or len(value) != 2 or not isinstance(value[1], str):
            raise mismatch(path, name, value, "expected [service, method]")

    def to_display(value: Any, path: str) -> list:
        _check(value, path)
        return [principal.display_at(value[0], index_path(path, 0)), value[1]]

    def to_candid(value: Any, path: str) -> tuple:
        _check(value, path)
        return (principal.candid_at(value[0], index_path(path, 0)), value[1])

    return Codec(name, to_display, to_candid)


def _payload_kind(node: TypeNode) -> str:
    if is_null_type(node):
        return "null"
    if isinstance(node, OptionalType):
        return "optional"
    return "value"


class DisplayCodecHandlers:
    """Per-shape codec rules."""

    def __init__(self, options: DisplayOptions):
        self.options = options
        self._rec_cache: Dict[RecursiveType, Codec] = {}

    def on_primitive(self, node: PrimitiveType, ctx: VisitContext, build: Build) -> Codec:
        if node.is_big_integer:
            return _big_int_codec(node)
        if node.kind == PrimitiveKind.PRINCIPAL:
            return _principal_codec()
        return identity_codec(node.name)

    def on_record(self, node: RecordType, ctx: VisitContext, build: Build) -> Codec:
        fields = [
            (key, build(child, ctx.field(key)), isinstance(child, OptionalType))
            for key, child in node.fields
        ]
        return record_codec(node.name, fields)

    def on_tuple(self, node: TupleType, ctx: VisitContext, build: Build) -> Codec:
        return tuple_codec(node.name, [build(child, ctx.index(i)) for i, child in enumerate(node.components)])

    def on_vector(self, node: VectorType, ctx: VisitContext, build: Build) -> Codec:
        if node.is_blob:
            return _blob_codec(self.options)
        return vector_codec(node.name, build(node.item, ctx.item()))

    def on_optional(self, node: OptionalType, ctx: VisitContext, build: Build) -> Codec:
        return optional_codec(node.name, build(node.inner, ctx.inner()))

    def on_variant(self, node: VariantType, ctx: VisitContext, build: Build) -> Codec:
        options = [(tag, build(child, ctx.option(tag)), _payload_kind(child)) for tag, child in node.options]
        return variant_codec(node.name, options)

    def on_recursive(self, node: RecursiveType, ctx: VisitContext, build: Build) -> Codec:
        cached = self._rec_cache.get(node)
        if cached is not None:
            return cached
        # Validate eagerly so an unfilled node fails at build time, not per value.
        target = node.resolve()
        thunk: RecursiveThunk[Codec] = RecursiveThunk(lambda: build(target, ctx.enter_recursive(node.name)))
        codec = lazy_codec(node.name, thunk.get)
        self._rec_cache[node] = codec
        return codec

    def on_function(self, node: FunctionType, ctx: VisitContext, build: Build) -> Codec:
        return _function_codec(node.name)

    def on_service(self, node: ServiceType, ctx: VisitContext, build: Build) -> Codec:
        return _principal_codec(node.name)

    def on_unknown(self, node: Any, ctx: VisitContext, build: Build) -> Codec:
        name = type_name(node)
        factory = CodecRegistry.try_get(name)
        if factory is not None:
            return factory(node, self.options)
        return identity_codec(name)


class DisplayCodecBuilder:
    """Builds wire <-> display codecs from type trees.

    Example:
        >>> from candidkit.idl import builders as IDL
        >>> codec = DisplayCodecBuilder().build(IDL.Record({"name": IDL.Text, "age": IDL.Nat}))
        >>> codec.as_display({"name": "Alice", "age": 30})
        {'name': 'Alice', 'age': '30'}
    """

    def __init__(self, options: Optional[DisplayOptions] = None):
        self.options = resolve_options(options)
        self._builder: NodeBuilder[Codec] = NodeBuilder(DisplayCodecHandlers(self.options))

    def build(self, node: TypeNode) -> Codec:
        codec = self._builder.visit(node, VisitContext())
        logger.debug(f"Built display codec for {type_name(node)}")
        return codec


def did_to_display_codec(node: TypeNode, options: Optional[DisplayOptions] = None) -> Codec:
    return DisplayCodecBuilder(options).build(node)


def did_to_display_codecs(
    nodes: Mapping[str, TypeNode], options: Optional[DisplayOptions] = None
) -> Dict[str, Codec]:
    builder = DisplayCodecBuilder(options)
    return {name: builder.build(node) for name, node in nodes.items()}
