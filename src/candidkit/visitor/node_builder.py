"""Shape-directed dispatch shared by the field, resolver and codec producers.

The recursion structure lives here once. Each producer supplies a handler set
implementing ``ShapeHandlers``; a handler receives the node, its context and
the ``build`` callable to descend into whichever children it needs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, Optional, Protocol, Tuple, TypeVar

from candidkit.idl.types import (
    FunctionType,
    OptionalType,
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
)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class VisitContext:
    """Immutable per-node context threaded through a visit.

    ``payload`` is producer specific: the value resolver carries the concrete
    value being walked, the other producers leave it empty.
    """

    path: str = ""
    label: str = ""
    seen: Tuple[str, ...] = ()
    payload: Any = None

    def field(self, key: str, payload: Any = None) -> "VisitContext":
        path = f"{self.path}.{key}" if self.path else key
        return replace(self, path=path, label=key, payload=payload)

    def option(self, tag: str, payload: Any = None) -> "VisitContext":
        return self.field(tag, payload)

    def index(self, position: int, label: Optional[str] = None, payload: Any = None) -> "VisitContext":
        return replace(
            self,
            path=f"{self.path}[{position}]",
            label=label if label is not None else f"_{position}_",
            payload=payload,
        )

    def item(self, position: int = 0, label: Optional[str] = None, payload: Any = None) -> "VisitContext":
        return self.index(position, label if label is not None else f"{self.label}_item", payload)

    def inner(self, payload: Any = None) -> "VisitContext":
        """Optional payloads keep the parent's path and label."""
        return replace(self, payload=payload)

    def enter_recursive(self, name: str) -> "VisitContext":
        return replace(self, seen=self.seen + (name,))

    def depth_of(self, name: str) -> int:
        return self.seen.count(name)


Build = Callable[[TypeNode, VisitContext], T]


class ShapeHandlers(Protocol[T_co]):
    def on_primitive(self, node: PrimitiveType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_record(self, node: RecordType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_tuple(self, node: TupleType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_vector(self, node: VectorType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_optional(self, node: OptionalType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_variant(self, node: VariantType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_recursive(self, node: RecursiveType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_function(self, node: FunctionType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_service(self, node: ServiceType, ctx: VisitContext, build: Build) -> T_co: ...

    def on_unknown(self, node: Any, ctx: VisitContext, build: Build) -> T_co: ...


_DISPATCH: Dict[Shape, str] = {
    Shape.PRIMITIVE: "on_primitive",
    Shape.RECORD: "on_record",
    Shape.TUPLE: "on_tuple",
    Shape.VECTOR: "on_vector",
    Shape.OPTIONAL: "on_optional",
    Shape.VARIANT: "on_variant",
    Shape.RECURSIVE: "on_recursive",
    Shape.FUNCTION: "on_function",
    Shape.SERVICE: "on_service",
    Shape.UNKNOWN: "on_unknown",
}

_missing = set(Shape) - set(_DISPATCH)
if _missing:
    raise RuntimeError(f"No handler mapped for shapes: {sorted(s.value for s in _missing)}")

HANDLER_METHODS: Tuple[str, ...] = tuple(_DISPATCH.values())


def shape_of(node: Any) -> Shape:
    """Shape tag of a node; anything unrecognised is treated as UNKNOWN."""
    shape = getattr(node, "shape", None)
    return shape if isinstance(shape, Shape) else Shape.UNKNOWN


def type_name(node: Any) -> str:
    name = getattr(node, "name", None)
    return name if isinstance(name, str) else type(node).__name__


class NodeBuilder(Generic[T]):
    """Generic fold over a type tree parameterized by a handler set."""

    def __init__(self, handlers: ShapeHandlers[T]):
        missing = [name for name in HANDLER_METHODS if not callable(getattr(handlers, name, None))]
        if missing:
            raise TypeError(f"{type(handlers).__name__} is missing shape handlers: {missing}")
        self.handlers = handlers

    def visit(self, node: TypeNode, ctx: Optional[VisitContext] = None) -> T:
        ctx = ctx if ctx is not None else VisitContext()
        shape = shape_of(node)
        if shape is Shape.UNKNOWN and not isinstance(node, UnknownType):
            node = UnknownType(type_name(node))
        handler = getattr(self.handlers, _DISPATCH[shape])
        return handler(node, ctx, self.visit)
