from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Tuple

from candidkit.core.exceptions import ShapeMismatchError
from candidkit.core.labels import NumberFormat, TextFormat
from candidkit.visitor.thunk import RecursiveThunk


ResolvedKind = Literal[
    "record",
    "tuple",
    "variant",
    "optional",
    "vector",
    "blob",
    "blob-large",
    "recursive",
    "principal",
    "number",
    "text",
    "boolean",
    "null",
    "function",
    "unknown",
    "mismatch",
]

DisplayType = Literal[
    "string",
    "number",
    "boolean",
    "null",
    "object",
    "array",
    "variant",
    "result",
    "nullable",
    "recursive",
    "unknown",
]

DisplayHint = Literal["truncate", "hex", "none"]


@dataclass(frozen=True)
class LargeBlob:
    """Summary of a blob too long to render as hex."""

    length: int
    sha256: str
    value: bytes


@dataclass(frozen=True)
class ResolvedNode:
    """A type node zipped with a concrete value, ready for rendering.

    ``value`` is the display form, ``raw`` the wire value that produced it.
    ``children`` only holds what the value actually contains: the selected
    variant option, the present optional payload, one node per vector item.
    """

    kind: ResolvedKind
    label: str
    path: str
    candid_type: str
    display_type: DisplayType
    value: Any
    raw: Any
    display_hint: DisplayHint = "none"
    children: Tuple["ResolvedNode", ...] = ()
    number_format: Optional[NumberFormat] = None
    text_format: Optional[TextFormat] = None
    selected: Optional[str] = None

    def child(self, label: str) -> "ResolvedNode":
        for node in self.children:
            if node.label == label:
                return node
        raise KeyError(label)

    @property
    def is_absent(self) -> bool:
        return self.kind == "optional" and not self.children


@dataclass(frozen=True)
class RecursiveResolvedNode(ResolvedNode):
    """Recursive position; the inner node is only resolved on ``extract``."""

    type_name: str = ""
    thunk: Optional[RecursiveThunk[ResolvedNode]] = field(default=None, compare=False, repr=False)

    def extract(self) -> ResolvedNode:
        if self.thunk is None:
            raise RuntimeError(f"Recursive node {self.path!r} has nothing to expand")
        return self.thunk.get()

    @property
    def is_expanded(self) -> bool:
        return self.thunk is not None and self.thunk.is_resolved


@dataclass(frozen=True)
class MismatchNode(ResolvedNode):
    """Stand-in for a value that did not fit its type."""

    error: Optional[ShapeMismatchError] = None

    @property
    def reason(self) -> str:
        return str(self.error) if self.error is not None else ""


@dataclass(frozen=True)
class ResolvedMethodResult:
    function_name: str
    function_type: str
    results: Tuple[ResolvedNode, ...]
    raw: Any

    @property
    def return_count(self) -> int:
        return len(self.results)

