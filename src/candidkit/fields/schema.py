"""Validation schemas for form fields, built on pydantic.

Each field carries a ``FieldSchema`` wrapping a Python type annotation. The
pydantic ``TypeAdapter`` is compiled on first use only, so building metadata
for a large interface stays cheap.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import AfterValidator, Field, InstanceOf, StrictBool, StrictBytes, StrictStr, TypeAdapter, ValidationError
from typing_extensions import Annotated, NotRequired, TypedDict

from candidkit.core.encoding import is_hex_text, is_int_text, parse_int_text
from candidkit.core.principal import Principal, is_principal_text
from candidkit.idl.types import PrimitiveType

_NON_IDENT = re.compile(r"\W")


class FieldSchema:
    """Lazily compiled pydantic validator for one field."""

    __slots__ = ("annotation", "_adapter")

    def __init__(self, annotation: Any):
        self.annotation = annotation
        self._adapter: Optional[TypeAdapter] = None

    @property
    def adapter(self) -> TypeAdapter:
        if self._adapter is None:
            self._adapter = TypeAdapter(self.annotation)
        return self._adapter

    def validate(self, value: Any) -> Any:
        """Validate and return the value; raises pydantic ``ValidationError``."""
        return self.adapter.validate_python(value)

    def is_valid(self, value: Any) -> bool:
        try:
            self.validate(value)
        except ValidationError:
            return False
        return True

    def errors(self, value: Any) -> List[Dict[str, Any]]:
        try:
            self.validate(value)
        except ValidationError as exc:
            return exc.errors()
        return []

    def __repr__(self) -> str:
        return f"FieldSchema({self.annotation!r})"


def _type_name(prefix: str, path: str) -> str:
    return f"{prefix}_{_NON_IDENT.sub('_', path) or 'root'}"


# ---------------------------------------------------------------------------
# Primitive annotations
# ---------------------------------------------------------------------------

def _integer_check(node: PrimitiveType) -> Callable[[str], str]:
    low, high = node.int_range()

    def check(value: str) -> str:
        if value == "":
            return value
        if not is_int_text(value):
            raise ValueError(f"{node.name} expects an integer")
        number = parse_int_text(value)
        if low is not None and number < low:
            raise ValueError(f"{node.name} must be >= {low}")
        if high is not None and number > high:
            raise ValueError(f"{node.name} must be <= {high}")
        return value

    return check


def _float_check(value: str) -> str:
    if value == "":
        return value
    try:
        float(value)
    except ValueError as exc:
        raise ValueError("expects a decimal number") from exc
    return value


def _principal_check(value: str) -> str:
    # Empty stays valid until the user types something.
    if value == "" or is_principal_text(value):
        return value
    raise ValueError("Invalid Principal format")


def _hex_check(value: str) -> str:
    if value == "" or is_hex_text(value):
        return value
    raise ValueError("expects an even-length hex string")


def number_annotation(node: PrimitiveType) -> Any:
    check = _float_check if node.is_float else _integer_check(node)
    return Annotated[StrictStr, AfterValidator(check)]


PRINCIPAL_ANNOTATION = Union[Annotated[StrictStr, AfterValidator(_principal_check)], InstanceOf[Principal]]

BLOB_ANNOTATION = Union[
    Annotated[StrictStr, AfterValidator(_hex_check)],
    StrictBytes,
    List[Annotated[int, Field(ge=0, le=255)]],
]

TEXT_ANNOTATION = StrictStr
BOOL_ANNOTATION = StrictBool
NULL_ANNOTATION = None
ANY_ANNOTATION = Any
FUNCTION_ANNOTATION = Tuple[PRINCIPAL_ANNOTATION, StrictStr]


# ---------------------------------------------------------------------------
# Composite annotations
# ---------------------------------------------------------------------------

def record_annotation(path: str, fields: Sequence[Tuple[str, Any]]) -> Any:
    return TypedDict(_type_name("Record", path), {key: ann for key, ann in fields})


def tuple_annotation(components: Sequence[Any]) -> Any:
    if not components:
        return Tuple[()]
    return Tuple[tuple(components)]


def vector_annotation(item: Any) -> Any:
    return List[item]


def optional_annotation(inner: Any) -> Any:
    return Optional[inner]


def variant_annotation(path: str, options: Sequence[Tuple[str, Any, str]]) -> Any:
    """``options`` holds ``(tag, payload annotation, payload kind)`` with kind in
    ``null`` / ``optional`` / ``value``."""
    members = []
    for tag, ann, payload in options:
        shape: Dict[str, Any] = {"_type": Literal[tag]}
        if payload == "optional":
            shape[tag] = NotRequired[ann]
        elif payload == "value":
            shape[tag] = ann
        members.append(TypedDict(_type_name(f"Variant_{tag}", path), shape))
    if len(members) == 1:
        return members[0]
    return Annotated[Union[tuple(members)], Field(discriminator="_type")]


def lazy_annotation(resolve: Callable[[], FieldSchema]) -> Any:
    """Recursive fields validate through the expanded inner schema, on demand."""

    def check(value: Any) -> Any:
        if value is None:
            return value
        return resolve().validate(value)

    return Annotated[Any, AfterValidator(check)]
