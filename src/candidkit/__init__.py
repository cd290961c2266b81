"""candidkit.

Type-directed tooling for Candid interfaces.

Walks a Candid type tree and produces three parallel artifacts: form metadata
for building inputs, resolved value trees for read-only rendering, and codecs
converting between the exact wire representation and a JSON/text-safe display
representation.
"""

from candidkit.codecs.builder import DisplayCodecBuilder, did_to_display_codec, did_to_display_codecs
from candidkit.codecs.codec import Codec
from candidkit.codecs.registry import CodecRegistry, CodecRegistryError, register_codec
from candidkit.codecs.transform import (
    MethodCodecs,
    build_method_codecs,
    transform_args,
    transform_result,
    type_from_array,
)
from candidkit.core.exceptions import (
    CandidkitException,
    ConstructionError,
    ShapeMismatchError,
    UnknownOptionError,
)
from candidkit.core.logger import configure_root_logger, get_logger
from candidkit.core.principal import Principal, PrincipalError
from candidkit.fields.helpers import clone_field, is_compound_field, is_primitive_field, to_form_value
from candidkit.fields.methods import MethodFields, build_method_fields, build_service_fields, build_value_fields
from candidkit.fields.types import FieldNode
from candidkit.fields.visitor import FieldMetadataVisitor
from candidkit.models.options import DisplayOptions
from candidkit.resolver.methods import resolve_method_result, resolve_service_results
from candidkit.resolver.types import MismatchNode, ResolvedMethodResult, ResolvedNode
from candidkit.resolver.visitor import ValueResolver

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "CodecRegistry",
    "CodecRegistryError",
    "CandidkitException",
    "ConstructionError",
    "DisplayCodecBuilder",
    "DisplayOptions",
    "FieldMetadataVisitor",
    "FieldNode",
    "MethodCodecs",
    "MethodFields",
    "MismatchNode",
    "Principal",
    "PrincipalError",
    "ResolvedMethodResult",
    "ResolvedNode",
    "ShapeMismatchError",
    "UnknownOptionError",
    "ValueResolver",
    "build_method_codecs",
    "build_method_fields",
    "build_service_fields",
    "build_value_fields",
    "clone_field",
    "configure_root_logger",
    "did_to_display_codec",
    "did_to_display_codecs",
    "get_logger",
    "is_compound_field",
    "is_primitive_field",
    "register_codec",
    "resolve_method_result",
    "resolve_service_results",
    "to_form_value",
    "transform_args",
    "transform_result",
    "type_from_array",
]
