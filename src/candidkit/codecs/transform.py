"""Apply display codecs to whole argument lists and method results.

A data-access layer calls ``encode_args`` right before a wire call and
``decode_result`` right after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from candidkit.codecs.builder import DisplayCodecBuilder
from candidkit.codecs.codec import Codec
from candidkit.idl import builders as IDL
from candidkit.idl.types import FunctionType, TypeNode
from candidkit.models.options import DisplayOptions


def type_from_array(types: Sequence[TypeNode]) -> TypeNode:
    """Single type for a list of types: ``null`` for none, itself for one, else a tuple."""
    if len(types) == 0:
        return IDL.Null
    if len(types) == 1:
        return types[0]
    return IDL.Tuple(*types)


def transform_args(args_codec: Codec, args: Optional[Sequence[Any]]) -> List[Any]:
    """Convert display-format arguments into wire arguments."""
    if not args:
        return list(args or [])
    if len(args) == 1:
        return [args_codec.as_candid(args[0])]
    return list(args_codec.as_candid(list(args)))


def transform_result(result_codec: Codec, result: Any) -> Any:
    """Convert a wire result into display format. ``None`` stays ``None``."""
    if result is None:
        return None
    return result_codec.as_display(result)


@dataclass(frozen=True)
class MethodCodecs:
    function_name: str
    args: Codec
    result: Codec

    def encode_args(self, args: Optional[Sequence[Any]]) -> List[Any]:
        return transform_args(self.args, args)

    def decode_result(self, result: Any) -> Any:
        return transform_result(self.result, result)


def build_method_codecs(
    func: FunctionType,
    function_name: str,
    options: Optional[DisplayOptions] = None,
) -> MethodCodecs:
    builder = DisplayCodecBuilder(options)
    return MethodCodecs(
        function_name=function_name,
        args=builder.build(type_from_array(func.args)),
        result=builder.build(type_from_array(func.rets)),
    )
