from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from candidkit.core.exceptions import ShapeMismatchError
from candidkit.idl.types import FunctionType, ServiceType
from candidkit.models.options import DisplayOptions
from candidkit.resolver.types import ResolvedMethodResult
from candidkit.resolver.visitor import ValueResolver


def _as_returns(func: FunctionType, values: Any) -> Sequence[Any]:
    # A single return value may be passed bare.
    if len(func.rets) == 1 and not (isinstance(values, tuple) and len(values) == 1):
        return (values,)
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        raise ShapeMismatchError(path="", expected=f"{len(func.rets)} return values", actual=type(values).__name__)
    return values


def resolve_method_result(
    func: FunctionType,
    function_name: str,
    values: Any,
    options: Optional[DisplayOptions] = None,
    resolver: Optional[ValueResolver] = None,
) -> ResolvedMethodResult:
    """Resolve the decoded return values of one call.

    Multiple return values are passed as a tuple; a method with a single
    return type accepts its value directly.
    """
    resolver = resolver or ValueResolver(options)
    results = resolver.resolve_many(list(func.rets), list(_as_returns(func, values)))
    return ResolvedMethodResult(
        function_name=function_name,
        function_type=func.function_kind,
        results=tuple(results),
        raw=values,
    )


def resolve_service_results(
    service: ServiceType,
    values: Dict[str, Any],
    options: Optional[DisplayOptions] = None,
) -> Dict[str, ResolvedMethodResult]:
    """Resolve results for several methods of one service, keyed by method name."""
    resolver = ValueResolver(options)
    return {
        name: resolve_method_result(service.method(name), name, raw, resolver=resolver)
        for name, raw in values.items()
    }
