from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional

from candidkit.codecs.codec import Codec


class CodecRegistryError(RuntimeError):
    pass


# (node, options) -> Codec
CodecFactory = Callable[[Any, Any], Codec]


class CodecRegistry:
    """Extension codecs for type names the builder does not model itself.

    Consulted only for UNKNOWN shapes; everything else has a built-in rule.
    """

    _registry: ClassVar[Dict[str, CodecFactory]] = {}

    @classmethod
    def register(
        cls,
        *,
        type_name: str,
        factory: CodecFactory,
        overwrite: bool = False,
    ) -> None:
        if not overwrite and type_name in cls._registry:
            existing = cls._registry[type_name]
            raise CodecRegistryError(
                f"Codec already registered for type_name={type_name!r}: {existing}"
            )
        cls._registry[type_name] = factory

    @classmethod
    def get(cls, type_name: str) -> CodecFactory:
        try:
            return cls._registry[type_name]
        except KeyError as exc:
            raise CodecRegistryError(f"No codec registered for type_name={type_name!r}") from exc

    @classmethod
    def try_get(cls, type_name: str) -> Optional[CodecFactory]:
        return cls._registry.get(type_name)

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


def register_codec(
    *,
    type_name: str,
    overwrite: bool = False,
) -> Callable[[CodecFactory], CodecFactory]:
    def decorator(factory: CodecFactory) -> CodecFactory:
        CodecRegistry.register(type_name=type_name, factory=factory, overwrite=overwrite)
        return factory

    return decorator
