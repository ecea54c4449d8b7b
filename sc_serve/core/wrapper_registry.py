from __future__ import annotations

from typing import Any, Dict, List, Type

from .wrapper import AbstractWrapper


class WrapperRegistry:
    """
    Registry of wrapper classes.

    Given a domain object, it finds the first registered wrapper class whose
    can_wrap() returns True and instantiates it around the object. Stores
    classes, not instances; each object gets its own wrapper.
    """

    def __init__(self) -> None:
        self._wrappers: Dict[str, Type[AbstractWrapper]] = {}

    def register(self, wrapper_cls: Type[AbstractWrapper]) -> None:
        """
        Register a wrapper class.

        Raises:
            TypeError: if wrapper_cls is not a subclass of AbstractWrapper
            ValueError: if a wrapper with the same 'id' already exists
        """
        if not isinstance(wrapper_cls, type) or not issubclass(wrapper_cls, AbstractWrapper):
            raise TypeError(f"Wrapper '{wrapper_cls!r}' must be a subclass of AbstractWrapper")

        if wrapper_cls.id in self._wrappers:
            raise ValueError(f"Wrapper '{wrapper_cls.id}' already registered")

        self._wrappers[wrapper_cls.id] = wrapper_cls

    def get(self, wrapper_id: str) -> Type[AbstractWrapper]:
        try:
            return self._wrappers[wrapper_id]
        except KeyError:
            raise KeyError(f"Wrapper '{wrapper_id}' not found") from None

    def create(self, obj: Any, **options: Any) -> AbstractWrapper:
        """
        Wrap `obj` with the first wrapper class that can handle it.

        :raises ValueError: if no registered wrapper can wrap the object
        """
        for wrapper_cls in self._wrappers.values():
            if wrapper_cls.can_wrap(obj):
                return wrapper_cls(obj, **options)

        raise ValueError(
            f"No wrapper can handle object of type '{type(obj).__name__}'. "
            f"Registered wrappers: {list(self._wrappers)}"
        )

    def all_classes(self) -> List[Type[AbstractWrapper]]:
        return list(self._wrappers.values())


def create_default_registry() -> WrapperRegistry:
    """
    Builds a registry with all known wrappers.
    """
    from sc_serve.wrappers import AnnDataWrapper, EmbeddingTableWrapper

    registry = WrapperRegistry()
    registry.register(AnnDataWrapper)
    registry.register(EmbeddingTableWrapper)
    return registry
