"""
Generic named-value storage of the graph nodes' data.

The fields are declared per class of the nodes (the schema), but the storage
is not limited to them: any other field can be set too, and it is registered
on the fly (e.g. when the server returns more than was declared).

The typed per-class accessors are the descriptors (:class:`Field`),
which are put to the classes once, never to the individual instances.
"""
from typing import Any, Collection, Dict, Iterator, List, Mapping, Optional, Tuple, TypeVar, \
                   overload

from nodegraph._cogs.structs import errors

_SelfT = TypeVar('_SelfT', bound="Attributes")


class Attributes(Mapping[str, Any]):
    """
    The current data of a node, with the declared and dynamically added fields.

    Reading an unset field gives ``None`` (or a default), never an error.
    The mapping protocol is read-only; the writes go via :meth:`set`.
    """

    def __init__(
            self,
            schema: Optional[Collection[str]],
            data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        if schema is None:
            raise errors.ConfigurationError("A schema of fields must be declared, even if empty.")
        self._fields: List[str] = []
        self._data: Dict[str, Any] = {}
        for field in schema:
            self._register(field)
        if data:
            self.set_data(data)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._data!r})'

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __getitem__(self, field: str) -> Any:
        return self._data[field]

    @property
    def registered(self) -> Tuple[str, ...]:
        return tuple(self._fields)

    def _register(self, field: str) -> None:
        if field not in self._fields:
            self._fields.append(field)

    def get(self, field: str, default: Any = None) -> Any:
        return self._data.get(field, default)

    def set(self: _SelfT, field: str, value: Any) -> _SelfT:
        self._register(field)
        self._data[field] = value
        return self

    def set_data(self: _SelfT, data: Mapping[str, Any]) -> _SelfT:
        for key, value in data.items():
            self.set(key, value)
        return self

    def export_data(self) -> Dict[str, Any]:
        return dict(self._data)


class Field:
    """
    A typed accessor of a declared field, put to the classes of the nodes.

    Reading goes via ``get()`` of the instance, writing goes via ``set()``,
    so that the writes are tracked exactly as the explicit ``set()`` calls.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__()
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    @overload
    def __get__(self, instance: None, owner: type) -> "Field": ...

    @overload
    def __get__(self, instance: object, owner: type) -> Any: ...

    def __get__(self, instance: Optional[object], owner: type) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)  # type: ignore

    def __set__(self, instance: object, value: Any) -> None:
        instance.set(self.name, value)  # type: ignore
