"""
The graph nodes with their data, identity, change tracking, and remote verbs.

The data of a node are of two kinds: the data as known from the server,
and the changes made by the caller since the last load from the server.
Only the changes are sent back to the server on writes, never the whole data:
otherwise, the values echoed from the server would overwrite the concurrent
changes of other clients, or would be rejected as read-only.

A load from the server is "authoritative": the loaded fields are clean
afterwards, even if they were changed before. These are: the construction
with the initial data, a successful read, a page of an edge, a successful
creation. Any field set after that becomes dirty again.
"""
import keyword
import types
from typing import Any, Awaitable, ClassVar, Collection, Dict, Iterable, List, Mapping, \
                   Optional, Type, TypeVar, Union, overload

from typing_extensions import Literal

from nodegraph._cogs.clients import api
from nodegraph._cogs.helpers import typedefs
from nodegraph._cogs.structs import attributes, errors
from nodegraph._core.actions import loggers
from nodegraph._core.nodes import cursors

_SelfT = TypeVar('_SelfT', bound="CrudObject")
_TargetT = TypeVar('_TargetT', bound="CrudObject")


def _resolve_api(explicit: Optional[typedefs.Transport], owner: str) -> typedefs.Transport:
    resolved = explicit if explicit is not None else api.get_default_api()
    if resolved is None:
        raise errors.NotConfiguredError(
            f"{owner} does not have an API client, and there is no default one. "
            f"Did you forget to initialise the API session with `GraphAPI.init(...)`?")
    return resolved


class CrudObject:
    """
    A node of the graph, addressable by its id.

    The concrete classes declare their fields and, if they are the targets
    of the edges, the edge's endpoint name::

        class Campaign(CrudObject):
            fields = ['id', 'name', 'status']
            endpoint = 'campaigns'

    The declared fields are available as attributes (``campaign.name``),
    all fields are available via ``get()`` & ``set()``.
    """

    fields: ClassVar[Optional[Collection[str]]] = None
    endpoint: ClassVar[Optional[str]] = None

    _data: attributes.Attributes
    _changes: Dict[str, Any]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        # Fields that clash with the methods or are not identifiers are available via get/set only.
        for name in cls.__dict__.get('fields') or []:
            if name.isidentifier() and not keyword.iskeyword(name) and not hasattr(cls, name):
                setattr(cls, name, attributes.Field(name))

    def __init__(
            self,
            data: Optional[typedefs.RawData] = None,
            parent_id: Optional[str] = None,
            api: Optional[typedefs.Transport] = None,
    ) -> None:
        super().__init__()
        self._changes = {}
        self._data = attributes.Attributes(type(self).fields)
        self._parent_id = parent_id
        self._api = _resolve_api(api, type(self).__name__)
        self._logger = loggers.ObjectLogger(obj=self)
        if data:
            self.set_data(data)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self._data.export_data()!r}>'

    @classmethod
    def get_endpoint(cls) -> str:
        if not cls.endpoint:
            raise errors.ConfigurationError(f"{cls.__name__} has no endpoint to be used in edges.")
        return cls.endpoint

    @property
    def logger(self) -> loggers.ObjectLogger:
        return self._logger

    @property
    def data(self) -> attributes.Attributes:
        return self._data

    @property
    def changes(self) -> Mapping[str, Any]:
        return types.MappingProxyType(self._changes)

    @property
    def parent_id(self) -> Optional[str]:
        return self._parent_id

    def get(self, field: str, default: Any = None) -> Any:
        return self._data.get(field, default)

    def set(self: _SelfT, field: str, value: Any) -> _SelfT:
        self._data.set(field, value)
        self._changes[field] = value
        return self

    def set_data(self: _SelfT, data: typedefs.RawData) -> _SelfT:
        """
        Set the data as if they were loaded from the server: the fields become clean.
        """
        self._data.set_data(data)
        for key in data:
            self._changes.pop(key, None)
        return self

    def export_data(self) -> Dict[str, Any]:
        """
        Export the changed fields only, e.g. for the bodies of the writing requests.
        """
        return dict(self._changes)

    def clear_history(self: _SelfT) -> _SelfT:
        self._changes.clear()
        return self

    def get_id(self) -> str:
        id_ = self._data.get('id')
        if not id_:
            raise errors.IdentityMissingError(f"{type(self).__name__} id is not defined.")
        return id_

    def get_node_path(self) -> str:
        return self.get_id()

    def get_api(self) -> typedefs.Transport:
        return self._api

    async def read(
            self: _SelfT,
            fields: Iterable[str] = (),
            params: Optional[typedefs.Params] = None,
    ) -> _SelfT:
        transport = self.get_api()
        path = self.get_node_path()
        params = _with_fields(params, fields)
        self.logger.debug(f"Reading the fields: {params.get('fields') or 'default'}")
        response = await transport.call('GET', [path], params)
        return self.set_data(response)

    async def create(
            self: _SelfT,
            params: Optional[typedefs.Params] = None,
    ) -> _SelfT:
        """
        Create the node on the server under its parent, sending the changed fields only.
        """
        if not self._parent_id:
            raise errors.IdentityMissingError(f"{type(self).__name__} parent id is not defined.")
        transport = self.get_api()
        payload = dict(params or {}, **self._changes)
        self.logger.debug(f"Creating with the fields: {', '.join(self._changes) or 'none'}")
        response = await transport.call('POST', [self._parent_id, self.get_endpoint()], payload)
        return self.set_data(response or {}).clear_history()

    async def update(
            self: _SelfT,
            params: Optional[typedefs.Params] = None,
    ) -> _SelfT:
        """
        Send the changed fields to the server. The data are not re-read afterwards.
        """
        transport = self.get_api()
        path = self.get_node_path()
        payload = dict(params or {}, **self._changes)
        self.logger.debug(f"Updating the fields: {', '.join(self._changes) or 'none'}")
        await transport.call('POST', [path], payload)
        return self.clear_history()

    async def delete(
            self: _SelfT,
            params: Optional[typedefs.Params] = None,
    ) -> _SelfT:
        transport = self.get_api()
        path = self.get_node_path()
        self.logger.debug("Deleting.")
        await transport.call('DELETE', [path], dict(params or {}))
        return self

    @overload
    def get_edge(
            self,
            target_cls: Type[_TargetT],
            fields: Optional[Iterable[str]] = ...,
            params: Optional[typedefs.Params] = ...,
            fetch_first_page: Literal[True] = ...,
    ) -> Awaitable["cursors.Cursor[_TargetT]"]: ...

    @overload
    def get_edge(
            self,
            target_cls: Type[_TargetT],
            fields: Optional[Iterable[str]] = ...,
            params: Optional[typedefs.Params] = ...,
            *,
            fetch_first_page: Literal[False],
    ) -> "cursors.Cursor[_TargetT]": ...

    def get_edge(
            self,
            target_cls: Type[_TargetT],
            fields: Optional[Iterable[str]] = None,
            params: Optional[typedefs.Params] = None,
            fetch_first_page: bool = True,
    ) -> Union[Awaitable["cursors.Cursor[_TargetT]"], "cursors.Cursor[_TargetT]"]:
        """
        Paginate over the edge of this node towards the nodes of the target class.

        By default, the first page is fetched: the result must be awaited then.
        Otherwise, an empty cursor is returned as is, and its `Cursor.next`
        must be awaited to fetch the first page.
        """
        cursor = cursors.Cursor(self, target_cls, _with_fields(params, fields or ()))
        if fetch_first_page:
            return cursor.next()
        return cursor

    @classmethod
    async def get_by_ids(
            cls: Type[_SelfT],
            ids: Iterable[str],
            params: Optional[typedefs.Params] = None,
            fields: Iterable[str] = (),
            api: Optional[typedefs.Transport] = None,
    ) -> List[_SelfT]:
        """
        Read multiple nodes in one request.

        The nodes are returned in the order of the server's response,
        which is not necessarily the order of the requested ids.
        """
        transport = _resolve_api(api, cls.__name__)
        params = dict(_with_fields(params, fields), ids=','.join(ids))
        response = await transport.call('GET', [''], params)
        return [cls(data, api=transport) for data in response.values()]


def _with_fields(
        params: Optional[typedefs.Params],
        fields: Iterable[str],
) -> Dict[str, Any]:
    # Never mutate the caller's params: they can be reused for other requests.
    result = dict(params or {})
    joined = ','.join(fields)
    if joined:
        result['fields'] = joined
    return result
