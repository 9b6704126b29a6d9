"""
Pagination over the edges of the graph nodes.

A cursor holds one page of the edge's nodes at a time: every navigation
replaces the page, it never accumulates. The positions of the pages are known
only from the server's continuation tokens of the last loaded page
(``paging.next`` & ``paging.previous``), except for the very first page,
which is addressed by the source node's id and the edge's endpoint.

There is no "exhausted" state as such: it is only the absence of a token
in the requested direction, as seen in the last loaded page.

Navigations are not serialised: if two of them run concurrently on the same
cursor, they both start from the same tokens, and the last one to finish wins.
Await each navigation before starting the next one.
"""
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Generic, Iterator, List, Optional, \
                   Type, TypeVar, overload

from nodegraph._cogs.helpers import typedefs
from nodegraph._cogs.structs import errors

if TYPE_CHECKING:
    from nodegraph._core.nodes import objects

_T = TypeVar('_T', bound="objects.CrudObject")


class Cursor(Generic[_T]):
    """
    A page of the nodes on an edge, with navigation to the neighbouring pages.

    The nodes of the current page are in :attr:`objects`; the cursor itself
    can be iterated, indexed, and measured as a shortcut to them.
    Iterating with ``async for`` goes through the current page
    and then through all the following pages, loading them one by one.
    """

    objects: List[_T]
    paging: Optional[Dict[str, Any]]
    summary: Optional[Any]

    def __init__(
            self,
            source: "objects.CrudObject",
            target_cls: Type[_T],
            params: Optional[typedefs.Params] = None,
    ) -> None:
        super().__init__()
        token = (source.get_id(), target_cls.get_endpoint())
        self.target_cls = target_cls
        self.logger = source.logger
        self.paging = {'next': token}
        self.summary = None
        self.objects = []
        self._api = source.get_api()
        self._params: Optional[Dict[str, Any]] = dict(params) if params is not None else None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} of {self.target_cls.__name__}: {self.objects!r}>'

    def __len__(self) -> int:
        return len(self.objects)

    def __bool__(self) -> bool:
        return bool(self.objects)

    def __iter__(self) -> Iterator[_T]:
        return iter(self.objects)

    @overload
    def __getitem__(self, index: int) -> _T: ...

    @overload
    def __getitem__(self, index: slice) -> List[_T]: ...

    def __getitem__(self, index: Any) -> Any:
        return self.objects[index]

    async def __aiter__(self) -> AsyncIterator[_T]:
        for obj in list(self.objects):
            yield obj
        while self.has_next():
            await self.next()
            for obj in list(self.objects):
                yield obj

    def clear(self) -> None:
        self.objects.clear()

    def has_next(self) -> bool:
        return bool(self.paging) and bool(self.paging.get('next'))

    def has_previous(self) -> bool:
        return bool(self.paging) and bool(self.paging.get('previous'))

    async def next(self) -> "Cursor[_T]":
        if not self.has_next() or self.paging is None:
            raise errors.PaginationExhaustedError("End of pagination.")
        return await self._load_page(self.paging['next'])

    async def previous(self) -> "Cursor[_T]":
        if not self.has_previous() or self.paging is None:
            raise errors.PaginationExhaustedError("Start of pagination.")
        return await self._load_page(self.paging['previous'])

    async def _load_page(self, token: typedefs.Path) -> "Cursor[_T]":
        # The initial params are only needed for the first page: the server's tokens
        # carry the filters & fields onwards. Retries of a failed first page keep them.
        response = await self._api.call('GET', token, self._params)
        objects = [self.target_cls(data, api=self._api) for data in response.get('data', [])]
        self.objects[:] = objects
        self.paging = response.get('paging') or {}
        self.summary = response.get('summary')
        self._params = None
        self.logger.debug(f"Loaded a page of {len(objects)} {self.target_cls.__name__} objects.")
        return self
