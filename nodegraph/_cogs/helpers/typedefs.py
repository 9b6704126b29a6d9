"""
Rudimentary type [re-]definitions for cross-versioned Python & mypy.

Some stdlib classes have their type-sheds defined as generics, while the older
Python runtimes do not support subscripting them (e.g. ``logging.LoggerAdapter``).

This modules defines them in a most suitable and reusable way. Plus it adds
some common plain type definitions used across the codebase (for convenience).
"""
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Tuple, Union

from typing_extensions import Protocol

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# As publicly exposed: we only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]

# Raw data of the graph nodes, as sent & received over the wire.
RawData = Mapping[str, Any]

# A path of a request: either a sequence of segments, or a string (e.g. a server-issued URL).
Path = Union[str, Sequence[str], Tuple[str, ...]]

# Request parameters: query params for GETs/DELETEs, the body for POSTs.
Params = Mapping[str, Any]


class Transport(Protocol):
    """
    Anything that can perform the graph API calls: usually `GraphAPI`.

    The response is the parsed JSON: the raw data of a node for reads,
    the paginated envelope (``data``, ``paging``, ``summary``) for edges,
    a mapping of ids to the raw data for multi-id reads.
    """

    async def call(
            self,
            method: str,
            path: Path,
            params: Optional[Params] = None,
    ) -> Any:
        ...
