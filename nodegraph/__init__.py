"""
The main nodegraph module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from nodegraph._cogs.clients.api import (
    GraphAPI,
    get_default_api,
    set_default_api,
)
from nodegraph._cogs.clients.errors import (
    GraphAPIError,
    GraphUnauthorizedError,
    GraphForbiddenError,
    GraphNotFoundError,
    GraphServerError,
)
from nodegraph._cogs.configs.configuration import (
    GraphSettings,
    APISettings,
    NetworkingSettings,
)
from nodegraph._cogs.helpers.typedefs import (
    Logger,
    Transport,
)
from nodegraph._cogs.helpers.versions import (
    version as __version__,
)
from nodegraph._cogs.structs.attributes import (
    Attributes,
    Field,
)
from nodegraph._cogs.structs.errors import (
    GraphObjectError,
    ConfigurationError,
    NotConfiguredError,
    IdentityMissingError,
    PaginationExhaustedError,
)
from nodegraph._core.actions.loggers import (
    LogFormat,
    ObjectLogger,
    configure,
)
from nodegraph._core.nodes.cursors import (
    Cursor,
)
from nodegraph._core.nodes.objects import (
    CrudObject,
)

__all__ = [
    'GraphAPI',
    'get_default_api',
    'set_default_api',
    'GraphAPIError',
    'GraphUnauthorizedError',
    'GraphForbiddenError',
    'GraphNotFoundError',
    'GraphServerError',
    'GraphSettings',
    'APISettings',
    'NetworkingSettings',
    'Logger',
    'Transport',
    'Attributes',
    'Field',
    'GraphObjectError',
    'ConfigurationError',
    'NotConfiguredError',
    'IdentityMissingError',
    'PaginationExhaustedError',
    'LogFormat',
    'ObjectLogger',
    'configure',
    'Cursor',
    'CrudObject',
]
