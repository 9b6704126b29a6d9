"""
Local errors of the object model.

These errors need no network round trip: they are raised immediately
(synchronously) when the objects or the cursors are misconfigured or misused.

The errors of the graph API server are in `nodegraph._cogs.clients.errors`,
and are never wrapped into these ones.
"""


class GraphObjectError(Exception):
    """ A base class for all errors of the object model. """


class ConfigurationError(GraphObjectError):
    """ An object class or an object is not configured properly. """


class NotConfiguredError(ConfigurationError):
    """ No API client is available where it is needed. """


class IdentityMissingError(GraphObjectError):
    """ An object has no id, so it cannot be addressed in the graph. """


class PaginationExhaustedError(GraphObjectError):
    """
    There is no page in the requested direction.

    It is a regular "end of data" signal rather than a failure:
    check `Cursor.has_next` or `Cursor.has_previous` to avoid it.
    """
