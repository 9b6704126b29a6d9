"""
Detecting the library's own version from the installed distribution's metadata.

It is used in the User-Agent of the API requests. When running from a source
tree without installation, there is no version.
"""
import importlib.metadata
from typing import Optional

version: Optional[str] = None

try:
    name, *_ = __name__.split('.')  # usually "nodegraph", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass
