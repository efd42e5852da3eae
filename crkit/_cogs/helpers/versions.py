"""
The library's own version, as installed.

Releases are made by tagging, so the version is not in the code: it is taken
from the installed distribution's metadata once, when the code is loaded.
It is ``None`` when running from a source tree that is not installed.
"""
import importlib.metadata
from typing import Optional

version: Optional[str]

try:
    version = importlib.metadata.version(__name__.split('.')[0])  # "crkit", unless renamed.
except importlib.metadata.PackageNotFoundError:
    version = None
