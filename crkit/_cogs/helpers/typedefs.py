"""
Type aliases shared across the codebase.

``logging.LoggerAdapter`` is generic in the type stubs, but it can be
subscripted at runtime only in the newer Pythons, so the generic form
is used for type-checking only.
"""
import logging
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# Any of the built-in loggable classes: the clients only call .debug()/.warning() on them.
Logger = Union[logging.Logger, LoggerAdapter]
