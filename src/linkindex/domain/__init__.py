from .errors import (
    IndexFormatError,
    IndexStreamError,
    LinkIndexError,
    PathTooLongError,
    ReplayError,
    TraversalError,
)
from .identity import IdentityKey, IndexRecord

__all__ = [
    "IdentityKey",
    "IndexFormatError",
    "IndexRecord",
    "IndexStreamError",
    "LinkIndexError",
    "PathTooLongError",
    "ReplayError",
    "TraversalError",
]
