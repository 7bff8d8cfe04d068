# Licensed under the Apache License, Version 2.0


class LinkIndexError(Exception):
    """Base exception for domain-specific errors."""


class PathTooLongError(LinkIndexError):
    """A path exceeds the longest path the index format accepts."""


class IndexFormatError(LinkIndexError):
    """A line or token of the index stream cannot be decoded."""


class IndexStreamError(LinkIndexError):
    """The index stream cannot be opened, read or written."""


class TraversalError(LinkIndexError):
    """The directory walk cannot start."""


class ReplayError(LinkIndexError):
    """Removing a destination or creating a hardlink failed."""
