from .filesystem import EntryKind, FilesystemPort, WalkEntry

__all__ = ["EntryKind", "FilesystemPort", "WalkEntry"]
