from .memory_index import DedupIndex

__all__ = ["DedupIndex"]
