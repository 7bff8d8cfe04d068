from .index_stream import open_index_stream

__all__ = ["open_index_stream"]
