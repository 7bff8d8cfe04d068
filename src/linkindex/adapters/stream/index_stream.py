# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import contextlib
import sys
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional

from ...domain.errors import IndexStreamError

_MODES = {"r": "rb", "w": "wb"}


@contextlib.contextmanager
def open_index_stream(path: Optional[Path], mode: str) -> Iterator[BinaryIO]:
    """
    Open the index stream for reading ("r") or writing ("w").

    With no `path` the process's stdin/stdout is used; it is flushed on the
    way out but left open. A file is created or truncated when written and
    is closed on every exit path.
    """
    if mode not in _MODES:
        raise ValueError(f"Unsupported mode: {mode}")

    if path is None:
        std = sys.stdin if mode == "r" else sys.stdout
        stream = std.buffer
        try:
            yield stream
        finally:
            if mode == "w":
                _finish(stream.flush, "<stdout>")
        return

    try:
        fh = open(path, _MODES[mode])
    except OSError as e:
        raise IndexStreamError(f"{path}: cannot open index: {e.strerror}") from e
    try:
        yield fh
    finally:
        # Buffered writes may only fail here.
        _finish(fh.close, path)


def _finish(action: Callable[[], None], name: object) -> None:
    try:
        action()
    except OSError as e:
        raise IndexStreamError(f"{name}: write error: {e.strerror or e}") from e
