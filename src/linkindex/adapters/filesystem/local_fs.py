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

import logging
import os
import stat
from typing import Iterator, Optional, Union

from ...domain.errors import TraversalError
from ...ports.filesystem import EntryKind, FilesystemPort, WalkEntry

logger = logging.getLogger(__name__)


def _kind(st: os.stat_result) -> EntryKind:
    if stat.S_ISREG(st.st_mode):
        return EntryKind.FILE
    if stat.S_ISLNK(st.st_mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(st.st_mode):
        return EntryKind.DIRECTORY
    return EntryKind.OTHER


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter.

    The walk is a pre-order, depth-first traversal in directory listing
    order (no sorting), so an unchanged tree is always visited the same way.
    Paths are handled as bytes to keep undecodable names intact.

      - follow_symlinks=False stats entries with lstat and never descends
        through a symlinked directory.
      - follow_symlinks=True stats through symlinks and remembers visited
        directories so a symlink loop is entered only once.
      - one_filesystem=True leaves out everything on another device than
        the root.
    """

    def walk(
        self,
        root: Union[str, bytes, os.PathLike],
        *,
        follow_symlinks: bool = False,
        one_filesystem: bool = False,
    ) -> Iterator[WalkEntry]:
        root = os.fsencode(root)
        try:
            root_st = self._stat(root, follow_symlinks)
        except OSError as e:
            raise TraversalError(
                f"{os.fsdecode(root)}: cannot traverse directory: {e.strerror}"
            ) from e

        root_dev = root_st.st_dev
        visited_dirs: set[tuple[int, int]] = set()
        stack: list[tuple[bytes, Optional[os.stat_result]]] = [(root, root_st)]

        while stack:
            path, st = stack.pop()
            if st is None:
                try:
                    st = self._stat(path, follow_symlinks)
                except OSError as e:
                    yield self._unstatable(path, e, follow_symlinks)
                    continue

            if one_filesystem and st.st_dev != root_dev:
                logger.debug("LocalFS.walk: not crossing into %r", path)
                continue

            if not stat.S_ISDIR(st.st_mode):
                yield WalkEntry(path, _kind(st), st)
                continue

            if follow_symlinks:
                key = (st.st_dev, st.st_ino)
                if key in visited_dirs:
                    continue
                visited_dirs.add(key)

            try:
                with os.scandir(path) as it:
                    names = [entry.name for entry in it]
            except OSError as e:
                yield WalkEntry(path, EntryKind.UNREADABLE_DIRECTORY, st, e)
                continue

            yield WalkEntry(path, EntryKind.DIRECTORY, st)
            stack.extend((os.path.join(path, name), None) for name in reversed(names))

    def remove(self, path: bytes) -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass

    def link(self, source: bytes, destination: bytes) -> None:
        os.link(source, destination, follow_symlinks=False)

    # --- helpers ------------------------------------------------------------

    @staticmethod
    def _stat(path: bytes, follow_symlinks: bool) -> os.stat_result:
        return os.stat(path) if follow_symlinks else os.lstat(path)

    @staticmethod
    def _unstatable(path: bytes, error: OSError, follow_symlinks: bool) -> WalkEntry:
        # A symlink whose target is gone only fails when we stat through it.
        if follow_symlinks and isinstance(error, FileNotFoundError):
            try:
                lst = os.lstat(path)
            except OSError:
                pass
            else:
                if stat.S_ISLNK(lst.st_mode):
                    return WalkEntry(path, EntryKind.DANGLING_SYMLINK, lst)
        return WalkEntry(path, EntryKind.UNSTATABLE, None, error)
