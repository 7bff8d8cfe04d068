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
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional, Union

from ..adapters.index.memory_index import DedupIndex
from ..codec import encode_record
from ..config import MAX_PATH, ScanOptions
from ..domain.errors import IndexStreamError, PathTooLongError
from ..domain.identity import IdentityKey, IndexRecord
from ..ports.filesystem import EntryKind, FilesystemPort, WalkEntry

logger = logging.getLogger(__name__)

_LINKABLE = (EntryKind.FILE, EntryKind.SYMLINK, EntryKind.DANGLING_SYMLINK)
_UNREADABLE = (EntryKind.UNSTATABLE, EntryKind.UNREADABLE_DIRECTORY)


@dataclass(frozen=True)
class ScanSummary:
    entries: int = 0
    hardlinked: int = 0
    groups: int = 0
    records: int = 0
    warnings: int = 0


class ScanService:
    """
    Orchestrates a hardlink scan:
      - walks the filesystem below a root
      - keys every file or symlink with more than one link by its inode
      - writes one index line per duplicate: "<canonical>" "<this path>"

    Note:
      * The canonical path of a group is whichever path the walk reaches
        first, so it depends on traversal order. Rescanning an unchanged
        tree reproduces the same choice.
      * A path longer than MAX_PATH aborts the scan; an index that silently
        misses links cannot be trusted for a restore.
    """

    def __init__(
        self,
        fs: FilesystemPort,
        options: Optional[ScanOptions] = None,
        *,
        index_factory: Callable[[], DedupIndex] = DedupIndex,
    ) -> None:
        self._fs = fs
        self._options = options or ScanOptions()
        self._index_factory = index_factory

    def scan(self, root: Union[str, bytes, os.PathLike], out: BinaryIO) -> ScanSummary:
        """
        Scan the tree rooted at `root` and write index lines to `out`.

        Returns:
            Counters describing what was visited and written.
        """
        opts = self._options
        entries = hardlinked = records = warnings = 0

        with self._index_factory() as index:
            walk = self._fs.walk(
                os.fsencode(root),
                follow_symlinks=opts.follow_symlinks,
                one_filesystem=opts.one_filesystem,
            )
            for entry in walk:
                entries += 1

                if len(entry.path) > MAX_PATH:
                    raise PathTooLongError(f"{os.fsdecode(entry.path)}: Path too long")

                if entry.kind in _UNREADABLE:
                    warnings += 1
                    if not opts.quiet:
                        logger.warning("%s: %s", os.fsdecode(entry.path), _reason(entry))
                    continue

                if entry.kind not in _LINKABLE or entry.stat is None:
                    continue
                if entry.stat.st_nlink < 2:
                    continue

                hardlinked += 1
                canonical = index.observe(IdentityKey.from_stat(entry.stat), entry.path)
                if canonical is None:
                    continue

                try:
                    out.write(encode_record(IndexRecord(canonical, entry.path)))
                except OSError as e:
                    raise IndexStreamError(f"write error: {e.strerror or e}") from e
                records += 1

            groups = len(index)

        logger.debug(
            "ScanService.scan: %d entries, %d hardlinked, %d groups, %d records",
            entries,
            hardlinked,
            groups,
            records,
        )
        return ScanSummary(entries, hardlinked, groups, records, warnings)


def _reason(entry: WalkEntry) -> str:
    if entry.error is not None and entry.error.strerror:
        return entry.error.strerror
    return "Permission denied"
