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
from typing import BinaryIO, Iterator, Optional, Union

from ..codec import decode_record
from ..config import MAX_LINE, RestoreOptions
from ..domain.errors import IndexFormatError, IndexStreamError, ReplayError
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestoreSummary:
    lines: int = 0
    linked: int = 0
    failed: int = 0
    warnings: int = 0


class RestoreService:
    """
    Replays an index stream as hardlinks below a target root.

    Every line stands on its own: the destination is removed (a missing
    destination is fine) and recreated as a hardlink of the source. Since a
    scan never lists the same destination twice, the order of the lines does
    not change the resulting tree.

    Relative paths in the index are resolved against the target root;
    absolute paths are used as they are.
    """

    def __init__(self, fs: FilesystemPort, options: Optional[RestoreOptions] = None) -> None:
        self._fs = fs
        self._options = options or RestoreOptions()

    def restore(
        self, stream: BinaryIO, target_root: Union[str, bytes, os.PathLike] = "."
    ) -> RestoreSummary:
        """
        Replay every line of `stream`.

        Raises:
            IndexFormatError: on a malformed line, unless forced.
            ReplayError: when a destination cannot be replaced, unless forced.
            IndexStreamError: when the stream cannot be read.
        """
        root = os.fsencode(target_root)
        lines = linked = failed = warnings = 0

        for lineno, line in enumerate(self._lines(stream), start=1):
            lines += 1
            try:
                record, garbage = decode_record(line)
            except IndexFormatError as e:
                msg = f"line {lineno}: {_show(line)}: {e}"
                if not self._options.force:
                    raise IndexFormatError(msg) from e
                logger.warning("%s", msg)
                warnings += 1
                failed += 1
                continue

            if garbage:
                logger.warning("line %d: %s: Garbage after line", lineno, _show(line))
                warnings += 1

            source = self._resolve(root, record.source)
            destination = self._resolve(root, record.destination)
            if self._replay(source, destination):
                linked += 1
            else:
                warnings += 1
                failed += 1

        return RestoreSummary(lines, linked, failed, warnings)

    # --- helpers ------------------------------------------------------------

    def _lines(self, stream: BinaryIO) -> Iterator[bytes]:
        while True:
            # One byte past the limit so an overlong line is noticed.
            line = self._readline(stream, MAX_LINE + 1)
            if not line:
                return
            if len(line) > MAX_LINE and not line.endswith(b"\n"):
                # Drop the rest of an overlong line; it is reported once.
                tail = line
                while tail and not tail.endswith(b"\n"):
                    tail = self._readline(stream, MAX_LINE + 1)
            yield line

    @staticmethod
    def _readline(stream: BinaryIO, size: int) -> bytes:
        try:
            return stream.readline(size)
        except OSError as e:
            raise IndexStreamError(f"read error: {e.strerror or e}") from e

    @staticmethod
    def _resolve(root: bytes, path: bytes) -> bytes:
        if os.path.isabs(path) or root in (b"", b"."):
            return path
        return os.path.join(root, path)

    def _replay(self, source: bytes, destination: bytes) -> bool:
        src, dst = os.fsdecode(source), os.fsdecode(destination)
        logger.info("%s -> %s", src, dst)

        if self._options.dry_run:
            return True

        try:
            self._fs.remove(destination)
        except OSError as e:
            return self._fail(f"{dst}: Cannot unlink: {e.strerror or e}", e)

        try:
            self._fs.link(source, destination)
        except OSError as e:
            return self._fail(f"{src} -> {dst}: Cannot link: {e.strerror or e}", e)

        return True

    def _fail(self, msg: str, error: OSError) -> bool:
        if not self._options.force:
            raise ReplayError(msg) from error
        logger.warning("%s", msg)
        return False


_SHOW_LIMIT = 120


def _show(line: bytes) -> str:
    line = line.rstrip(b"\n")
    if len(line) > _SHOW_LIMIT:
        return repr(line[:_SHOW_LIMIT]) + f"... ({len(line)} bytes)"
    return repr(line)
