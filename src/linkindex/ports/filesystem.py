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

import enum
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    DANGLING_SYMLINK = "dangling_symlink"
    OTHER = "other"
    # Reported instead of the kinds above when the walk could not look inside.
    UNSTATABLE = "unstatable"
    UNREADABLE_DIRECTORY = "unreadable_directory"


@dataclass(frozen=True)
class WalkEntry:
    """One visited entry: its path as bytes, its kind and what stat said."""

    path: bytes
    kind: EntryKind
    stat: Optional[os.stat_result] = None
    error: Optional[OSError] = None


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def walk(
        self,
        root: bytes,
        *,
        follow_symlinks: bool = False,
        one_filesystem: bool = False,
    ) -> Iterator[WalkEntry]:
        """Yield every entry under `root` (root included) exactly once."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, path: bytes) -> None:
        """Remove a non-directory entry. A missing entry is not an error."""
        raise NotImplementedError

    @abstractmethod
    def link(self, source: bytes, destination: bytes) -> None:
        """Create `destination` as a hardlink of `source` (never through a symlink)."""
        raise NotImplementedError
