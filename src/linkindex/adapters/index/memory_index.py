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

from typing import Optional

from ...domain.identity import IdentityKey


class DedupIndex:
    """
    In-memory map from identity key to the canonical path of its group.

    - The first path observed for a key wins and is never replaced.
    - Keys are stored by value in a dict, so lookups are O(1) on average.
    - Lives for one scan: `close()` drops every entry, and the index refuses
      further use afterwards.
    - Implements context manager support (`with DedupIndex() as idx:`).
    """

    def __init__(self) -> None:
        self._canonical: Optional[dict[IdentityKey, bytes]] = {}

    # --- lifecycle ----------------------------------------------------------

    def close(self) -> None:
        if self._canonical is not None:
            self._canonical.clear()
            self._canonical = None

    @property
    def closed(self) -> bool:
        return self._canonical is None

    def __enter__(self) -> DedupIndex:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- public API ---------------------------------------------------------

    def observe(self, key: IdentityKey, path: bytes) -> Optional[bytes]:
        """
        Record `path` under `key` unless the key is already known.

        Returns:
            None when `path` became the canonical path of a new group,
            otherwise the canonical path stored earlier.
        """
        if self._canonical is None:
            raise RuntimeError("DedupIndex is closed")
        canonical = self._canonical.get(key)
        if canonical is None:
            self._canonical[key] = bytes(path)
        return canonical

    def __len__(self) -> int:
        return len(self._canonical) if self._canonical is not None else 0

    def __contains__(self, key: object) -> bool:
        return self._canonical is not None and key in self._canonical
