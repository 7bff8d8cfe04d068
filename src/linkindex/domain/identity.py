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

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class IdentityKey:
    """
    Identity of a storage object within one scan.

    Two keys are equal when their inode numbers match. The device id is
    carried along for diagnostics only: a scan is expected to stay on the
    filesystem it started on.
    """

    device: int = field(compare=False)
    inode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> IdentityKey:
        return cls(device=st.st_dev, inode=st.st_ino)


@dataclass(frozen=True)
class IndexRecord:
    """One line of the index: `destination` is a hardlink of `source`."""

    source: bytes
    destination: bytes
