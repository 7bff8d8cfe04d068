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

"""
Central configuration for linkindex.

Holds the size limits of the index format and the option objects that
are handed to the scan and restore services.
"""

from dataclasses import dataclass

# Longest path (in bytes) that may be recorded in an index.
MAX_PATH = 4096

# An escaped path can double in size, plus its two quotes.
MAX_ESCAPED_PATH = 2 * MAX_PATH + 2

# "<src>" "<dst>"\n
MAX_LINE = 2 * MAX_ESCAPED_PATH + 2

LOG_LEVEL_ENV = "LINKINDEX_LOG_LEVEL"


@dataclass(frozen=True)
class ScanOptions:
    """
    Behaviour switches for a scan.

      - quiet: do not report unreadable entries
      - follow_symlinks: stat through symlinks and descend into linked dirs
      - one_filesystem: do not cross mount points
    """

    quiet: bool = False
    follow_symlinks: bool = False
    one_filesystem: bool = False


@dataclass(frozen=True)
class RestoreOptions:
    """
    Behaviour switches for a restore.

      - force: report replay and format failures instead of aborting
      - dry_run: decode and log, but never touch the filesystem
    """

    force: bool = False
    dry_run: bool = False
