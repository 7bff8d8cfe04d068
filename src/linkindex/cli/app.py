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
from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..adapters.filesystem.local_fs import LocalFS
from ..adapters.stream.index_stream import open_index_stream
from ..config import RestoreOptions, ScanOptions
from ..domain.errors import LinkIndexError
from ..services import RestoreService, ScanService

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(help="linkindex CLI - Record hardlinks of a tree and replay them elsewhere")

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"linkindex {__version__}")
        raise typer.Exit()


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version information and exit.",
    ),
):
    """
    Scan a tree for hardlinks into an index, or restore them from one.
    """


@app.command()
def scan(
    path: Optional[str] = typer.Argument(
        None, help="Directory to scan. Defaults to the current directory."
    ),
    index: Optional[Path] = typer.Option(
        None,
        "--index",
        "-i",
        help="Write the index to this file instead of stdout.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Do not warn about unreadable entries; suppress the final summary line.",
    ),
    follow: bool = typer.Option(False, "--follow", "-F", help="Follow symlinks."),
    mount: bool = typer.Option(
        False, "--mount", "-m", help="Do not cross mount points."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Walk a directory and write one index line per duplicate hardlink.
    """
    _set_verbose(verbose)

    root = path if path is not None else "."
    options = ScanOptions(quiet=quiet, follow_symlinks=follow, one_filesystem=mount)
    scan_service = ScanService(LocalFS(), options)

    try:
        with open_index_stream(index, "w") as out:
            summary = scan_service.scan(root, out)
    except LinkIndexError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)

    # stdout may be the index itself, so the summary goes to stderr.
    if not quiet:
        typer.echo(
            f"Scanned {root}; {summary.groups} hardlink groups; "
            f"{summary.records} records; index: {index or '<stdout>'}",
            err=True,
        )


@app.command()
def restore(
    path: Optional[str] = typer.Argument(
        None,
        help="Target root for relative paths in the index. Defaults to the current directory.",
    ),
    index: Optional[Path] = typer.Option(
        None,
        "--index",
        "-i",
        help="Read the index from this file instead of stdin.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Do not abort on restore error."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Perform a trial run with no changes made."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every link as it is replayed."
    ),
):
    """
    Recreate the hardlinks listed in an index.
    """
    _set_verbose(verbose)

    target = path if path is not None else "."
    restore_service = RestoreService(LocalFS(), RestoreOptions(force=force, dry_run=dry_run))

    try:
        with open_index_stream(index, "r") as stream:
            summary = restore_service.restore(stream, target)
    except LinkIndexError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)

    verb = "Would restore" if dry_run else "Restored"
    typer.echo(
        f"{verb} {summary.linked} of {summary.lines} links into {target}; "
        f"{summary.failed} failed",
        err=True,
    )
