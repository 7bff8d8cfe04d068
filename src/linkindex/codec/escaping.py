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
Escaping codec of the index text format.

Every path is written as one double-quoted token. Inside the quotes a
backslash introduces an escape: `\\"`, `\\\\` and `\\n` stand for a quote, a
backslash and a line feed. Nothing else is transformed, so a token never
contains a raw line feed or an unescaped quote and any byte string without
NUL survives the round trip.
"""

from __future__ import annotations

from ..config import MAX_LINE, MAX_PATH
from ..domain.errors import IndexFormatError, PathTooLongError
from ..domain.identity import IndexRecord

QUOTE = b'"'
ESCAPE = b"\\"
SEPARATOR = b" "
NEWLINE = b"\n"

_UNESCAPE = {b"n": NEWLINE}


def encode(path: bytes) -> bytes:
    """Return `path` as a quoted, escaped token."""
    if len(path) > MAX_PATH:
        raise PathTooLongError(f"{path!r}: Path too long")
    if b"\0" in path:
        raise ValueError(f"{path!r}: embedded NUL byte")
    escaped = (
        path.replace(ESCAPE, ESCAPE + ESCAPE)
        .replace(QUOTE, ESCAPE + QUOTE)
        .replace(NEWLINE, ESCAPE + b"n")
    )
    return QUOTE + escaped + QUOTE


def decode(text: bytes) -> tuple[bytes, bytes]:
    """
    Consume one quoted token from the front of `text`.

    Returns:
        The unescaped path and whatever follows the closing quote.

    Raises:
        IndexFormatError: if the token is not opened, its escape or its
        quote is left unterminated, or it holds a NUL byte.
    """
    if not text.startswith(QUOTE):
        raise IndexFormatError("expected opening quote")

    out = bytearray()
    i = 1
    n = len(text)
    while i < n:
        c = text[i : i + 1]
        if c == ESCAPE:
            if i + 1 >= n:
                raise IndexFormatError("unterminated escape")
            escaped = text[i + 1 : i + 2]
            out += _UNESCAPE.get(escaped, escaped)
            i += 2
        elif c == QUOTE:
            if b"\0" in out:
                raise IndexFormatError("embedded NUL")
            return bytes(out), text[i + 1 :]
        else:
            out += c
            i += 1
    raise IndexFormatError("unterminated quote")


def encode_record(record: IndexRecord) -> bytes:
    return encode(record.source) + SEPARATOR + encode(record.destination) + NEWLINE


def decode_record(line: bytes) -> tuple[IndexRecord, bytes]:
    """
    Decode one index line into a record.

    A single trailing line feed is stripped first. The bytes left after the
    second token are returned so the caller can decide what to do about them.
    """
    if len(line) > MAX_LINE:
        raise IndexFormatError("line too long")
    if line.endswith(NEWLINE):
        line = line[:-1]

    source, rest = decode(line)
    if not rest.startswith(SEPARATOR):
        raise IndexFormatError("invalid line")
    destination, rest = decode(rest[1:])
    return IndexRecord(source=source, destination=destination), rest
