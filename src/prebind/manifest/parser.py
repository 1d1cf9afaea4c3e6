from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from prebind.errors import ManifestReadError

logger = logging.getLogger(__name__)

INCLUDE_TOKEN = "#include"
# Forces the link name when the library is not named after its header,
# e.g. bzip2 ships bzlib.h but links as -lbz2.
LINK_NAME_MARKER = "ld:-l"
HEADER_SUFFIX = ".h"


@dataclass(frozen=True)
class SystemLibrary:
    name: str


@dataclass(frozen=True)
class LocalLibrary:
    name: str
    header_reference: str


LibraryDirective = Union[SystemLibrary, LocalLibrary]


def read_manifest(path: str | Path) -> List[str]:
    """Read every line of the manifest up front."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(f"cannot read manifest {path}: {exc}") from exc


def parse_line(line: str) -> Optional[LibraryDirective]:
    """Classify one manifest line. Returns None when the line names no library."""
    if not line.startswith(INCLUDE_TOKEN):
        return None
    tokens = line.split()
    if len(tokens) < 2 or tokens[0] != INCLUDE_TOKEN:
        logger.debug("skipping malformed include line: %r", line)
        return None

    forced = _forced_link_name(tokens)
    if forced is not None:
        if not forced:
            logger.debug("skipping include line with empty link name: %r", line)
            return None
        return SystemLibrary(name=forced)

    header = tokens[1]
    if _is_quoted(header, "<", ">"):
        name = _library_name(header[1:-1])
        if name is not None:
            return SystemLibrary(name=name)
    elif _is_quoted(header, '"', '"'):
        reference = header[1:-1]
        name = _library_name(_basename(reference))
        if name is not None:
            return LocalLibrary(name=name, header_reference=reference)

    logger.debug("skipping include line with unrecognised header %r", header)
    return None


def _forced_link_name(tokens: Sequence[str]) -> Optional[str]:
    for token in tokens:
        if LINK_NAME_MARKER in token:
            return token.split(LINK_NAME_MARKER, 1)[1]
    return None


def _is_quoted(token: str, opening: str, closing: str) -> bool:
    return len(token) >= 2 and token.startswith(opening) and token.endswith(closing)


def _basename(reference: str) -> str:
    return reference.replace("\\", "/").rsplit("/", 1)[-1]


def _library_name(header: str) -> Optional[str]:
    if header.endswith(HEADER_SUFFIX):
        header = header[: -len(HEADER_SUFFIX)]
    if not header or "/" in header or "\\" in header:
        return None
    return header
