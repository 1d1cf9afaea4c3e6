from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

DirectiveSink = Callable[[str], None]

DEFAULT_PREFIX = "cargo:"

LINK_LIB = "rustc-link-lib"
LINK_SEARCH = "rustc-link-search"
RERUN_IF_CHANGED = "rerun-if-changed"


def stdout_sink(line: str) -> None:
    print(line, flush=True)


def format_directive(key: str, value: str, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{key}={value}"


class DirectiveEmitter:
    """Writes one build-system directive per call, in call order."""

    def __init__(self, sink: Optional[DirectiveSink] = None, prefix: str = DEFAULT_PREFIX) -> None:
        self._sink = sink or stdout_sink
        self.prefix = prefix

    def emit_link(self, name: str) -> None:
        self._emit(LINK_LIB, name)

    def emit_search_path(self, path: str | Path) -> None:
        self._emit(LINK_SEARCH, str(path))

    def emit_rebuild_trigger(self, path: str | Path) -> None:
        self._emit(RERUN_IF_CHANGED, str(path))

    def _emit(self, key: str, value: str) -> None:
        self._sink(format_directive(key, value, self.prefix))
