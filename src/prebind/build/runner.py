from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Sequence

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str]], CommandResult]


def run_command(args: Sequence[str]) -> CommandResult:
    """Run an external tool to completion and capture its output.

    Output that is not valid UTF-8 is decoded with replacement characters.
    Raises OSError (usually FileNotFoundError) when the tool cannot be spawned.
    """
    argv = [str(a) for a in args]
    logger.debug("exec: %s", " ".join(argv))
    proc = subprocess.run(argv, capture_output=True, text=True, encoding="utf-8", errors="replace")
    return CommandResult(args=argv, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
