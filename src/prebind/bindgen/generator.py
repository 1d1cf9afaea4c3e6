from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from prebind.build.runner import CommandRunner, run_command
from prebind.errors import BindingGenerationError

logger = logging.getLogger(__name__)


class BindingGenerator:
    """Run the bindgen CLI on a header and write the declarations it prints."""

    def __init__(
        self,
        executable: str = "bindgen",
        extra_args: Sequence[str] = (),
        clang_args: Sequence[str] = (),
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.executable = executable
        self.extra_args = list(extra_args)
        self.clang_args = list(clang_args)
        self._runner = runner or run_command

    def command(self, header: str | Path) -> List[str]:
        args = [self.executable, str(header), *self.extra_args]
        if self.clang_args:
            args += ["--", *self.clang_args]
        return args

    def generate(self, header: str | Path, out_path: str | Path) -> Path:
        args = self.command(header)
        try:
            result = self._runner(args)
        except OSError as exc:
            raise BindingGenerationError(f"could not spawn `{self.executable}`: {exc}") from exc
        if not result.ok:
            raise BindingGenerationError(
                f"unable to generate bindings for {header}: `{self.executable}` exited with status "
                f"{result.returncode}\n{result.stderr.strip()}"
            )
        if not result.stdout.strip():
            raise BindingGenerationError(f"`{self.executable}` produced no bindings for {header}")

        out = Path(out_path)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with open(out, "w", encoding="utf-8") as f:
                f.write(result.stdout)
        except OSError as exc:
            raise BindingGenerationError(f"couldn't write bindings to {out}: {exc}") from exc

        logger.info("wrote bindings to %s", out)
        return out
