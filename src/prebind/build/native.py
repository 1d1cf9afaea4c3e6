from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Type

from prebind.build.runner import CommandResult, CommandRunner, run_command
from prebind.errors import ArchiveError, CompileError, LibraryBuildError

logger = logging.getLogger(__name__)


@dataclass
class Toolchain:
    compiler: str = "clang"
    archiver: str = "ar"
    compile_flags: List[str] = field(default_factory=list)
    archive_flags: str = "rcs"
    source_dir: str = "lib"
    source_suffix: str = ".c"
    object_suffix: str = ".o"
    archive_suffix: str = ".a"


@dataclass
class BuildArtifact:
    object_path: Path
    archive_path: Path


class NativeLibraryBuilder:
    """Compile ``lib/<name>.c`` and archive it as ``lib<name>.a`` in the base directory.

    Both steps block until the tool exits. Any failure is raised as a
    LibraryBuildError subclass naming the library and the step.
    """

    def __init__(self, toolchain: Optional[Toolchain] = None, runner: Optional[CommandRunner] = None) -> None:
        self.toolchain = toolchain or Toolchain()
        self._runner = runner or run_command

    def source_path(self, name: str, base_dir: str | Path) -> Path:
        tc = self.toolchain
        return Path(base_dir) / tc.source_dir / f"{name}{tc.source_suffix}"

    def artifact_for(self, name: str, base_dir: str | Path) -> BuildArtifact:
        tc = self.toolchain
        base = Path(base_dir)
        return BuildArtifact(
            object_path=base / f"{name}{tc.object_suffix}",
            archive_path=base / f"lib{name}{tc.archive_suffix}",
        )

    def build(self, name: str, base_dir: str | Path) -> BuildArtifact:
        tc = self.toolchain
        source = self.source_path(name, base_dir)
        artifact = self.artifact_for(name, base_dir)

        compile_cmd = [tc.compiler, "-c", *tc.compile_flags, "-o", str(artifact.object_path), str(source)]
        self._run(compile_cmd, name, CompileError)

        archive_cmd = [tc.archiver, tc.archive_flags, str(artifact.archive_path), str(artifact.object_path)]
        self._run(archive_cmd, name, ArchiveError)

        logger.info("built %s", artifact.archive_path)
        return artifact

    def _run(self, args: Sequence[str], name: str, error_cls: Type[LibraryBuildError]) -> CommandResult:
        try:
            result = self._runner(args)
        except OSError as exc:
            raise error_cls(name, f"could not spawn `{args[0]}`: {exc}") from exc
        if not result.ok:
            raise error_cls(name, f"`{args[0]}` exited with status {result.returncode}", stderr=result.stderr)
        return result
