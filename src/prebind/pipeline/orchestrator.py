from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from prebind.bindgen.generator import BindingGenerator
from prebind.build.native import BuildArtifact, NativeLibraryBuilder
from prebind.build.runner import CommandRunner
from prebind.emit.directives import DirectiveEmitter, DirectiveSink
from prebind.manifest.parser import INCLUDE_TOKEN, LocalLibrary, SystemLibrary, parse_line, read_manifest
from prebind.utils.config import BuildConfig

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = "bindgen_helper.h"


@dataclass
class RunSummary:
    bindings_path: Path
    system_libraries: List[str] = field(default_factory=list)
    local_libraries: List[BuildArtifact] = field(default_factory=list)
    skipped_lines: int = 0


class Orchestrator:
    """Walk the manifest, link or build each library, then generate bindings.

    Any error raised by the builder or the generator propagates unchanged and
    ends the run; nothing already built is cleaned up.
    """

    def __init__(
        self,
        base_dir: str | Path,
        out_path: str | Path,
        builder: NativeLibraryBuilder,
        emitter: DirectiveEmitter,
        generator: BindingGenerator,
        manifest_name: str = DEFAULT_MANIFEST,
        track_local_sources: bool = False,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.out_path = Path(out_path)
        self.builder = builder
        self.emitter = emitter
        self.generator = generator
        self.manifest_name = manifest_name
        self.track_local_sources = track_local_sources

    @property
    def manifest_path(self) -> Path:
        return self.base_dir / self.manifest_name

    def run(self) -> RunSummary:
        lines = read_manifest(self.manifest_path)
        summary = RunSummary(bindings_path=self.out_path)

        for lineno, line in enumerate(lines, start=1):
            directive = parse_line(line)
            if directive is None:
                if line.startswith(INCLUDE_TOKEN):
                    summary.skipped_lines += 1
                continue

            if isinstance(directive, SystemLibrary):
                self.emitter.emit_link(directive.name)
                summary.system_libraries.append(directive.name)
            elif isinstance(directive, LocalLibrary):
                logger.debug("line %d: building local library %s", lineno, directive.name)
                # Emitted before the build; a failed build still aborts the run.
                self.emitter.emit_link(directive.name)
                artifact = self.builder.build(directive.name, self.base_dir)
                summary.local_libraries.append(artifact)
                if self.track_local_sources:
                    header = directive.header_reference.replace("\\", "/")
                    self.emitter.emit_rebuild_trigger(self.base_dir / header)
                    self.emitter.emit_rebuild_trigger(self.builder.source_path(directive.name, self.base_dir))

        self.emitter.emit_search_path(self.base_dir)
        self.emitter.emit_rebuild_trigger(self.manifest_path)

        self.generator.generate(self.manifest_path, self.out_path)
        return summary


def build_orchestrator(
    config: BuildConfig,
    sink: Optional[DirectiveSink] = None,
    runner: Optional[CommandRunner] = None,
) -> Orchestrator:
    return Orchestrator(
        base_dir=config.base_dir,
        out_path=config.bindings_path,
        builder=NativeLibraryBuilder(config.toolchain, runner=runner),
        emitter=DirectiveEmitter(sink, prefix=config.directive_prefix),
        generator=BindingGenerator(
            executable=config.bindgen_executable,
            extra_args=config.bindgen_args,
            clang_args=config.clang_args,
            runner=runner,
        ),
        manifest_name=config.manifest,
        track_local_sources=config.track_local_sources,
    )
