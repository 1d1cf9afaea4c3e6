from __future__ import annotations


class PrebindError(RuntimeError):
    """Base class for errors that abort a prebind run."""


class ConfigError(PrebindError):
    pass


class ManifestReadError(PrebindError):
    pass


class LibraryBuildError(PrebindError):
    step = "build"

    def __init__(self, library: str, reason: str, stderr: str = "") -> None:
        self.library = library
        self.reason = reason
        self.stderr = stderr
        message = f"{self.step} step failed for library '{library}': {reason}"
        if stderr.strip():
            message += "\n" + stderr.strip()
        super().__init__(message)


class CompileError(LibraryBuildError):
    step = "compile"


class ArchiveError(LibraryBuildError):
    step = "archive"


class BindingGenerationError(PrebindError):
    pass
