import sys
from pathlib import Path

import pytest

from prebind.build.native import NativeLibraryBuilder, Toolchain
from prebind.build.runner import CommandResult
from prebind.errors import ArchiveError, CompileError


class DummyRunner:
    def __init__(self, fail_tool=None, missing_tool=None):
        self.calls = []
        self.fail_tool = fail_tool
        self.missing_tool = missing_tool

    def __call__(self, args):
        args = list(args)
        self.calls.append(args)
        if args[0] == self.missing_tool:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        if args[0] == self.fail_tool:
            return CommandResult(args=args, returncode=1, stderr="boom")
        return CommandResult(args=args, returncode=0)


def test_build_compiles_then_archives(tmp_path: Path):
    runner = DummyRunner()
    artifact = NativeLibraryBuilder(runner=runner).build("foo", tmp_path)

    assert artifact.object_path == tmp_path / "foo.o"
    assert artifact.archive_path == tmp_path / "libfoo.a"
    assert runner.calls == [
        ["clang", "-c", "-o", str(tmp_path / "foo.o"), str(tmp_path / "lib" / "foo.c")],
        ["ar", "rcs", str(tmp_path / "libfoo.a"), str(tmp_path / "foo.o")],
    ]


def test_build_uses_toolchain_settings(tmp_path: Path):
    runner = DummyRunner()
    toolchain = Toolchain(compiler="gcc", archiver="llvm-ar", compile_flags=["-O2", "-fPIC"], archive_flags="crs")
    NativeLibraryBuilder(toolchain, runner=runner).build("bar", tmp_path)

    assert runner.calls[0] == ["gcc", "-c", "-O2", "-fPIC", "-o", str(tmp_path / "bar.o"), str(tmp_path / "lib" / "bar.c")]
    assert runner.calls[1][:2] == ["llvm-ar", "crs"]


def test_compile_failure_stops_before_archive(tmp_path: Path):
    runner = DummyRunner(fail_tool="clang")
    with pytest.raises(CompileError) as excinfo:
        NativeLibraryBuilder(runner=runner).build("foo", tmp_path)

    assert len(runner.calls) == 1
    assert excinfo.value.library == "foo"
    assert excinfo.value.step == "compile"
    assert "boom" in str(excinfo.value)


def test_archive_failure(tmp_path: Path):
    runner = DummyRunner(fail_tool="ar")
    with pytest.raises(ArchiveError) as excinfo:
        NativeLibraryBuilder(runner=runner).build("foo", tmp_path)

    assert len(runner.calls) == 2
    assert "archive step failed for library 'foo'" in str(excinfo.value)


def test_missing_compiler_is_compile_error(tmp_path: Path):
    with pytest.raises(CompileError, match="could not spawn `clang`"):
        NativeLibraryBuilder(runner=DummyRunner(missing_tool="clang")).build("foo", tmp_path)


def test_missing_archiver_is_archive_error(tmp_path: Path):
    with pytest.raises(ArchiveError, match="could not spawn `ar`"):
        NativeLibraryBuilder(runner=DummyRunner(missing_tool="ar")).build("foo", tmp_path)


def test_undecodable_compiler_output_is_compile_error(tmp_path: Path):
    # `python -c <code>` stands in for `clang -c`; the remaining arguments land in sys.argv.
    code = "import sys; sys.stderr.buffer.write(b'\\xff\\xfe bad'); sys.exit(1)"
    toolchain = Toolchain(compiler=sys.executable, compile_flags=[code])

    with pytest.raises(CompileError) as excinfo:
        NativeLibraryBuilder(toolchain).build("foo", tmp_path)

    assert excinfo.value.library == "foo"
    assert "bad" in excinfo.value.stderr
