from pathlib import Path

import pytest

from prebind.bindgen.generator import BindingGenerator
from prebind.build.runner import CommandResult
from prebind.errors import BindingGenerationError


def _runner(returncode=0, stdout="pub fn foo();\n", stderr=""):
    calls = []

    def run(args):
        calls.append(list(args))
        return CommandResult(args=list(args), returncode=returncode, stdout=stdout, stderr=stderr)

    run.calls = calls
    return run


def test_generate_writes_stdout(tmp_path: Path):
    runner = _runner()
    out = tmp_path / "out" / "bindings.rs"
    result = BindingGenerator(runner=runner).generate(tmp_path / "bindgen_helper.h", out)

    assert result == out
    assert out.read_text(encoding="utf-8") == "pub fn foo();\n"
    assert runner.calls == [["bindgen", str(tmp_path / "bindgen_helper.h")]]


def test_command_with_extra_and_clang_args():
    gen = BindingGenerator(executable="bindgen-0.69", extra_args=["--no-layout-tests"], clang_args=["-Iinclude"])
    assert gen.command("h.h") == ["bindgen-0.69", "h.h", "--no-layout-tests", "--", "-Iinclude"]


def test_nonzero_exit_raises(tmp_path: Path):
    runner = _runner(returncode=1, stdout="", stderr="fatal error: 'zlib.h' file not found")
    with pytest.raises(BindingGenerationError, match="file not found"):
        BindingGenerator(runner=runner).generate("h.h", tmp_path / "bindings.rs")
    assert not (tmp_path / "bindings.rs").exists()


def test_empty_output_raises(tmp_path: Path):
    with pytest.raises(BindingGenerationError, match="produced no bindings"):
        BindingGenerator(runner=_runner(stdout="  \n")).generate("h.h", tmp_path / "bindings.rs")


def test_spawn_failure_raises(tmp_path: Path):
    def missing(args):
        raise FileNotFoundError(2, "No such file or directory", args[0])

    with pytest.raises(BindingGenerationError, match="could not spawn"):
        BindingGenerator(runner=missing).generate("h.h", tmp_path / "bindings.rs")


def test_unwritable_output_raises(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(BindingGenerationError, match="couldn't write bindings"):
        BindingGenerator(runner=_runner()).generate("h.h", blocker / "bindings.rs")
