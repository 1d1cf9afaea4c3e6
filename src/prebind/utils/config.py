from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from prebind.build.native import Toolchain
from prebind.errors import ConfigError

DEFAULTS: Dict[str, Any] = {
    "base_dir": "bindgen",
    "manifest": "bindgen_helper.h",
    "out_dir": None,
    "bindings_file": "bindings.rs",
    "directive_prefix": "cargo:",
    "track_local_sources": False,
    "toolchain": {
        "compiler": "clang",
        "archiver": "ar",
        "compile_flags": [],
        "archive_flags": "rcs",
    },
    "bindgen": {
        "executable": "bindgen",
        "extra_args": [],
        "clang_args": [],
    },
}


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load YAML config into a dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a mapping, got {type(data).__name__}")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_base_dir(path: str | Path) -> Path:
    # rustc-link-search needs an absolute path.
    try:
        resolved = Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise ConfigError(f"cannot canonicalize base directory {path}: {exc}") from exc
    if not resolved.is_dir():
        raise ConfigError(f"base directory {resolved} is not a directory")
    return resolved


@dataclass
class AppConfig:
    raw: Dict[str, Any]

    @classmethod
    def from_files(cls, *paths: str | Path) -> "AppConfig":
        merged: Dict[str, Any] = dict(DEFAULTS)
        for path in paths:
            merged = deep_merge(merged, load_yaml(path))
        return cls(raw=merged)


@dataclass
class BuildConfig:
    base_dir: Path
    out_dir: Path
    manifest: str = "bindgen_helper.h"
    bindings_file: str = "bindings.rs"
    directive_prefix: str = "cargo:"
    track_local_sources: bool = False
    toolchain: Toolchain = field(default_factory=Toolchain)
    bindgen_executable: str = "bindgen"
    bindgen_args: List[str] = field(default_factory=list)
    clang_args: List[str] = field(default_factory=list)

    @property
    def manifest_path(self) -> Path:
        return self.base_dir / self.manifest

    @property
    def bindings_path(self) -> Path:
        return self.out_dir / self.bindings_file

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], env: Optional[Mapping[str, str]] = None) -> "BuildConfig":
        """Build a typed config from merged settings; OUT_DIR fills in a missing out_dir."""
        env = os.environ if env is None else env
        cfg = deep_merge(DEFAULTS, raw)

        out_dir = cfg.get("out_dir") or env.get("OUT_DIR")
        if not out_dir:
            raise ConfigError("no output directory: set out_dir or the OUT_DIR environment variable")

        try:
            toolchain = Toolchain(**_section(cfg, "toolchain"))
        except TypeError as exc:
            raise ConfigError(f"invalid toolchain settings: {exc}") from exc
        toolchain.compile_flags = _arg_list(toolchain.compile_flags, "toolchain.compile_flags")

        bindgen_cfg = _section(cfg, "bindgen")
        return cls(
            base_dir=resolve_base_dir(cfg["base_dir"]),
            out_dir=Path(out_dir),
            manifest=str(cfg["manifest"]),
            bindings_file=str(cfg["bindings_file"]),
            directive_prefix=str(cfg["directive_prefix"] or ""),
            track_local_sources=bool(cfg.get("track_local_sources", False)),
            toolchain=toolchain,
            bindgen_executable=str(bindgen_cfg.get("executable", "bindgen")),
            bindgen_args=_arg_list(bindgen_cfg.get("extra_args"), "bindgen.extra_args"),
            clang_args=_arg_list(bindgen_cfg.get("clang_args"), "bindgen.clang_args"),
        )


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    # An empty YAML section (`bindgen:`) loads as None.
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _arg_list(value: Any, name: str) -> List[str]:
    """Accept a YAML list of arguments or a single shell-style string."""
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ConfigError(f"'{name}' must be a list or a string, got {type(value).__name__}")
