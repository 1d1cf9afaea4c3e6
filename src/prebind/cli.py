from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from prebind.errors import PrebindError
from prebind.pipeline.orchestrator import build_orchestrator
from prebind.utils.config import AppConfig, BuildConfig

logger = logging.getLogger("prebind")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build native C libraries named in a bindgen manifest and emit cargo directives"
    )
    parser.add_argument("--config", action="append", default=[], help="YAML config file; may be repeated")
    parser.add_argument("--base-dir", required=False, help="directory holding the manifest and lib/ sources")
    parser.add_argument("--manifest", required=False, help="manifest file name inside the base directory")
    parser.add_argument("--out-dir", required=False, help="where bindings are written (default: $OUT_DIR)")
    parser.add_argument("--bindings-file", required=False)
    parser.add_argument("--verbose", action="store_true", help="log skipped lines and executed commands")
    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides = {
        "base_dir": args.base_dir,
        "manifest": args.manifest,
        "out_dir": args.out_dir,
        "bindings_file": args.bindings_file,
    }
    return {key: value for key, value in overrides.items() if value is not None}


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    # stdout carries the directives, so diagnostics go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = AppConfig.from_files(*args.config)
        cfg.raw.update(_cli_overrides(args))
        build_cfg = BuildConfig.from_raw(cfg.raw)
        summary = build_orchestrator(build_cfg).run()
    except PrebindError as exc:
        raise SystemExit(f"prebind: {exc}")

    logger.info(
        "linked %d system and %d local libraries (skipped %d include lines); bindings at %s",
        len(summary.system_libraries),
        len(summary.local_libraries),
        summary.skipped_lines,
        summary.bindings_path,
    )


if __name__ == "__main__":
    main()
