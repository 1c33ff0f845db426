# screenspec/run_all.py
from __future__ import annotations

import argparse
import logging
import platform
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import load_config
from .errors import ScreenSpecError
from .ingest import read_raw_document
from .io_utils import (
    action_rows_to_dicts,
    enriched_to_dicts,
    item_rows_to_dicts,
    sha256_file,
    write_json,
    write_text,
)
from .pipeline import PipelineResult, transform
from .render_spec_md import render_spec_markdown
from .spec_logging import setup_logging


logger = logging.getLogger("screenspec.run_all")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_VIOLATIONS = 2


@dataclass(frozen=True)
class PipelinePaths:
    source: Path
    out_dir: Path

    spec_md: Path

    # intermediates (only with --dump-intermediates)
    parsed_items: Path
    parsed_actions: Path
    enriched_items: Path
    output_document: Path

    # integrity + metadata
    hashes_json: Path
    run_metadata_json: Path


def resolve_paths(source: Path, out_dir: Path, stem: Optional[str] = None) -> PipelinePaths:
    stem = stem or source.stem
    return PipelinePaths(
        source=source,
        out_dir=out_dir,
        spec_md=out_dir / f"{stem}_spec.md",
        parsed_items=out_dir / "parsed_items.json",
        parsed_actions=out_dir / "parsed_actions.json",
        enriched_items=out_dir / "enriched_items.json",
        output_document=out_dir / "output_document.json",
        hashes_json=out_dir / "artifact_hashes.json",
        run_metadata_json=out_dir / "run_metadata.json",
    )


def _env_snapshot() -> dict:
    # no timestamps: identical inputs give identical metadata
    return {
        "python": platform.python_version(),
        "platform": platform.platform(),
    }


def write_intermediates(paths: PipelinePaths, result: PipelineResult) -> List[Path]:
    write_json(paths.parsed_items, item_rows_to_dicts(result.item_rows))
    write_json(paths.parsed_actions, action_rows_to_dicts(result.action_rows))
    write_json(paths.enriched_items, enriched_to_dicts(result.enriched))
    write_json(paths.output_document, result.document.model_dump(mode="json"))
    return [paths.parsed_items, paths.parsed_actions, paths.enriched_items, paths.output_document]


def write_hashes(paths: PipelinePaths, written: Sequence[Path]) -> None:
    hashes: Dict[str, str] = {}
    for p in [paths.source, *written]:
        if p.exists():
            hashes[p.name] = sha256_file(p)
    write_json(paths.hashes_json, {"sha256": hashes})


def run(args: argparse.Namespace) -> int:
    source = Path(args.input).resolve()
    out_dir = Path(args.out_dir).resolve()

    cfg = load_config(
        Path(args.config) if args.config else None,
        created=args.created,
        updated=args.updated,
        version=args.version,
        screen_code=args.screen_code,
        screen_name=args.screen_name,
        short_description=args.description,
    )

    raw = read_raw_document(source)
    result = transform(raw, cfg)
    paths = resolve_paths(source, out_dir, stem=result.document.metadata.screen_code)

    written: List[Path] = []
    if args.dump_intermediates:
        written.extend(write_intermediates(paths, result))

    if result.ok:
        write_text(paths.spec_md, render_spec_markdown(result.document) + "\n")
        written.append(paths.spec_md)

    if not args.no_hashes:
        write_hashes(paths, written)

    meta = {
        "success": result.ok,
        "source": str(source),
        "screen_code": result.document.metadata.screen_code,
        "items": len(result.item_rows),
        "actions": len(result.action_rows),
        "groups": {g.name: len(g.items) for g in result.document.groups},
        "error_codes": [ec.code for ec in result.document.validation_rules.error_codes],
        "violations": [
            {"check": v.check, "token": v.token, "message": v.message} for v in result.violations
        ],
        "artifacts": [p.name for p in written],
        "env": _env_snapshot(),
    }
    write_json(paths.run_metadata_json, meta)

    if not result.ok:
        # an earlier run may have left a spec for this screen
        paths.spec_md.unlink(missing_ok=True)
        print(f"[FAIL] {len(result.violations)} violation(s); no spec written.")
        for v in result.violations:
            print(f" - {v}")
        return EXIT_VIOLATIONS

    print(f"[OK] Wrote: {paths.spec_md}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a screen specification document from a raw screen description (fail-closed)."
    )
    parser.add_argument("--input", required=True, help="Path to the raw screen description (UTF-8 text/Markdown).")
    parser.add_argument("--out-dir", default="outputs", help="Directory for the spec and run artifacts.")
    parser.add_argument("--config", default=None, help="Optional JSON file with metadata values.")
    parser.add_argument("--created", default=None, help="Creation date for the metadata block.")
    parser.add_argument("--updated", default=None, help="Last-updated date for the metadata block.")
    parser.add_argument("--version", default=None, help="Document version string (default 1.0).")
    parser.add_argument("--screen-code", default=None, help="Override the screen code found in the source.")
    parser.add_argument("--screen-name", default=None, help="Override the screen name found in the source.")
    parser.add_argument("--description", default=None, help="Override the short description.")
    parser.add_argument(
        "--dump-intermediates",
        action="store_true",
        help="Also write parsed/enriched rows and the output document as JSON.",
    )
    parser.add_argument("--no-hashes", action="store_true", help="Disable writing artifact_hashes.json")
    parser.add_argument("--log-level", default="WARNING", help="Console log level.")
    parser.add_argument("--log-file", default=None, help="Optional JSON-lines log file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper(), Path(args.log_file) if args.log_file else None)
    try:
        return run(args)
    except (ScreenSpecError, FileNotFoundError, ValueError) as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
