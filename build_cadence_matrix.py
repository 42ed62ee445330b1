"""Extract GUID requirements from cadence documents and export the merged matrix.

Usage examples:
    python build_cadence_matrix.py docs/cadence_1.0.0.pdf docs/cadence_2.0.0.pdf
    python build_cadence_matrix.py --docs ./cadences --format csv --no-service
    python build_cadence_matrix.py --run-config cadences.yaml -v

Run config (YAML):
    rules: config/extraction_rules.yaml     # optional
    inputs:
      - cadence_1.0.0.pdf
      - {path: release_notes.docx, label: "2.0.0"}
    export:
      labels: ["2.0.0"]                     # optional, default all cadences
      include_service: true
      format: xlsx
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import yaml

from cadence_matrix.config import ExtractionRules, load_extraction_rules, load_settings
from cadence_matrix.export import default_export_name, export_requirements
from cadence_matrix.extract import ExtractionResult, RequirementExtractor
from cadence_matrix.loaders import find_documents, load_documents

EXPORT_FORMATS = ("xlsx", "csv")


@dataclass
class InputEntry:
    path: str
    label: Optional[str] = None


@dataclass
class ExportOptions:
    labels: Optional[List[str]] = None
    include_service: bool = True
    format: str = "xlsx"


@dataclass
class RunConfig:
    inputs: List[InputEntry] = field(default_factory=list)
    rules_path: Optional[Path] = None
    export: ExportOptions = field(default_factory=ExportOptions)


########################
# LOADING LOGIC
########################

def load_run_config(config_path: Path) -> RunConfig:
    if not config_path.exists():
        raise FileNotFoundError(f"Run config file not found: {config_path}")

    raw_text = config_path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML config at {config_path}") from exc

    if not isinstance(parsed, dict):
        raise ValueError("Config must be a dictionary with an 'inputs' key.")

    inputs_data = parsed.get("inputs", [])
    if not isinstance(inputs_data, list):
        raise ValueError("'inputs' must be a list of document entries.")

    entries: List[InputEntry] = []
    for item in inputs_data:
        if isinstance(item, str):
            item = {"path": item}
        if not isinstance(item, dict) or not item.get("path"):
            logging.warning(f"Skipping invalid input entry (missing path): {item}")
            continue
        label = item.get("label")
        entries.append(InputEntry(path=str(item["path"]), label=str(label) if label is not None else None))

    export_data = parsed.get("export") or {}
    if not isinstance(export_data, dict):
        raise ValueError("'export' must be a mapping.")
    labels = export_data.get("labels")
    if isinstance(labels, (str, int, float)):
        labels = [labels]
    fmt = str(export_data.get("format", "xlsx")).lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'; expected one of {', '.join(EXPORT_FORMATS)}")
    export = ExportOptions(
        labels=[str(lbl) for lbl in labels] if labels is not None else None,
        include_service=bool(export_data.get("include_service", True)),
        format=fmt,
    )

    rules = parsed.get("rules")
    rules_path = resolve_path(config_path.parent, rules) if rules else None
    return RunConfig(inputs=entries, rules_path=rules_path, export=export)


########################
# GENERIC HELPERS
########################

def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def resolve_path(base: Path, target: Union[Path, str]) -> Path:
    t = Path(target)
    return t if t.is_absolute() else base / t


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract GUID requirements from cadence documents and export a merged matrix.",
    )
    parser.add_argument(
        "documents",
        nargs="*",
        type=Path,
        help="Document files (.txt, .md, .pdf, .docx) in cadence order.",
    )
    parser.add_argument(
        "--docs",
        type=Path,
        help="Folder to scan recursively for supported documents.",
    )
    parser.add_argument(
        "--run-config",
        type=Path,
        help="YAML file listing inputs, label overrides, rules and export options.",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        help="YAML file overriding the built-in extraction rules.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory where the export will be written.",
    )
    parser.add_argument(
        "--output-name",
        help="File name for the export (default: Requirements_Export_<timestamp>).",
    )
    parser.add_argument(
        "--labels",
        nargs="+",
        help="Cadence labels to include as columns (default: all).",
    )
    parser.add_argument(
        "--no-service",
        action="store_true",
        help="Leave out the Service column.",
    )
    parser.add_argument(
        "--format",
        choices=EXPORT_FORMATS,
        help="Export format (default: xlsx, or the run config's export.format).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Extract documents on this many threads (default: CADENCE_WORKERS or 1).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    return parser.parse_args(argv)


def collect_inputs(args: argparse.Namespace, config: Optional[RunConfig]) -> List[InputEntry]:
    entries: List[InputEntry] = []
    if config:
        for entry in config.inputs:
            entries.append(InputEntry(path=str(resolve_path(args.run_config.parent, entry.path)), label=entry.label))
    if args.docs:
        entries.extend(InputEntry(path=str(p)) for p in find_documents(args.docs))
    entries.extend(InputEntry(path=str(p)) for p in args.documents)
    return entries


def run(
    entries: Sequence[InputEntry],
    rules: ExtractionRules,
    workers: int = 1,
) -> ExtractionResult:
    paths = [Path(e.path) for e in entries]
    overrides: Dict[Path, str] = {Path(e.path): e.label for e in entries if e.label}
    documents, failures = load_documents(paths, labels=overrides)
    return RequirementExtractor(rules).extract(documents, workers=workers, failures=failures)


########################
# MAIN EXECUTION
########################

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    settings = load_settings()

    config: Optional[RunConfig] = None
    try:
        if args.run_config:
            config = load_run_config(args.run_config)
        if args.rules and not args.rules.exists():
            raise FileNotFoundError(f"Rules file not found: {args.rules}")
        rules_path = args.rules or (config.rules_path if config else None) or settings.rules_path
        rules = load_extraction_rules(rules_path)
    except (FileNotFoundError, ValueError) as e:
        logging.error(f"Failed to load configuration: {e}")
        return 1

    entries = collect_inputs(args, config)
    if not entries:
        logging.error("No input documents given. Pass files, --docs or --run-config.")
        return 1

    workers = args.workers if args.workers else settings.workers
    result = run(entries, rules, workers=max(1, workers))
    for failure in result.failures:
        logging.warning(f"Skipped {failure.filename}: {failure.error}")

    export_opts = config.export if config else ExportOptions()
    fmt = args.format or export_opts.format
    selected: Optional[List[str]] = args.labels if args.labels else export_opts.labels
    include_service = export_opts.include_service and not args.no_service

    name = args.output_name or default_export_name(suffix=f".{fmt}")
    output_path = args.output_dir / name
    export_requirements(
        result.requirements,
        result.labels,
        output_path,
        selected_labels=selected,
        include_service=include_service,
    )
    logging.info(result.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
