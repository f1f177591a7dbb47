"""
Command line interface for layermap.

Usage:
    layermap parse mapping.csv [--format json|summary] [--output out.json]
    layermap validate transcript.txt
    layermap render mapping.csv --kind sql|yaml|dag|config [--output-dir build/]
    layermap template
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import MappingAnalyzer, UnrecognizedInputError
from .config import RenderConfig
from .export import JSONExporter
from .inference import sample_template
from .models import MappingResult
from .orchestrators import AirflowOrchestrator
from .path_validation import read_mapping_file
from .rendering import TemplateService
from .validator import MappingValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNRECOGNIZED = 2


def _load(path: str) -> MappingResult:
    return MappingAnalyzer().analyze(read_mapping_file(path))


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text)
        logger.info("Wrote %s", out)
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def cmd_parse(args: argparse.Namespace) -> int:
    result = _load(args.file)
    if args.format == "summary":
        lines = [result.describe()]
        for target, sources in result.lineage.items():
            if sources:
                lines.append(f"  {target} <- {', '.join(sources)}")
        _emit("\n".join(lines), args.output)
    else:
        _emit(json.dumps(JSONExporter.export(result), indent=2), args.output)
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    result = _load(args.file)
    validator = MappingValidator(result, dialect=args.dialect)
    issues = validator.validate()
    _emit("\n".join(str(i) for i in issues) or "No validation issues found", None)
    return EXIT_ERROR if validator.has_errors() else EXIT_OK


def cmd_render(args: argparse.Namespace) -> int:
    result = _load(args.file)
    config = RenderConfig(
        default_target_project=args.project,
        default_target_dataset=args.dataset,
        dialect=args.dialect,
    )
    templates = TemplateService(config)
    out_dir = Path(args.output_dir) if args.output_dir else None

    if args.kind == "yaml":
        _emit(templates.generate_schema_yaml(result.tables), _join(out_dir, "schema.yml"))
    elif args.kind == "config":
        _emit(templates.generate_config_json(result.tables), _join(out_dir, "config.json"))
    elif args.kind == "sql":
        for table in result.tables:
            _emit(templates.generate_model_sql(table), _join(out_dir, f"{table.target_name}.sql"))
    elif args.kind == "dag":
        for dag_id, source in AirflowOrchestrator(result, config).to_dag_sources().items():
            _emit(source, _join(out_dir, f"{dag_id}.py"))
    return EXIT_OK


def cmd_template(args: argparse.Namespace) -> int:
    _emit(sample_template(), args.output)
    return EXIT_OK


def _join(directory: Optional[Path], name: str) -> Optional[str]:
    return str(directory / name) if directory else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="layermap",
        description="Parse layered table mappings and render dbt/Airflow artifacts",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse a mapping file")
    p_parse.add_argument("file")
    p_parse.add_argument("--format", choices=["json", "summary"], default="json")
    p_parse.add_argument("--output", help="Write to file instead of stdout")
    p_parse.set_defaults(func=cmd_parse)

    p_validate = sub.add_parser("validate", help="Parse and report validation issues")
    p_validate.add_argument("file")
    p_validate.add_argument("--dialect", default="bigquery")
    p_validate.set_defaults(func=cmd_validate)

    p_render = sub.add_parser("render", help="Render SQL, YAML, DAG or config artifacts")
    p_render.add_argument("file")
    p_render.add_argument("--kind", choices=["sql", "yaml", "dag", "config"], required=True)
    p_render.add_argument("--output-dir")
    p_render.add_argument("--project", default="target-project")
    p_render.add_argument("--dataset", default="curated")
    p_render.add_argument("--dialect", default="bigquery")
    p_render.set_defaults(func=cmd_render)

    p_template = sub.add_parser("template", help="Print a sample CSV mapping sheet")
    p_template.add_argument("--output")
    p_template.set_defaults(func=cmd_template)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except UnrecognizedInputError as e:
        sys.stderr.write(f"error: {e}\n")
        return EXIT_UNRECOGNIZED
    except (ValueError, FileNotFoundError, PermissionError) as e:
        sys.stderr.write(f"error: {e}\n")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
