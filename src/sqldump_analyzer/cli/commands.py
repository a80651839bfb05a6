from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from sqldump_analyzer.config import AnalyzerConfig, SUPPORTED_DIALECTS, load_config
from sqldump_analyzer.sql_schema import analyze_sql_file, parse_dump, render_markdown

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqldump-analyzer",
        description="Summarize the schema and row counts of a SQL dump"
    )
    parser.add_argument("--config", default=None,
                        help="Path to configuration YAML file "
                             "(default: $SQLDUMP_ANALYZER_CONFIG or config/sqldump-analyzer.yaml)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # Analyze command
    analyze = sub.add_parser("analyze", help="Summarize a SQL dump")
    analyze.add_argument("path", help="Path to the .sql file")
    analyze.add_argument("--dialect", choices=SUPPORTED_DIALECTS, default=None,
                         help="SQL dialect (default: from config, 'auto')")
    analyze.add_argument("--strict", action="store_true", default=None,
                         help="Fail on the first statement that cannot be parsed")
    analyze.add_argument("--format", choices=["json", "markdown"], default=None,
                         help="Output format (default: from config, 'json')")
    analyze.add_argument("--indent", type=int, default=None,
                         help="JSON indentation, 0 for compact (default: from config, 2)")
    analyze.add_argument("--output", "-o", default=None,
                         help="Write the report to this file instead of stdout")

    # Statements command
    statements = sub.add_parser("statements", help="Print the parsed statement records as JSON")
    statements.add_argument("path", help="Path to the .sql file")
    statements.add_argument("--dialect", choices=SUPPORTED_DIALECTS, default=None,
                            help="SQL dialect (default: from config, 'auto')")
    statements.add_argument("--strict", action="store_true", default=None,
                            help="Fail on the first statement that cannot be parsed")

    return parser


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        config = _apply_overrides(config, args)

        logging.basicConfig(
            level=getattr(logging, config.logging.level.upper()),
            format=config.logging.format,
            handlers=[
                logging.StreamHandler(sys.stderr)
            ]
        )

        if args.cmd == "analyze":
            analyze_cmd(args.path, config, args.output)
        elif args.cmd == "statements":
            statements_cmd(args.path, config)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _apply_overrides(config: AnalyzerConfig, args: argparse.Namespace) -> AnalyzerConfig:
    """Command-line flags win over configuration values.

    The merged settings are validated again, so a flag is held to the same
    bounds as the YAML value it replaces.
    """
    data = config.model_dump()
    if getattr(args, "dialect", None):
        data["parser"]["dialect"] = args.dialect
    if getattr(args, "strict", None):
        data["parser"]["strict"] = True
    if getattr(args, "format", None):
        data["output"]["format"] = args.format
    if getattr(args, "indent", None) is not None:
        data["output"]["indent"] = args.indent
    return AnalyzerConfig.model_validate(data)


def analyze_cmd(path: str, config: AnalyzerConfig, output: str | None = None) -> None:
    """Analyze a dump and print or write the report.

    Args:
        path: Path to the .sql file
        config: Effective configuration
        output: Optional file to write instead of stdout
    """
    result = analyze_sql_file(
        path,
        dialect=config.parser.dialect,
        strict=config.parser.strict,
        encoding=config.parser.encoding
    )

    if config.output.format == "markdown":
        text = render_markdown(result)
    else:
        text = result.to_json(indent=config.output.indent) + "\n"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"✓ Report written to {output}", file=sys.stderr)
    else:
        sys.stdout.write(text)


def statements_cmd(path: str, config: AnalyzerConfig) -> None:
    """Print the statement records the parser produced for a dump."""
    dump_path = Path(path)
    if not dump_path.exists():
        raise FileNotFoundError(f"SQL file not found: {dump_path}")

    records = parse_dump(
        dump_path.read_text(encoding=config.parser.encoding),
        dialect=config.parser.dialect,
        strict=config.parser.strict
    )
    logger.info(f"Parsed {len(records)} statements from {dump_path.name}")
    sys.stdout.write(json.dumps(records, indent=config.output.indent or None) + "\n")


if __name__ == "__main__":
    run()
