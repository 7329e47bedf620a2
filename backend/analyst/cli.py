"""
Command-line analysis of a CSV, Excel or JSON dataset.

    python -m analyst.cli sales.csv --pretty
    python -m analyst.cli payload.json --output result.json

A JSON input must be {"headers": [...], "sampleData": [[...], ...]}. The
analysis output is printed (or written to --output); any analysis error is
reported on stderr with exit code 1.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from analyst.core.config import get_settings
from analyst.core.errors import AnalysisError, ErrorCodes, InputValidationError
from analyst.core.logging import configure_logging
from analyst.services.analysis import analyze_dataset, formatter
from analyst.services.parser import parse_upload

logger = logging.getLogger(__name__)


def load_payload(path: Path) -> Any:
    """Analysis payload from a JSON request file or a spreadsheet."""
    if not path.is_file():
        raise InputValidationError(f"File not found: {path}", ErrorCodes.INVALID_INPUT)

    if path.suffix.lower() == ".json":
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InputValidationError(f"Invalid JSON in {path.name}: {e.msg}", ErrorCodes.PARSE_ERROR) from e

    return parse_upload(path.name, path.read_bytes())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="analyst",
        description="Recommend charts and write an analysis report for a tabular dataset.",
    )
    parser.add_argument("file", type=Path, help="CSV, XLSX/XLS or JSON request file")
    parser.add_argument("-o", "--output", type=Path, help="write the JSON result to this file")
    parser.add_argument("--pretty", action="store_true", help="indent the JSON output")
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL (default WARNING)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    # stdout is reserved for the JSON result
    configure_logging(args.log_level or "WARNING", stream=sys.stderr)
    get_settings()

    try:
        payload = load_payload(args.file)
        output = asyncio.run(analyze_dataset(payload))
    except AnalysisError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        for suggestion in e.suggestions:
            print(f"  - {suggestion}", file=sys.stderr)
        return 1

    text = formatter.to_json_string(output, indent=2 if args.pretty else None)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote analysis to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
