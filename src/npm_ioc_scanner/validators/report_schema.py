"""Validate a JSON scan report against the bundled schema.

Usage:
  npm-ioc-validate-report report.json [--schema path] [--summary]
"""

from __future__ import annotations

import argparse
import json
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from ..summary import render_summary

DEFAULT_SCHEMA = Path(__file__).resolve().parents[1] / "schemas" / "report.schema.json"


class ReportValidationError(ValueError):
    """A report does not conform to the schema; ``violations`` lists each problem."""

    def __init__(self, violations: list[str]) -> None:
        super().__init__("\n" + "\n".join(f"- {violation}" for violation in violations))
        self.violations = violations


def _describe(error: ValidationError) -> str:
    pointer = "/".join(str(part) for part in error.absolute_path)
    return f"{pointer or '<root>'}: {error.message}"


@lru_cache(maxsize=None)
def _validator(schema_path: Path) -> Draft202012Validator:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_report(report: dict[str, Any], schema_path: Path = DEFAULT_SCHEMA) -> None:
    """Raise :class:`ReportValidationError` listing every violation in ``report``."""
    errors = _validator(Path(schema_path)).iter_errors(report)
    violations = sorted(_describe(error) for error in errors)
    if violations:
        raise ReportValidationError(violations)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate a scan report against its schema")
    parser.add_argument("input", type=Path, help="Path to the JSON report to validate")
    parser.add_argument(
        "--schema",
        type=Path,
        default=DEFAULT_SCHEMA,
        help="Path to the JSON schema used for validation",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print the Markdown summary of a valid report",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        report = json.loads(args.input.read_text(encoding="utf-8"))
        validate_report(report, args.schema)
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"ERROR: Failed to read JSON: {exc}", file=sys.stderr)
        return 1
    except ReportValidationError as exc:
        print(f"ERROR: Report failed validation:{exc}", file=sys.stderr)
        return 1

    if args.summary:
        print(render_summary(report), end="")
    else:
        print(f"Report {args.input} is valid against {args.schema}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
