"""Command-line helper to run the resume analysis pipeline."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from resume_analyzer import ResumeAnalyzer
from resume_analyzer.errors import ResumeAnalyzerError

logging.basicConfig(level=logging.INFO)


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract and ATS-score a PDF resume")
    parser.add_argument("file", type=Path, help="Path to the resume PDF")
    parser.add_argument("--fields", type=Path, default=None, help="Optional JSON file with parsed resume fields")
    parser.add_argument("--keywords", type=Path, default=None, help="Optional JSON file with a keyword list")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to save the JSON report")
    args = parser.parse_args()

    parsed_fields = json.loads(args.fields.read_text()) if args.fields else None
    keywords = json.loads(args.keywords.read_text()) if args.keywords else None

    analyzer = ResumeAnalyzer()
    try:
        report = analyzer.analyze(args.file.read_bytes(), parsed_fields=parsed_fields, keywords=keywords)
    except ResumeAnalyzerError as error:
        logging.error("Analysis failed (%s): %s", error.kind, error)
        return 1

    json_payload = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
    print(json_payload)

    if args.output:
        args.output.write_text(json_payload)
        logging.info("Saved report to %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
