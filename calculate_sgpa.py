#!/usr/bin/env python3
"""
Simple wrapper to calculate the SGPA for one extracted transcript text file
Usage: python3 calculate_sgpa.py <transcript.txt> [output.json] [--branch CSE] [--semester 3] [--roll-no X] [--name X]
"""

import sys
import json
import logging
import argparse
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from exceptions import TranscriptProcessingError
from result_processor import TranscriptResultProcessor

HINT_OPTIONS = ("branch", "semester", "roll_no", "name")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calculate_sgpa.py",
        description="Calculate the SGPA for one extracted transcript text file",
    )
    parser.add_argument("transcript", help="Extracted transcript text file")
    parser.add_argument("output", nargs="?", default=None, help="Optional JSON output path (prints to stdout otherwise)")
    parser.add_argument("--branch", help="Branch hint, used when the text has none")
    parser.add_argument("--semester", help="Semester hint (number or roman numeral)")
    parser.add_argument("--roll-no", dest="roll_no", help="Roll number hint")
    parser.add_argument("--name", help="Student name hint")
    return parser


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors and 0 for --help
        return e.code if isinstance(e.code, int) else 2

    hints = {key: getattr(args, key) for key in HINT_OPTIONS if getattr(args, key) is not None}

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    input_path = Path(args.transcript).expanduser()
    output_path = Path(args.output).expanduser() if args.output else None

    try:
        text = input_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"ERROR: Could not read {input_path}: {e}")
        return 2

    try:
        result = TranscriptResultProcessor().process_text(text, **hints)
    except TranscriptProcessingError as e:
        print(f"ERROR: {e}")
        return 2
    except Exception as e:
        print(f"❌ Calculation failed: {e}")
        return 1

    payload = json.dumps(result.to_payload(), indent=2)

    if output_path:
        output_path.write_text(payload + "\n", encoding="utf-8")
        print(f"✅ SGPA {result.sgpa} saved to: {output_path}")
    else:
        print(payload)

    if result.unmatched_count:
        print(
            f"⚠️ {result.unmatched_count} subjects not found in the catalog "
            f"(coverage {result.coverage:.0%})",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
