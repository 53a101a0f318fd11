#!/usr/bin/env python3
"""
BATCH SGPA CALCULATOR
Calculates SGPA for every extracted transcript text file in a folder.

Output structure:
<output_dir>/
├── json/<transcript name>.json
└── sgpa_summary.csv

Usage: python3 scripts/batch_calculate.py <input_dir> [output_dir]
"""

import sys
import json
import logging
from pathlib import Path
from tqdm import tqdm
from dataclasses import dataclass, asdict
from typing import List, Optional

import pandas as pd

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from exceptions import TranscriptProcessingError
from result_processor import TranscriptResultProcessor


@dataclass
class CalculationResult:
    source_file: str
    roll_no: Optional[str]
    name: Optional[str]
    branch: Optional[str]
    semester: Optional[int]
    sgpa: Optional[float]
    total_credits: Optional[float]
    subject_count: int
    unmatched_count: int
    success: bool
    error: Optional[str]


def calculate_all(
    processor: TranscriptResultProcessor,
    text_files: List[Path],
    json_dir: Optional[Path] = None,
    progress: bool = True
) -> List[CalculationResult]:
    """Calculate SGPA for each text file, collecting failures instead of stopping."""
    # Reduce logging verbosity during batch
    logging.getLogger('result_processor').setLevel(logging.WARNING)
    logging.getLogger('metadata_extractor').setLevel(logging.WARNING)

    results = []

    iterator = tqdm(text_files, desc="Calculating", unit="transcript") if progress else text_files

    for text_file in iterator:
        try:
            text = text_file.read_text(encoding="utf-8", errors="replace")
            result = processor.process_text(text)

            if json_dir is not None:
                json_path = json_dir / f"{text_file.stem}.json"
                json_path.write_text(json.dumps(result.to_payload(), indent=2) + "\n", encoding="utf-8")

            results.append(CalculationResult(
                source_file=text_file.name,
                roll_no=result.roll_no,
                name=result.name,
                branch=result.branch,
                semester=result.semester,
                sgpa=result.sgpa,
                total_credits=result.total_credits,
                subject_count=len(result.subjects),
                unmatched_count=result.unmatched_count,
                success=True,
                error=None
            ))

        except (TranscriptProcessingError, OSError, ValueError) as e:
            results.append(CalculationResult(
                source_file=text_file.name,
                roll_no=None,
                name=None,
                branch=None,
                semester=None,
                sgpa=None,
                total_credits=None,
                subject_count=0,
                unmatched_count=0,
                success=False,
                error=str(e)
            ))
            if progress:
                tqdm.write(f"  ❌ Failed {text_file.name}: {str(e)[:50]}")

    return results


def write_summary(results: List[CalculationResult], output_path: Path) -> pd.DataFrame:
    """Write one CSV row per transcript."""
    summary = pd.DataFrame([asdict(r) for r in results])
    summary.to_csv(output_path, index=False)
    return summary


def print_summary(results: List[CalculationResult], output_base: Path):
    """Print calculation summary."""
    success = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print("\n" + "="*70)
    print("BATCH CALCULATION SUMMARY")
    print("="*70)

    print(f"\n✅ Successful: {len(success)}")
    print(f"❌ Failed: {len(failed)}")

    with_sgpa = [r.sgpa for r in success if r.sgpa is not None]
    if with_sgpa:
        print(f"\nSGPA range: {min(with_sgpa):.2f} - {max(with_sgpa):.2f}")

    partial = [r for r in success if r.unmatched_count]
    if partial:
        print(f"⚠️ {len(partial)} transcripts have subjects missing from the catalog")

    if failed:
        print("\n❌ FAILED TRANSCRIPTS:")
        print("-"*50)
        for r in failed:
            print(f"  {r.source_file}")
            print(f"      Error: {r.error[:80]}..." if len(r.error) > 80 else f"      Error: {r.error}")

    print(f"\n📁 Output: {output_base}")
    print("="*70)


def main():
    if len(sys.argv) < 2:
        print("Usage: python3 scripts/batch_calculate.py <input_dir> [output_dir]")
        sys.exit(2)

    input_dir = Path(sys.argv[1]).expanduser()
    output_base = Path(sys.argv[2]).expanduser() if len(sys.argv) > 2 else input_dir / "sgpa_results"

    print("="*70)
    print("BATCH SGPA CALCULATOR")
    print("="*70)

    text_files = sorted(input_dir.glob("*.txt"))
    if not text_files:
        print(f"❌ No .txt transcripts found in {input_dir}")
        sys.exit(1)

    json_dir = output_base / "json"
    json_dir.mkdir(parents=True, exist_ok=True)

    print(f"\n📊 Processing {len(text_files)} transcripts")
    processor = TranscriptResultProcessor()

    results = calculate_all(processor, text_files, json_dir=json_dir)
    write_summary(results, output_base / "sgpa_summary.csv")
    print_summary(results, output_base)

    sys.exit(0 if all(r.success for r in results) else 1)


if __name__ == "__main__":
    main()
