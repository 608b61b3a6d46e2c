#!/usr/bin/env python3
"""
Simple takeover scanner - one script to rule them all.
Usage: python scan.py targets.txt fingerprints.json [concurrency]
"""

import sys

from report_writer import print_summary
from scanner_errors import TakeoverScannerError
from takeover_scanner import ScanConfig, run_scan


def main():
    if len(sys.argv) < 3:
        print("Usage: python scan.py targets.txt fingerprints.json [concurrency]")
        sys.exit(1)

    config = ScanConfig(
        targets_path=sys.argv[1],
        fingerprints_path=sys.argv[2],
        concurrency=int(sys.argv[3]) if len(sys.argv) > 3 else 10,
        show_progress=True,
    )

    print(f"🔍 Scanning {config.targets_path} with {config.concurrency} concurrent workers", file=sys.stderr)

    try:
        report = run_scan(config)
    except TakeoverScannerError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    print_summary(report)


if __name__ == "__main__":
    main()
