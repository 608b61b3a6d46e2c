"""
Report output for the takeover scanner.

Each match is written as one line, either tab separated text
(``target<TAB>service<TAB>true|false``) or a JSON object per line.
"""

import json
import sys
from contextlib import contextmanager
from dataclasses import asdict
from typing import Iterable, Iterator, Optional, TextIO

from rich.console import Console
from rich.table import Table

from fingerprints import Match
from scanner_errors import OutputWriteError

OUTPUT_FORMATS = ("text", "jsonl")


def format_match(match: Match, fmt: str = "text") -> str:
    """Render a match as a single report line (no trailing newline)"""
    if fmt == "jsonl":
        return json.dumps(asdict(match))
    if fmt == "text":
        return f"{match.target}\t{match.service}\t{str(match.vulnerable).lower()}"
    raise ValueError(f"Unknown output format: {fmt}")


def write_report(matches: Iterable[Match], sink: Optional[TextIO], fmt: str = "text",
                 vulnerable_only: bool = False) -> int:
    """Write matches to ``sink`` one per line and return how many were written.

    A ``None`` sink is a no-op used for dry runs.
    """
    if sink is None:
        return 0

    written = 0
    try:
        for match in matches:
            if vulnerable_only and not match.vulnerable:
                continue
            sink.write(format_match(match, fmt) + "\n")
            written += 1
        sink.flush()
    except OSError as e:
        raise OutputWriteError(getattr(sink, "name", ""), f"{type(e).__name__}: {e}") from e

    return written


@contextmanager
def open_sink(path: str = "") -> Iterator[TextIO]:
    """Yield a writable sink: stdout when ``path`` is empty, else a truncated file"""
    if not path:
        yield sys.stdout
        return

    try:
        handle = open(path, "w", encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(path, f"{type(e).__name__}: {e}") from e

    with handle:
        yield handle


ERROR_DESCRIPTIONS = {
    'Timeout': 'Host did not answer within the probe timeout',
    'Connection error': 'Connection refused or network unreachable (offline/blocked)',
    'DNS resolution': 'Name does not resolve (possible dangling record)',
    'SSL/TLS errors': 'Certificate issues or protocol mismatches',
    'Bad status': 'Final response was not a 2xx/3xx status',
    'Other errors': 'Various other HTTP/network errors'
}


def print_summary(report, console: Optional[Console] = None):
    """Print formatted scan summary with match list and error breakdown"""
    console = console or Console(stderr=True)

    table = Table(title="🔍 Takeover Scan Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green")

    table.add_row("Targets loaded", str(report.total))
    table.add_row("Targets probed", str(report.probed))
    table.add_row("Malformed targets skipped", str(report.invalid))
    table.add_row("Targets failed or unreachable", str(report.failed))
    table.add_row("Fingerprint matches", str(len(report.matches)))
    table.add_row("Vulnerable matches", str(sum(1 for m in report.matches if m.vulnerable)))
    table.add_row("Total scan duration", f"{report.duration:.2f} seconds")

    console.print(table)

    if report.matches:
        match_table = Table(title="🎯 Matched Fingerprints")
        match_table.add_column("Target", style="white")
        match_table.add_column("Service", style="magenta")
        match_table.add_column("Vulnerable", style="red")
        for match in report.matches:
            match_table.add_row(match.target, match.service, "yes" if match.vulnerable else "no")
        console.print(match_table)

    breakdown = report.error_breakdown()
    if any(count > 0 for count in breakdown.values()):
        error_table = Table(title="❌ Error Breakdown")
        error_table.add_column("Error Type", style="red")
        error_table.add_column("Count", style="yellow")
        error_table.add_column("Description", style="white")

        for error_type, count in breakdown.items():
            if count > 0:
                error_table.add_row(
                    error_type,
                    str(count),
                    ERROR_DESCRIPTIONS.get(error_type, "Unknown error type")
                )

        console.print("\n")
        console.print(error_table)
