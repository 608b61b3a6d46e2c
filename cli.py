#!/usr/bin/env python3
"""
Command Line Interface for the Subdomain Takeover Scanner

Probes every subdomain in a target list and reports the ones whose HTTP
response matches a known takeover fingerprint.

Usage:
    python cli.py targets.txt --fingerprints fingerprints.json [options]

Example:
    python cli.py targets.txt -f fingerprints.json --concurrency 50 --vuln-only -o takeovers.txt

Author: Subdomain Scanner Contributors
License: MIT
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from report_writer import OUTPUT_FORMATS, print_summary
from scanner_errors import OutputWriteError, TakeoverScannerError
from takeover_scanner import DEFAULT_USER_AGENT, ScanConfig, run_scan


def setup_logging(log_file: Optional[str] = None, verbose: bool = False):
    """Configure logging to stderr and, optionally, a log file"""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Subdomain Takeover Scanner')
    parser.add_argument('targets_file', help='Path to file containing subdomains (one per line)')
    parser.add_argument('--fingerprints', '-f', required=True,
                       help='Path to the fingerprint catalog (JSON array or .jsonl)')
    parser.add_argument('--concurrency', '-c', type=int, default=10,
                       help='Number of concurrent probe workers (default: 10)')
    parser.add_argument('--timeout', '-t', type=float, default=10.0,
                       help='Per-target probe timeout in seconds (default: 10)')
    parser.add_argument('--output', '-o', default='',
                       help='Write matches to this file instead of stdout')
    parser.add_argument('--format', dest='output_format', choices=OUTPUT_FORMATS, default='text',
                       help='Report line format (default: text)')
    parser.add_argument('--https', action='store_true',
                       help='Use HTTPS for targets given without a scheme')
    parser.add_argument('--no-http-fallback', action='store_true',
                       help='Do not retry over HTTP when an HTTPS connection fails')
    parser.add_argument('--verify-ssl', action='store_true',
                       help='Verify TLS certificates')
    parser.add_argument('--vuln-only', action='store_true',
                       help='Only report matches for services flagged as vulnerable')
    parser.add_argument('--match-all', action='store_true',
                       help='Require every condition of a fingerprint to hold, not just one')
    parser.add_argument('--include-error-status', action='store_true',
                       help='Also match responses with 4xx/5xx final status codes')
    parser.add_argument('--max-redirects', type=int, default=10,
                       help='Maximum redirects to follow per target (default: 10)')
    parser.add_argument('--user-agent', default=DEFAULT_USER_AGENT,
                       help='User-Agent header sent with each probe')
    parser.add_argument('--log-file', default=None,
                       help='Also write logs to this file')
    parser.add_argument('--no-progress', action='store_true',
                       help='Hide the progress bar')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Log every probed target')
    return parser


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    return ScanConfig(
        targets_path=args.targets_file,
        fingerprints_path=args.fingerprints,
        concurrency=args.concurrency,
        timeout=args.timeout,
        output=args.output,
        output_format=args.output_format,
        https=args.https,
        http_fallback=not args.no_http_fallback,
        verify_ssl=args.verify_ssl,
        vulnerable_only=args.vuln_only,
        require_all=args.match_all,
        include_error_status=args.include_error_status,
        max_redirects=args.max_redirects,
        user_agent=args.user_agent,
        show_progress=not args.no_progress,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    console = Console(stderr=True)
    config = config_from_args(args)

    console.print(f"[bold blue]🚀 Starting takeover scan of {config.targets_path}...[/bold blue]")

    try:
        report = run_scan(config)
    except OutputWriteError as e:
        console.print(f"[red]Error: {e}[/red]")
        if e.report is not None:
            print_summary(e.report, console)
        return 1
    except TakeoverScannerError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    print_summary(report, console)
    console.print("[green]✅ Scan completed![/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
