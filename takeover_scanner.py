#!/usr/bin/env python3
"""
Subdomain Takeover Scanner

Probes a list of subdomains over HTTP(S) with a bounded pool of async workers
and matches each response against a catalog of service fingerprints. A match
means the subdomain most likely points at an unclaimed third-party resource
that anyone could register.

Author: Subdomain Scanner Contributors
License: MIT
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

import httpx
from rich.console import Console
from rich.progress import Progress

from fingerprints import Fingerprint, Match, load_fingerprints, match_fingerprints
from report_writer import open_sink, write_report
from scanner_errors import OutputWriteError, ProbeError, TargetLoadError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; TakeoverScanner/1.0)'


@dataclass
class ScanConfig:
    """Settings for one scan run.

    ``fingerprints_path`` has no default: the catalog location is always
    given explicitly.
    """
    targets_path: str = ""
    fingerprints_path: str = ""
    concurrency: int = 10
    timeout: float = 10.0
    output: str = ""
    output_format: str = "text"
    https: bool = False
    http_fallback: bool = True
    verify_ssl: bool = False
    vulnerable_only: bool = False
    require_all: bool = False
    include_error_status: bool = False
    max_redirects: int = 10
    body_limit: int = 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    show_progress: bool = False


@dataclass
class ProbeResult:
    """Outcome of a single HTTP probe"""
    target: str
    url: str = ""
    status_code: Optional[int] = None
    body: str = ""
    aliases: Tuple[str, ...] = ()
    error: Optional[str] = None


@dataclass
class ScanReport:
    """Matches gathered across a scan, in completion order.

    Workers only touch the report through the async methods, which hold
    ``_lock`` while mutating.
    """
    matches: List[Match] = field(default_factory=list)
    total: int = 0
    probed: int = 0
    invalid: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    duration: float = 0.0
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    async def add_matches(self, matches: Sequence[Match]):
        async with self._lock:
            self.probed += 1
            self.matches.extend(matches)

    async def record_invalid(self):
        async with self._lock:
            self.invalid += 1

    async def record_failure(self, error: ProbeError):
        async with self._lock:
            self.failed += 1
            self.errors.append(error.reason)

    def error_breakdown(self) -> Dict[str, int]:
        """Count probe failures by category"""
        error_categories = {
            'Timeout': 0,
            'Connection error': 0,
            'DNS resolution': 0,
            'SSL/TLS errors': 0,
            'Bad status': 0,
            'Other errors': 0
        }

        for error_msg in self.errors:
            if 'Timeout' in error_msg:
                error_categories['Timeout'] += 1
            elif 'Name or service not known' in error_msg or 'nodename' in error_msg or 'getaddrinfo' in error_msg:
                error_categories['DNS resolution'] += 1
            elif 'SSL' in error_msg or 'TLS' in error_msg or 'certificate' in error_msg.lower():
                error_categories['SSL/TLS errors'] += 1
            elif 'ConnectError' in error_msg:
                error_categories['Connection error'] += 1
            elif error_msg.startswith('HTTP status'):
                error_categories['Bad status'] += 1
            else:
                error_categories['Other errors'] += 1

        return error_categories


def is_valid_url(value: str) -> bool:
    """Return True if ``value`` parses as a URL with a scheme and a host"""
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
        return bool(parsed.scheme) and bool(parsed.hostname)
    except ValueError:
        return False


def load_targets(file_path: str) -> List[str]:
    """Load subdomains from a text file (one per line), keeping file order"""
    targets = []
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            for line in f:
                target = line.strip()
                if target and not target.startswith('#'):
                    targets.append(target)
    except (OSError, UnicodeDecodeError) as e:
        raise TargetLoadError(file_path, f"{type(e).__name__}: {e}") from e

    logger.info(f"Loaded {len(targets)} targets from {file_path}")
    return targets


class TakeoverScanner:
    """
    Bounded-concurrency takeover prober.

    A fixed pool of ``concurrency`` workers pulls targets from a shared
    queue, fetches each one, and runs the fingerprint matcher on the
    response. A failing target is counted and skipped; it never stops
    the other workers.

    Args:
        catalog (List[Fingerprint]): Fingerprints to match, shared read-only
        config (ScanConfig): Probe settings
    """
    def __init__(self, catalog: Sequence[Fingerprint], config: Optional[ScanConfig] = None):
        self.catalog = tuple(catalog)
        self.config = config or ScanConfig()
        self.console = Console(stderr=True)

        self.concurrency = self.config.concurrency
        if self.concurrency < 1:
            logger.warning(f"Concurrency {self.concurrency} is below 1, using 1")
            self.concurrency = 1

    def build_url(self, target: str) -> str:
        if '://' in target:
            return target
        scheme = 'https' if self.config.https else 'http'
        return f"{scheme}://{target}"

    async def _read_body(self, response: httpx.Response) -> str:
        """Read at most ``body_limit`` bytes of the response body"""
        limit = self.config.body_limit
        chunks = []
        size = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= limit:
                break
        return b''.join(chunks)[:limit].decode('utf-8', errors='ignore')

    async def _fetch(self, client: httpx.AsyncClient, target: str, url: str) -> ProbeResult:
        """Fetch a URL following redirects by hand so every hop host is recorded"""
        aliases = [urlparse(url).hostname]
        current_url = url
        redirect_count = 0

        while True:
            try:
                async with client.stream(
                    'GET',
                    current_url,
                    follow_redirects=False,
                    headers={
                        'User-Agent': self.config.user_agent,
                        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
                    }
                ) as response:
                    if not (response.is_redirect and redirect_count < self.config.max_redirects):
                        return ProbeResult(
                            target=target,
                            url=str(response.url),
                            status_code=response.status_code,
                            body=await self._read_body(response),
                            aliases=tuple(a for a in aliases if a),
                        )
                    location = urljoin(str(response.url), response.headers['location'])
            except httpx.ConnectError:
                # Try HTTP if HTTPS fails
                if self.config.http_fallback and current_url.startswith('https://'):
                    logger.debug(f"HTTPS failed for {target}, trying HTTP...")
                    current_url = 'http://' + current_url[len('https://'):]
                    continue
                raise

            current_url = location
            host = urlparse(current_url).hostname
            if host and host not in aliases:
                aliases.append(host)
            redirect_count += 1

    async def probe(self, client: httpx.AsyncClient, target: str, url: str) -> ProbeResult:
        """Probe one target; any failure becomes a ProbeError"""
        try:
            result = await asyncio.wait_for(self._fetch(client, target, url), timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            raise ProbeError(target, f"Timeout after {self.config.timeout}s") from e
        except Exception as e:
            # Bad redirect targets surface as ValueError from urlparse, not httpx errors
            raise ProbeError(target, f"{type(e).__name__}: {e}") from e

        if not self.config.include_error_status and not 200 <= result.status_code < 400:
            raise ProbeError(target, f"HTTP status {result.status_code}")
        return result

    async def _process(self, client: httpx.AsyncClient, target: str, report: ScanReport):
        url = self.build_url(target)
        if not is_valid_url(url):
            logger.warning(f"Skipping malformed target: {target!r}")
            await report.record_invalid()
            return

        try:
            result = await self.probe(client, target, url)
        except ProbeError as e:
            logger.warning(f"Failed to probe {e}")
            await report.record_failure(e)
            result = ProbeResult(target=target, url=url, error=e.reason)

        # Failed probes reach the matcher too; it never matches them
        matches = match_fingerprints(result, self.catalog, require_all=self.config.require_all)
        if result.error is not None:
            return

        for match in matches:
            logger.info(f"{match.target} matches {match.service} (vulnerable={match.vulnerable})")
        if not matches:
            logger.debug(f"{target}: no fingerprint matched (HTTP {result.status_code})")
        await report.add_matches(matches)

    async def _worker(self, client: httpx.AsyncClient, queue: asyncio.Queue, report: ScanReport,
                      progress: Progress, task):
        while True:
            try:
                target = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await self._process(client, target, report)
            finally:
                queue.task_done()
                progress.update(task, advance=1)

    async def scan(self, targets: Sequence[str]) -> ScanReport:
        """Probe every target and return the aggregated report"""
        start_time = time.time()
        report = ScanReport(total=len(targets))

        if not targets:
            logger.info("No targets to scan")
            return report

        queue: asyncio.Queue = asyncio.Queue()
        for target in targets:
            queue.put_nowait(target)

        worker_count = min(self.concurrency, len(targets))
        logger.info(f"Scanning {len(targets)} targets against {len(self.catalog)} fingerprints "
                    f"with {worker_count} workers")

        limits = httpx.Limits(max_keepalive_connections=worker_count, max_connections=worker_count * 2)
        timeout = httpx.Timeout(self.config.timeout)

        async with httpx.AsyncClient(limits=limits, timeout=timeout, verify=self.config.verify_ssl) as client:
            with Progress(console=self.console, disable=not self.config.show_progress) as progress:
                task = progress.add_task("[cyan]Probing targets...", total=len(targets))
                workers = [
                    asyncio.create_task(self._worker(client, queue, report, progress, task))
                    for _ in range(worker_count)
                ]
                results = await asyncio.gather(*workers, return_exceptions=True)

        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Worker failed with exception: {result!r}")

        report.duration = time.time() - start_time
        logger.info(f"Scan finished in {report.duration:.2f}s: {len(report.matches)} matches, "
                    f"{report.failed} failed, {report.invalid} malformed")
        return report


def scan(targets: Sequence[str], catalog: Sequence[Fingerprint], concurrency: int = 10,
         config: Optional[ScanConfig] = None) -> ScanReport:
    """Blocking wrapper around TakeoverScanner.scan"""
    config = replace(config or ScanConfig(), concurrency=concurrency)
    return asyncio.run(TakeoverScanner(catalog, config).scan(targets))


def run_scan(config: ScanConfig) -> ScanReport:
    """Load the catalog and targets, scan, and write the report.

    Catalog and target errors abort before any probe is sent. An
    OutputWriteError carries the finished report in its ``report`` attribute.
    """
    catalog = load_fingerprints(config.fingerprints_path)
    targets = load_targets(config.targets_path)

    report = asyncio.run(TakeoverScanner(catalog, config).scan(targets))

    try:
        with open_sink(config.output) as sink:
            write_report(report.matches, sink, config.output_format, config.vulnerable_only)
    except OutputWriteError as e:
        e.report = report
        raise

    return report
