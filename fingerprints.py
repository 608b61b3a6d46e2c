"""
Takeover Fingerprint Catalog

Loads the service fingerprint database and matches probe results against it.
The catalog format is the can-i-take-over-xyz ``fingerprints.json`` layout:

    [
        {
            "service": "AWS/S3",
            "cname": ["amazonaws"],
            "fingerprint": "The specified bucket does not exist",
            "http_status": 404,
            "nxdomain": false,
            "status": "Vulnerable",
            "vulnerable": true
        }
    ]

A file ending in ``.jsonl`` is read as one record per line instead.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from scanner_errors import CatalogLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fingerprint:
    """A single takeover signature for one hosting service"""
    service: str
    fingerprint: str = ""
    cname: Tuple[str, ...] = ()
    http_status: Optional[int] = None
    vulnerable: bool = False
    nxdomain: bool = False
    status: str = ""


@dataclass(frozen=True)
class Match:
    """A target whose response matched a fingerprint"""
    target: str
    service: str
    vulnerable: bool


def _parse_cname(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(item).strip() for item in value if item and str(item).strip())


def _parse_status(value: Any) -> Optional[int]:
    # Catalog entries use null, 0 or "" when no status applies
    if value in (None, "", 0):
        return None
    return int(value)


def fingerprint_from_dict(record: Dict[str, Any]) -> Fingerprint:
    """Build a Fingerprint from one catalog record"""
    service = str(record.get("service") or "").strip()
    if not service:
        raise ValueError("fingerprint record has no service name")

    return Fingerprint(
        service=service,
        fingerprint=str(record.get("fingerprint") or ""),
        cname=_parse_cname(record.get("cname")),
        http_status=_parse_status(record.get("http_status")),
        vulnerable=bool(record.get("vulnerable", False)),
        nxdomain=bool(record.get("nxdomain", False)),
        status=str(record.get("status") or ""),
    )


def _read_records(path: Path) -> List[Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    records = json.loads(text)
    if not isinstance(records, list):
        raise ValueError("expected a JSON array of fingerprint records")
    return records


def load_fingerprints(path: str) -> List[Fingerprint]:
    """Load the fingerprint catalog from ``path``.

    Raises CatalogLoadError when the file is missing, unreadable or malformed.
    An empty catalog is valid and simply never matches.
    """
    catalog_path = Path(path)
    try:
        records = _read_records(catalog_path)
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogLoadError(path, f"{type(e).__name__}: {e}") from e
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        raise CatalogLoadError(path, f"invalid catalog: {e}") from e

    catalog = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise CatalogLoadError(path, f"record {index} is not an object")
        try:
            catalog.append(fingerprint_from_dict(record))
        except (TypeError, ValueError) as e:
            raise CatalogLoadError(path, f"record {index}: {e}") from e

    logger.info(f"Loaded {len(catalog)} fingerprints from {path}")
    return catalog


def _cname_matches(patterns: Iterable[str], aliases: Iterable[str]) -> bool:
    aliases = [alias.lower() for alias in aliases if alias]
    return any(pattern.lower() in alias for pattern in patterns for alias in aliases)


def match_fingerprints(result, catalog: Iterable[Fingerprint], require_all: bool = False) -> List[Match]:
    """Return every fingerprint in ``catalog`` that matches a probe result.

    The body pattern is a literal, case-sensitive substring. ``http_status``
    and ``cname`` only take part when the fingerprint sets them. By default
    any one satisfied condition is a match; ``require_all`` demands that all
    present conditions hold. Fingerprints with an empty body pattern are
    inactive and never match.
    """
    if result.error is not None:
        return []

    body = result.body or ""
    matches = []
    for fp in catalog:
        if not fp.fingerprint:
            continue

        checks = [fp.fingerprint in body]
        if fp.http_status is not None:
            checks.append(result.status_code == fp.http_status)
        if fp.cname:
            checks.append(_cname_matches(fp.cname, result.aliases))

        matched = all(checks) if require_all else any(checks)
        if matched:
            matches.append(Match(target=result.target, service=fp.service, vulnerable=fp.vulnerable))

    return matches
