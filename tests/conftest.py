"""Test configuration and fixtures for the takeover scanner."""

import json
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from fingerprints import Fingerprint


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog_records() -> list[dict]:
    """Catalog records in fingerprints.json layout."""
    return [
        {
            "service": "TestService",
            "cname": [],
            "fingerprint": "NoSuchBucket",
            "http_status": None,
            "nxdomain": False,
            "status": "Vulnerable",
            "vulnerable": True,
        }
    ]


@pytest.fixture
def catalog_file(temp_dir: Path, catalog_records: list[dict]) -> Path:
    """Write the catalog records to a fingerprints.json file."""
    path = temp_dir / "fingerprint.json"
    path.write_text(json.dumps(catalog_records), encoding="utf-8")
    return path


@pytest.fixture
def targets_file(temp_dir: Path) -> Path:
    """Write a two-line target list."""
    path = temp_dir / "subdomains.txt"
    path.write_text("sub1.example.com\nsub2.example.com\n", encoding="utf-8")
    return path


@pytest.fixture
def catalog() -> list[Fingerprint]:
    """An in-memory catalog with one vulnerable and one informational service."""
    return [
        Fingerprint(service="TestService", fingerprint="NoSuchBucket", vulnerable=True),
        Fingerprint(service="Generic", fingerprint="Not Found", vulnerable=False),
    ]
