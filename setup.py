#!/usr/bin/env python3
"""
Setup script for the subdomain takeover scanner.
"""
from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="subdomain-takeover-scanner",
    version="1.0.0",
    author="Subdomain Scanner Contributors",
    author_email="",
    description="Async subdomain takeover scanner driven by service fingerprints",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/subdomain-takeover-scanner",
    py_modules=[
        "cli",
        "fingerprints",
        "report_writer",
        "scan",
        "scanner_errors",
        "takeover_scanner",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "Topic :: Internet :: WWW/HTTP",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "respx>=0.20",
        ],
    },
    entry_points={
        "console_scripts": [
            "takeover-scanner=cli:main",
        ],
    },
    keywords="subdomain takeover scanner security async http fingerprint",
    project_urls={
        "Bug Reports": "https://github.com/yourusername/subdomain-takeover-scanner/issues",
        "Source": "https://github.com/yourusername/subdomain-takeover-scanner",
    },
)
