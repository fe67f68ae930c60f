"""Test fixtures and utilities."""

from pathlib import Path

import pytest

# Sample OCR transcript of a tip distribution report
SAMPLE_REPORT_TEXT = """
TIP DISTRIBUTION REPORT
Store #8123   Seattle - 5th & Pike
Period: 10/01/2024 - 10/14/2024

Partner #   Partner Name              Partner Global ID    Tippable Hours
12345       Smith, Alex J             US98765432           31.45
23456       Nguyen,  Bao              US12345678           20.00
345678      Garcia-Lopez, Maria       US00A11B22           40.5
4567        O'Brien, Pat              US55                 10.8

Total Tippable Hours: 102.75
Executed By: Store Manager
"""

# Single-row report from the end-to-end example
SINGLE_PARTNER_TEXT = """12345 Smith, Alex J US98765432 31.45
Total Tippable Hours: 31.45"""

# Something that is not a tip report at all
UNRELATED_TEXT = """
Weekly Schedule
Mon 6:00 - 14:00
Tue 6:00 - 14:00
"""


@pytest.fixture
def sample_report_text() -> str:
    """Full tip distribution report transcript."""
    return SAMPLE_REPORT_TEXT


@pytest.fixture
def single_partner_text() -> str:
    """One partner row plus the total hours line."""
    return SINGLE_PARTNER_TEXT


@pytest.fixture
def unrelated_text() -> str:
    """Text without any partner rows or totals."""
    return UNRELATED_TEXT


@pytest.fixture
def sample_analyze_response() -> dict:
    """Sample Document Intelligence analyze response (succeeded)."""
    return {
        "status": "succeeded",
        "analyzeResult": {
            "apiVersion": "2024-07-31",
            "modelId": "prebuilt-read",
            "content": SAMPLE_REPORT_TEXT,
            "pages": [
                {
                    "pageNumber": 1,
                    "words": [
                        {"content": "TIP", "confidence": 0.99},
                        {"content": "DISTRIBUTION", "confidence": 0.97},
                        {"content": "12345", "confidence": 0.8},
                    ],
                },
                {
                    "pageNumber": 2,
                    "words": [
                        {"content": "Total", "confidence": 0.96},
                    ],
                },
            ],
        },
    }


@pytest.fixture
def report_file(tmp_path) -> Path:
    """Report transcript written to disk."""
    path = tmp_path / "report.txt"
    path.write_text(SAMPLE_REPORT_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def missing_config(tmp_path) -> Path:
    """Path to a config file that does not exist (defaults apply)."""
    return tmp_path / "missing-config.yaml"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment overrides that would leak into config loading."""
    for name in ("AZURE_CV_ENDPOINT", "AZURE_CV_KEY", "TIPJAR_OCR_TIMEOUT", "TIPJAR_ROUNDING"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
