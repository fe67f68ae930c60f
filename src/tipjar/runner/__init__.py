"""
CLI runner module.

Provides commands:
- parse: Pasted text → report JSON
- extract: Document → OCR → report JSON
- distribute: Report JSON + pool → payouts
- serve: JSON API server
- init-config: Default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
