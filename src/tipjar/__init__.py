"""
Tip report → Partner hours → Proportional tip distribution

Turns the OCR (or pasted) text of a tip distribution report into an
editable list of partners with their tippable hours, then splits a tip
pool across them by hours with configurable rounding.
"""

__version__ = "0.1.0"
