"""
OCR confidence module.

Collects word-level confidence scores from an OCR analyze result and
averages them into the report confidence.
"""

from .scorer import average_confidence, collect_word_confidences

__all__ = [
    "average_confidence",
    "collect_word_confidences",
]
