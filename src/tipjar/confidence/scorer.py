"""
OCR confidence averaging.
"""

from collections.abc import Iterable
from typing import Any, Optional


def collect_word_confidences(analyze_result: Optional[dict[str, Any]]) -> list[float]:
    """
    Gather every numeric word confidence from an analyze result.

    Walks ``pages[].words[].confidence``. Pages without a word list and
    words without a numeric confidence are skipped.

    Args:
        analyze_result: The ``analyzeResult`` object of the OCR response

    Returns:
        Confidence values in document order
    """
    confidences: list[float] = []
    if not analyze_result:
        return confidences

    for page in analyze_result.get("pages") or []:
        words = page.get("words") if isinstance(page, dict) else None
        if not isinstance(words, list):
            continue
        for word in words:
            value = word.get("confidence") if isinstance(word, dict) else None
            # bool is an int subclass
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                confidences.append(float(value))

    return confidences


def average_confidence(values: Iterable[float]) -> Optional[float]:
    """
    Arithmetic mean rounded to 2 decimals.

    An empty input means "no confidence available" and yields None, not 0.
    """
    values = list(values)
    if not values:
        return None
    return round(sum(values) / len(values), 2)
