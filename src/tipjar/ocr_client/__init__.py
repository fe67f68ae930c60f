"""
OCR service client.

Provides:
- Submit a document to Azure Document Intelligence (prebuilt-read)
- Follow long-running analyze operations
- Flatten the response into transcript + word confidences

Single request per submission by default.
"""

from .client import (
    DocumentIntelligenceClient,
    OCRAPIError,
    OCRConnectionError,
    OCRError,
    OCRNotConfiguredError,
    ReadResult,
)

__all__ = [
    "DocumentIntelligenceClient",
    "ReadResult",
    "OCRError",
    "OCRAPIError",
    "OCRConnectionError",
    "OCRNotConfiguredError",
]
