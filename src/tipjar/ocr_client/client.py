"""
Azure Document Intelligence (prebuilt-read) client implementation.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..confidence import collect_word_confidences

logger = logging.getLogger(__name__)


class OCRError(Exception):
    """Base exception for OCR client errors."""
    pass


class OCRNotConfiguredError(OCRError):
    """Endpoint or key is missing."""
    pass


class OCRAPIError(OCRError):
    """API returned an error response."""
    def __init__(self, status_code: int, message: str, response_body: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"OCR request failed ({status_code}): {message}")


class OCRConnectionError(OCRError):
    """Failed to reach the OCR service."""
    pass


@dataclass
class ReadResult:
    """Flattened OCR output."""
    content: str  # Full transcript
    word_confidences: list[float] = field(default_factory=list)
    request_id: str = "unknown"
    duration_ms: int = 0

    @classmethod
    def from_api_response(
        cls, data: dict, request_id: str = "unknown", duration_ms: int = 0
    ) -> "ReadResult":
        """Create from an analyze response body."""
        analyze_result = (data or {}).get("analyzeResult") or {}
        return cls(
            content=analyze_result.get("content") or "",
            word_confidences=collect_word_confidences(analyze_result),
            request_id=request_id,
            duration_ms=duration_ms,
        )


class DocumentIntelligenceClient:
    """
    Client for the Azure Document Intelligence read model.

    Features:
    - Submit document bytes for analysis
    - Follow long-running operations (202 + Operation-Location)
    - Optional retry with backoff (off by default)
    """

    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str = "2024-07-31",
        model_id: str = "prebuilt-read",
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        poll_interval: float = 1.0,
        max_polls: int = 60,
    ):
        """
        Initialize OCR client.

        Args:
            endpoint: Resource URL (e.g., "https://my-resource.cognitiveservices.azure.com")
            api_key: Subscription key
            api_version: Document Intelligence API version
            model_id: Analyze model
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts for transient failures
            backoff_factor: Backoff factor for retries
            poll_interval: Seconds between operation polls
            max_polls: Give up after this many polls
        """
        self.endpoint = (endpoint or "").rstrip("/")
        self.api_key = api_key or ""
        self.api_version = api_version
        self.model_id = model_id
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.max_polls = max_polls

        self.session = requests.Session()
        self.session.headers.update({
            "Ocp-Apim-Subscription-Key": self.api_key,
            "x-ms-cognitive-service-learning-optout": "true",
        })

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_config(cls, ocr_config) -> "DocumentIntelligenceClient":
        """Create a client from an OCRConfig."""
        return cls(
            endpoint=ocr_config.endpoint,
            api_key=ocr_config.api_key,
            api_version=ocr_config.api_version,
            model_id=ocr_config.model_id,
            timeout=ocr_config.timeout_seconds,
            max_retries=ocr_config.max_retries,
            poll_interval=ocr_config.poll_interval_seconds,
            max_polls=ocr_config.max_polls,
        )

    @property
    def analyze_url(self) -> str:
        return (
            f"{self.endpoint}/formrecognizer/documentModels/{self.model_id}:analyze"
            f"?api-version={self.api_version}"
        )

    def is_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)

    def _request(
        self,
        method: str,
        url: str,
        data: Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> requests.Response:
        """Make an API request with error handling."""
        try:
            response = self.session.request(
                method=method,
                url=url,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise OCRConnectionError(f"Failed to connect to OCR service at {self.endpoint}: {e}")
        except requests.exceptions.Timeout as e:
            raise OCRConnectionError(f"Request to OCR service timed out: {e}")
        except requests.exceptions.RequestException as e:
            raise OCRError(f"Request failed: {e}")

        if not response.ok:
            request_id = response.headers.get("apim-request-id", "unknown")
            logger.error("extract:%s: OCR error %s", request_id, response.status_code)
            raise OCRAPIError(
                status_code=response.status_code,
                message=response.reason or "error",
                response_body=response.text,
            )

        return response

    def analyze(self, file_bytes: bytes, content_type: str = "application/octet-stream") -> ReadResult:
        """
        Run the read model over a document.

        Args:
            file_bytes: Raw upload (PDF or image)
            content_type: MIME type of the upload

        Returns:
            ReadResult with transcript and word confidences

        Raises:
            OCRNotConfiguredError: If endpoint or key is missing
            OCRAPIError: On a non-2xx response or a failed operation
            OCRConnectionError: If the service cannot be reached
        """
        if not self.is_configured():
            raise OCRNotConfiguredError(
                "Azure Document Intelligence credentials are not configured."
            )

        started = time.monotonic()
        response = self._request(
            "POST",
            self.analyze_url,
            data=file_bytes,
            headers={"Content-Type": content_type or "application/octet-stream"},
        )
        request_id = response.headers.get("apim-request-id", "unknown")

        operation_url = response.headers.get("Operation-Location")
        if response.status_code == 202 and operation_url:
            data = self._poll_operation(operation_url, request_id)
        else:
            data = self._json(response)

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info("extract:%s: completed in %dms", request_id, duration_ms)
        return ReadResult.from_api_response(data, request_id=request_id, duration_ms=duration_ms)

    def _poll_operation(self, operation_url: str, request_id: str) -> dict[str, Any]:
        """Poll a long-running analyze operation until it finishes."""
        for attempt in range(self.max_polls):
            data = self._json(self._request("GET", operation_url))
            status = str(data.get("status", "")).lower()

            if status == "succeeded":
                return data
            if status == "failed":
                error = data.get("error") or {}
                raise OCRAPIError(
                    status_code=200,
                    message=error.get("message", "Analyze operation failed"),
                    response_body=str(data),
                )

            logger.debug("extract:%s: operation %s (poll %d)", request_id, status, attempt + 1)
            time.sleep(self.poll_interval)

        raise OCRError(f"Analyze operation did not finish after {self.max_polls} polls")

    def _json(self, response: requests.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise OCRError(f"OCR service returned invalid JSON: {e}") from e
        return data if isinstance(data, dict) else {}
