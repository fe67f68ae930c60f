"""
Tests for the Document Intelligence OCR client.

These tests use responses library to mock HTTP requests,
validating client behavior without making real API calls.
"""

import pytest
import requests
import responses

from tipjar.config import OCRConfig
from tipjar.ocr_client import (
    DocumentIntelligenceClient,
    OCRAPIError,
    OCRConnectionError,
    OCRError,
    OCRNotConfiguredError,
    ReadResult,
)


class TestDocumentIntelligenceClient:
    """Test Azure Document Intelligence read client."""

    ENDPOINT = "https://ocr.test"
    KEY = "test-key-12345"
    ANALYZE_URL = (
        "https://ocr.test/formrecognizer/documentModels/prebuilt-read:analyze"
        "?api-version=2024-07-31"
    )
    OPERATION_URL = (
        "https://ocr.test/formrecognizer/documentModels/prebuilt-read/analyzeResults/op-1"
        "?api-version=2024-07-31"
    )

    def make_client(self, **kwargs) -> DocumentIntelligenceClient:
        kwargs.setdefault("poll_interval", 0)
        return DocumentIntelligenceClient(self.ENDPOINT, self.KEY, **kwargs)

    def test_analyze_url(self):
        """Trailing slashes on the endpoint are dropped."""
        client = DocumentIntelligenceClient(self.ENDPOINT + "/", self.KEY)
        assert client.analyze_url == self.ANALYZE_URL

    def test_from_config(self):
        config = OCRConfig(
            endpoint=self.ENDPOINT,
            api_key=self.KEY,
            timeout_seconds=15,
            max_polls=5,
            poll_interval_seconds=0.25,
        )
        client = DocumentIntelligenceClient.from_config(config)

        assert client.analyze_url == self.ANALYZE_URL
        assert client.timeout == 15
        assert client.max_polls == 5
        assert client.poll_interval == 0.25
        assert client.is_configured()

    @responses.activate
    def test_analyze_synchronous_result(self, sample_analyze_response):
        """A 200 response body is used directly."""
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            json=sample_analyze_response,
            status=200,
            headers={"apim-request-id": "req-1"},
        )

        result = self.make_client().analyze(b"%PDF-1.4", "application/pdf")

        assert isinstance(result, ReadResult)
        assert "Total Tippable Hours: 102.75" in result.content
        assert result.word_confidences == [0.99, 0.97, 0.8, 0.96]
        assert result.request_id == "req-1"

    @responses.activate
    def test_analyze_sends_key_and_body(self, sample_analyze_response):
        """Key, opt-out header, content type and raw bytes are sent."""
        responses.add(responses.POST, self.ANALYZE_URL, json=sample_analyze_response, status=200)

        self.make_client().analyze(b"\x89PNG...", "image/png")

        request = responses.calls[0].request
        assert request.headers["Ocp-Apim-Subscription-Key"] == self.KEY
        assert request.headers["x-ms-cognitive-service-learning-optout"] == "true"
        assert request.headers["Content-Type"] == "image/png"
        assert request.body == b"\x89PNG..."

    @responses.activate
    def test_analyze_polls_operation(self, sample_analyze_response):
        """A 202 with Operation-Location is polled until it succeeds."""
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            status=202,
            headers={"Operation-Location": self.OPERATION_URL, "apim-request-id": "req-2"},
        )
        responses.add(responses.GET, self.OPERATION_URL, json={"status": "running"}, status=200)
        responses.add(responses.GET, self.OPERATION_URL, json=sample_analyze_response, status=200)

        result = self.make_client().analyze(b"%PDF-1.4", "application/pdf")

        assert len(responses.calls) == 3
        assert result.request_id == "req-2"
        assert result.word_confidences == [0.99, 0.97, 0.8, 0.96]

    @responses.activate
    def test_failed_operation(self):
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            status=202,
            headers={"Operation-Location": self.OPERATION_URL},
        )
        responses.add(
            responses.GET,
            self.OPERATION_URL,
            json={"status": "failed", "error": {"code": "InvalidContent", "message": "Bad document"}},
            status=200,
        )

        with pytest.raises(OCRAPIError) as exc_info:
            self.make_client().analyze(b"junk", "application/pdf")

        assert exc_info.value.message == "Bad document"

    @responses.activate
    def test_operation_never_finishes(self):
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            status=202,
            headers={"Operation-Location": self.OPERATION_URL},
        )
        responses.add(responses.GET, self.OPERATION_URL, json={"status": "running"}, status=200)

        with pytest.raises(OCRError, match="did not finish after 2 polls"):
            self.make_client(max_polls=2).analyze(b"%PDF-1.4", "application/pdf")

        assert len(responses.calls) == 3

    @responses.activate
    def test_api_error(self):
        """Non-2xx responses raise OCRAPIError with the status and body."""
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            json={"error": {"code": "401", "message": "Access denied"}},
            status=401,
            headers={"apim-request-id": "req-3"},
        )

        with pytest.raises(OCRAPIError) as exc_info:
            self.make_client().analyze(b"%PDF-1.4", "application/pdf")

        assert exc_info.value.status_code == 401
        assert "Access denied" in exc_info.value.response_body

    @responses.activate
    def test_connection_error(self):
        responses.add(
            responses.POST,
            self.ANALYZE_URL,
            body=requests.exceptions.ConnectionError("refused"),
        )

        with pytest.raises(OCRConnectionError):
            self.make_client().analyze(b"%PDF-1.4", "application/pdf")

    @responses.activate
    def test_invalid_json(self):
        responses.add(responses.POST, self.ANALYZE_URL, body="<html>oops</html>", status=200)

        with pytest.raises(OCRError, match="invalid JSON"):
            self.make_client().analyze(b"%PDF-1.4", "application/pdf")

    @responses.activate
    def test_not_configured(self):
        """Missing credentials fail before any request is made."""
        client = DocumentIntelligenceClient("", "")

        assert not client.is_configured()
        with pytest.raises(OCRNotConfiguredError):
            client.analyze(b"%PDF-1.4", "application/pdf")
        assert len(responses.calls) == 0


class TestReadResult:
    """Tests for flattening analyze responses."""

    def test_from_api_response(self, sample_analyze_response):
        result = ReadResult.from_api_response(sample_analyze_response, request_id="abc")

        assert result.content.startswith("\nTIP DISTRIBUTION REPORT")
        assert len(result.word_confidences) == 4
        assert result.request_id == "abc"

    def test_empty_response(self):
        result = ReadResult.from_api_response({})

        assert result.content == ""
        assert result.word_confidences == []
        assert result.request_id == "unknown"
