"""
Views for the tipjar JSON API.
"""

import json
import logging
from pathlib import Path

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from ..config import Config, ConfigValidationError, load_config
from ..ocr_client import OCRError
from ..schemas.tip_report import (
    ParsedReport,
    Partner,
    RoundingMode,
    UnknownRoundingModeError,
    to_decimal,
    validate_partners,
)
from ..services import ReportService, UploadRejectedError, merge_manual_parse

logger = logging.getLogger(__name__)


def _load_config() -> Config:
    """Load config for this request (env overrides are applied on each load)."""
    return load_config(Path(settings.TIPJAR_CONFIG_PATH))


def _error(message: str, status: int, **extra) -> JsonResponse:
    return JsonResponse({"error": message, **extra}, status=status)


def _read_json(request: HttpRequest) -> dict:
    """Parse a JSON object body.

    Raises:
        ValueError: If the body is not a JSON object
    """
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid JSON body: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data


@require_http_methods(["GET"])
def health(request: HttpRequest) -> HttpResponse:
    return JsonResponse({"status": "ok"})


def extract_upload(request: HttpRequest) -> HttpResponse:
    """
    OCR an uploaded tip report and return the extracted ParsedReport.

    Expects multipart/form-data with a single file (field name ``file``).
    """
    if request.method != "POST":
        response = _error("Method Not Allowed", 405)
        response["Allow"] = "POST"
        return response

    content_type = request.META.get("CONTENT_TYPE", "")
    if "multipart/form-data" not in content_type:
        return _error("Content-Type must be multipart/form-data", 400)

    upload = request.FILES.get("file") or next(iter(request.FILES.values()), None)
    if upload is None:
        return _error("No file uploaded", 400)

    try:
        config = _load_config()
    except ConfigValidationError as e:
        logger.error("extract:config-error %s", e)
        return _error("Failed to process document", 500)

    service = ReportService.from_config(config)

    if upload.size > service.max_file_size:
        limit_mb = service.max_file_size // (1024 * 1024)
        return _error(f"File exceeds {limit_mb} MB limit.", 400)

    try:
        report = service.extract_document(
            upload.read(), upload.content_type or "application/octet-stream"
        )
    except UploadRejectedError as e:
        return _error(str(e), 400)
    except OCRError as e:
        logger.error("extract:handler-error %s", e)
        return _error("Failed to process document", 500)

    response = JsonResponse(report.to_dict())
    response["Cache-Control"] = "no-store"
    return response


@require_http_methods(["POST"])
def parse_text(request: HttpRequest) -> HttpResponse:
    """
    Parse pasted report text.

    Body: ``{"text": "...", "current": {ParsedReport}?}``. When ``current``
    is given, the parse is merged onto it instead of replacing it.
    """
    try:
        data = _read_json(request)
        text = data.get("text")
        if not isinstance(text, str):
            raise ValueError("'text' must be a string")
        current = ParsedReport.from_dict(data["current"]) if data.get("current") else None
    except (ValueError, AttributeError, TypeError) as e:
        return _error(str(e), 400)

    parsed = ReportService().parse_text(text)
    report = merge_manual_parse(current, parsed) if current is not None else parsed
    return JsonResponse(report.to_dict())


@require_http_methods(["POST"])
def distribute_tips(request: HttpRequest) -> HttpResponse:
    """
    Distribute a tip pool over (edited) partner rows.

    Body: ``{"partners": [...], "total_pool": 250.0, "rounding": "quarter",
    "total_hours": 80.5?}``. Rounding defaults to the configured mode.
    """
    try:
        data = _read_json(request)
        partners = [Partner.from_dict(p) for p in data.get("partners") or []]
        if "total_pool" not in data:
            raise ValueError("'total_pool' is required")
        total_pool = to_decimal(data["total_pool"])
        total_hours = data.get("total_hours")
        total_hours = to_decimal(total_hours) if total_hours not in (None, "") else None
    except (ValueError, AttributeError, TypeError) as e:
        return _error(str(e), 400)

    if not total_pool.is_finite() or total_pool < 0:
        return _error("'total_pool' must be a non-negative number", 400)

    if total_hours is not None and (not total_hours.is_finite() or total_hours < 0):
        return _error("'total_hours' must be a non-negative number", 400)

    errors = validate_partners(partners)
    if errors:
        return _error("Invalid partners", 400, details=errors)

    try:
        rounding = RoundingMode.parse(
            data.get("rounding") or _load_config().distribution.default_rounding
        )
    except (UnknownRoundingModeError, ConfigValidationError) as e:
        return _error(str(e), 400)

    result = ReportService().distribute(
        ParsedReport(partners=partners, total_tippable_hours=total_hours),
        total_pool,
        rounding,
    )
    return JsonResponse(result.to_dict())
