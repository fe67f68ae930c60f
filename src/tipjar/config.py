"""
Configuration management (SSOT).

This module defines ALL configuration for the tipjar application.
All config keys are defined here; no other module should invent config keys.

Key invariants:
- OCR credentials may come from the YAML file or the environment; the
  environment wins
- The default rounding mode is validated at load time, so a typo fails
  fast instead of surfacing on the first distribution
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .schemas.tip_report import RoundingMode, UnknownRoundingModeError

# 15 MB upload limit of the extract endpoint
DEFAULT_MAX_FILE_SIZE = 15 * 1024 * 1024


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class OCRConfig:
    """OCR service (Azure Document Intelligence) configuration.

    The endpoint is the resource base URL, e.g.
    https://my-resource.cognitiveservices.azure.com
    """

    endpoint: str = ""
    api_key: str = ""
    api_version: str = "2024-07-31"
    model_id: str = "prebuilt-read"
    # Request timeout (seconds)
    timeout_seconds: int = 60
    # Retries for transient failures (0 = single request per submission)
    max_retries: int = 0
    # Polling of long-running analyze operations
    poll_interval_seconds: float = 1.0
    max_polls: int = 60
    # Upload size limit
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE

    def is_configured(self) -> bool:
        """Check if endpoint and key are both set."""
        return bool(self.endpoint and self.api_key)


@dataclass
class DistributionConfig:
    """Tip distribution defaults."""

    # Rounding mode used when the caller does not choose one
    default_rounding: RoundingMode = RoundingMode.NONE


@dataclass
class Config:
    """Application configuration (SSOT).

    All configuration is centralized here. No other module should define
    configuration keys or defaults.
    """

    ocr: OCRConfig = field(default_factory=OCRConfig)
    distribution: DistributionConfig = field(default_factory=DistributionConfig)

    def validate(self, require_ocr: bool = False) -> list[str]:
        """Validate configuration completeness and consistency.

        Args:
            require_ocr: Whether OCR credentials are needed (extract/serve)

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if require_ocr:
            if not self.ocr.endpoint:
                errors.append("ocr.endpoint is required (or set AZURE_CV_ENDPOINT)")
            if not self.ocr.api_key:
                errors.append("ocr.api_key is required (or set AZURE_CV_KEY)")

        if self.ocr.timeout_seconds <= 0:
            errors.append("ocr.timeout_seconds must be positive")
        if self.ocr.max_retries < 0:
            errors.append("ocr.max_retries cannot be negative")
        if self.ocr.max_polls <= 0:
            errors.append("ocr.max_polls must be positive")
        if self.ocr.max_file_size_bytes <= 0:
            errors.append("ocr.max_file_size_bytes must be positive")

        return errors


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    A missing file yields defaults. Environment variables can override
    config values:
    - AZURE_CV_ENDPOINT
    - AZURE_CV_KEY
    - TIPJAR_OCR_TIMEOUT (request timeout in seconds)
    - TIPJAR_ROUNDING (default rounding mode)

    Raises:
        ConfigValidationError: If the file is not valid YAML or a value
            has the wrong type
    """
    config_path = Path(config_path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigValidationError(f"{config_path} must contain a mapping at the top level")

    # OCR config
    ocr_data = data.get("ocr") or {}
    try:
        ocr = OCRConfig(
            endpoint=os.environ.get("AZURE_CV_ENDPOINT", ocr_data.get("endpoint", "")).rstrip(
                "/"
            ),
            api_key=os.environ.get("AZURE_CV_KEY", ocr_data.get("api_key", "")),
            api_version=ocr_data.get("api_version", "2024-07-31"),
            model_id=ocr_data.get("model_id", "prebuilt-read"),
            timeout_seconds=int(
                os.environ.get("TIPJAR_OCR_TIMEOUT", ocr_data.get("timeout_seconds", 60))
            ),
            max_retries=int(ocr_data.get("max_retries", 0)),
            poll_interval_seconds=float(ocr_data.get("poll_interval_seconds", 1.0)),
            max_polls=int(ocr_data.get("max_polls", 60)),
            max_file_size_bytes=int(
                ocr_data.get("max_file_size_bytes", DEFAULT_MAX_FILE_SIZE)
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid ocr setting: {e}") from e

    # Distribution config
    distribution_data = data.get("distribution") or {}
    rounding_token = os.environ.get(
        "TIPJAR_ROUNDING", distribution_data.get("default_rounding", "none")
    )
    try:
        default_rounding = RoundingMode.parse(rounding_token)
    except UnknownRoundingModeError as e:
        raise ConfigValidationError(f"distribution.default_rounding: {e}") from e

    return Config(
        ocr=ocr,
        distribution=DistributionConfig(default_rounding=default_rounding),
    )


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# tipjar configuration
#
# OCR credentials can also be provided through the environment:
#   AZURE_CV_ENDPOINT, AZURE_CV_KEY

ocr:
  endpoint: ""                    # e.g. https://my-resource.cognitiveservices.azure.com
  api_key: ""                     # Document Intelligence key
  api_version: "2024-07-31"
  model_id: "prebuilt-read"
  timeout_seconds: 60
  max_retries: 0                  # One request per submission
  poll_interval_seconds: 1.0      # Polling of long-running analyze operations
  max_polls: 60
  max_file_size_bytes: 15728640   # 15 MB

distribution:
  default_rounding: "none"        # none | cent | dime | quarter | dollar
"""

    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
