"""
CLI main entry point.
"""

import argparse
import json
import logging
import mimetypes
import sys
from decimal import Decimal
from pathlib import Path

from ..config import Config, create_default_config, load_config
from ..ocr_client import OCRError
from ..schemas.tip_report import (
    DistributeResult,
    ParsedReport,
    RoundingMode,
    to_decimal,
    validate_partners,
)
from ..services import ReportService, UploadRejectedError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tipjar",
        description="Extract partner hours from tip reports and distribute tips",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # parse command
    parse_parser = subparsers.add_parser(
        "parse", help="Parse pasted report text into a report JSON"
    )
    parse_parser.add_argument(
        "file",
        type=str,
        help="Text file to parse ('-' reads stdin)",
    )

    # extract command
    extract_parser = subparsers.add_parser(
        "extract", help="OCR a tip report (PDF/image) into a report JSON"
    )
    extract_parser.add_argument(
        "file",
        type=Path,
        help="Document to upload to the OCR service",
    )

    # distribute command
    distribute_parser = subparsers.add_parser(
        "distribute", help="Distribute a tip pool over a report's partners"
    )
    distribute_parser.add_argument(
        "report",
        type=str,
        help="Report JSON produced by parse/extract ('-' reads stdin)",
    )
    distribute_parser.add_argument(
        "--pool",
        type=str,
        required=True,
        help="Total tips to distribute",
    )
    distribute_parser.add_argument(
        "--rounding",
        type=str,
        default=None,
        help="none, cent, dime, quarter or dollar (default: from config)",
    )
    distribute_parser.add_argument(
        "--total-hours",
        type=str,
        default=None,
        help="Override the report's total tippable hours",
    )
    distribute_parser.add_argument(
        "--table",
        action="store_true",
        help="Print a table instead of JSON",
    )

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the JSON API server")
    serve_parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the web server (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the web server (default: 8000)",
    )

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=Path("config.yaml"),
        help="Where to write the config (default: config.yaml)",
    )

    return parser


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_warnings(report: ParsedReport) -> None:
    for warning in report.warnings:
        print(f"⚠️  {warning}", file=sys.stderr)


def cmd_parse(source: str) -> int:
    """Parse pasted report text."""
    try:
        text = _read_text(source)
    except OSError as e:
        print(f"❌ Cannot read {source}: {e}", file=sys.stderr)
        return 1

    report = ReportService().parse_text(text)
    _print_warnings(report)
    _print_json(report.to_dict())
    return 0


def cmd_extract(config: Config, path: Path) -> int:
    """OCR a document and extract the report."""
    errors = config.validate(require_ocr=True)
    if errors:
        for error in errors:
            print(f"❌ {error}", file=sys.stderr)
        return 1

    try:
        file_bytes = path.read_bytes()
    except OSError as e:
        print(f"❌ Cannot read {path}: {e}", file=sys.stderr)
        return 1

    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    print(f"📄 Uploading {path.name} ({content_type})...", file=sys.stderr)

    service = ReportService.from_config(config)
    try:
        report = service.extract_document(file_bytes, content_type)
    except UploadRejectedError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except OCRError as e:
        logger.error("Extraction failed: %s", e)
        print("❌ Failed to process document", file=sys.stderr)
        return 1

    if report.confidence is not None:
        print(f"   → OCR confidence: {report.confidence:.0%}", file=sys.stderr)
    _print_warnings(report)
    _print_json(report.to_dict())
    return 0


def format_payout_table(result: DistributeResult) -> str:
    """Render a distribution as a plain-text table."""
    lines = [
        f"{'Partner':<8} {'Name':<28} {'Hours':>8} {'Exact':>10} {'Payout':>10}",
        "-" * 68,
    ]
    for p in result.payouts:
        lines.append(
            f"{p.partner.partner_number:<8} {p.partner.name[:28]:<28} "
            f"{p.partner.hours:>8} {p.payout:>10.2f} {p.rounded_payout:>10.2f}"
        )
    lines.append("-" * 68)
    lines.append(f"Hourly rate:     {result.hourly_rate:.4f}")
    lines.append(f"Total paid out:  {result.total_rounded:.2f}")
    sign = "+" if result.rounding_delta >= 0 else ""
    lines.append(f"Rounding delta:  {sign}{result.rounding_delta:.2f}")
    return "\n".join(lines)


def cmd_distribute(
    config: Config,
    source: str,
    pool: str,
    rounding: str | None,
    total_hours: str | None,
    table: bool,
) -> int:
    """Distribute a tip pool over a report."""
    try:
        report = ParsedReport.from_dict(json.loads(_read_text(source)))
        total_pool = to_decimal(pool)
        if total_hours is not None:
            report.total_tippable_hours = to_decimal(total_hours)
        mode = RoundingMode.parse(rounding or config.distribution.default_rounding)
    except (OSError, ValueError, AttributeError) as e:
        # UnknownRoundingModeError and JSONDecodeError are ValueErrors
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if not total_pool.is_finite() or total_pool < Decimal("0"):
        print("❌ Pool must be a non-negative number", file=sys.stderr)
        return 1

    hours = report.total_tippable_hours
    if hours is not None and (not hours.is_finite() or hours < Decimal("0")):
        print("❌ Total hours must be a non-negative number", file=sys.stderr)
        return 1

    errors = validate_partners(report.partners)
    if errors:
        for error in errors:
            print(f"❌ {error}", file=sys.stderr)
        return 1

    result = ReportService().distribute(report, total_pool, mode)

    if table:
        print(format_payout_table(result))
    else:
        _print_json(result.to_dict())
    return 0


def cmd_serve(config_path: Path, host: str, port: int) -> int:
    """Start the JSON API server."""
    from ..web.app import run_server

    try:
        run_server(host=host, port=port, config_path=str(config_path))
    except KeyboardInterrupt:
        print("\n✓ Server stopped")

    return 0


def cmd_init_config(path: Path) -> int:
    """Write a default config file."""
    if path.exists():
        print(f"❌ {path} already exists", file=sys.stderr)
        return 1
    create_default_config(path)
    print(f"✓ Wrote {path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.path)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}", file=sys.stderr)
        return 1

    # Route to command
    if parsed.command == "parse":
        return cmd_parse(parsed.file)
    elif parsed.command == "extract":
        return cmd_extract(config, parsed.file)
    elif parsed.command == "distribute":
        return cmd_distribute(
            config,
            parsed.report,
            parsed.pool,
            parsed.rounding,
            parsed.total_hours,
            parsed.table,
        )
    elif parsed.command == "serve":
        return cmd_serve(parsed.config, parsed.host, parsed.port)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
