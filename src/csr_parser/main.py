"""
Composition root and command-line entry point.

Responsibilities:
  1. Configure structlog
  2. Load settings (pydantic-settings, CSR_PARSER_* environment)
  3. Create the concrete decoder and SAN extractor (`parse` wires them)
  4. `csr-parser FILE` prints a JSON summary of the request

This is the only place where concrete adapters are chosen.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from csr_parser.adapters.openssl_dump import OpenSslTextSanExtractor
from csr_parser.adapters.pem_decoder import CryptographyRequestDecoder
from csr_parser.adapters.san_extractor import Asn1SanExtractor
from csr_parser.config import CsrParserSettings
from csr_parser.domain.models import CertificateSigningRequest
from csr_parser.domain.ports import SanExtractor
from csr_parser.pipeline import parse_csr
from csr_parser.railway import FailureDescription, Result


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console output on stderr.

    Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def create_adapters(
    settings: CsrParserSettings | None = None,
) -> tuple[CryptographyRequestDecoder, SanExtractor]:
    """Build the decoder and the SAN extractor selected by `settings.san_source`."""
    settings = settings or CsrParserSettings()
    extractor: SanExtractor
    if settings.san_source == "openssl":
        extractor = OpenSslTextSanExtractor(
            openssl_binary=settings.openssl_binary,
            timeout=settings.dump_timeout_seconds,
        )
    else:
        extractor = Asn1SanExtractor()
    return CryptographyRequestDecoder(), extractor


def parse(
    raw_text: str,
    settings: CsrParserSettings | None = None,
) -> Result[CertificateSigningRequest]:
    """Parse `raw_text` with the adapters selected by `settings`."""
    decoder, extractor = create_adapters(settings)
    return parse_csr(raw_text, decoder, extractor)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csr-parser",
        description="Print the subject, key and SANs of a PEM certificate signing request.",
    )
    parser.add_argument("path", help="PEM file to read, or '-' for stdin")
    parser.add_argument(
        "--san-source",
        choices=("asn1", "openssl"),
        help="override CSR_PARSER_SAN_SOURCE",
    )
    return parser


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    """Parse one CSR and print it as JSON. Returns the process exit code."""
    args = _build_arg_parser().parse_args(argv)

    try:
        settings = CsrParserSettings()
    except Exception as e:
        print(f"FATAL: Configuration error: {e}", file=sys.stderr)  # noqa: T201
        return 2
    if args.san_source:
        settings = settings.model_copy(update={"san_source": args.san_source})

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    try:
        raw_text = _read_input(args.path)
    except OSError as e:
        log.error("cli.read_failed", path=args.path, error=str(e))
        return 1

    return parse(raw_text, settings).either(
        on_success=lambda csr: _print_summary(csr.to_dict()),
        on_failure=lambda err: _report_failure(log, err),
    )


def _print_summary(summary: dict) -> int:
    print(json.dumps(summary, indent=2))  # noqa: T201
    return 0


def _report_failure(log: Any, err: FailureDescription) -> int:
    log.error("cli.parse_failed", code=err.code.value, stage=err.stage, error=err.message)
    return 1


if __name__ == "__main__":
    sys.exit(main())
