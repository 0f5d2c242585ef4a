"""
Text-dump SubjectAltName extractor — `openssl req -noout -text` fallback.

Implements the SanExtractor port for hosts where the ASN.1 walk is not
wanted. The request is written to a private temporary directory, dumped
with the openssl CLI under a hard timeout, and the directory is removed on
every exit path. The SAN line of the dump looks like:

    X509v3 Subject Alternative Name:
        DNS:a.example.com, DNS:b.example.com, IP Address:10.0.0.1

and is parsed with `parse_san_text`. IP addresses are rewritten in the
same text form the ASN.1 extractor produces.
"""

from __future__ import annotations

import ipaddress
import subprocess
import tempfile
from pathlib import Path

import structlog

from csr_parser.config import DEFAULT_DUMP_TIMEOUT_SECONDS
from csr_parser.domain.models import SAN_IP_ADDRESS, SanSet
from csr_parser.railway import ErrorCode, Result, ResultFailures

log = structlog.get_logger()

SAN_HEADER = "Subject Alternative Name:"


def parse_san_text(text: str) -> list[tuple[str, str]]:
    """
    Split SAN text into (key, value) pairs.

    Tokens are comma-separated. Each token is split on its first colon and
    both halves are trimmed. Tokens without a colon, or with an empty key
    or value, are dropped.

    >>> parse_san_text("DNS:a.example.com, IP Address:10.0.0.1, DNS, :x")
    [('DNS', 'a.example.com'), ('IP Address', '10.0.0.1')]
    """
    pairs: list[tuple[str, str]] = []
    for token in text.split(","):
        if ":" not in token:
            continue
        key, value = token.split(":", 1)
        key = key.strip()
        value = value.strip()
        if not key or not value:
            continue
        pairs.append((key, value))
    return pairs


def normalise_ip_addresses(pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """
    Rewrite IP Address values in standard text form.

    OpenSSL prints IPv6 fully expanded in upper case; the ASN.1 extractor
    gives the compressed form. Values that are not addresses are kept.

    >>> normalise_ip_addresses([("IP Address", "2001:DB8:0:0:0:0:0:1"), ("DNS", "a")])
    [('IP Address', '2001:db8::1'), ('DNS', 'a')]
    """
    normalised: list[tuple[str, str]] = []
    for key, value in pairs:
        if key == SAN_IP_ADDRESS:
            try:
                value = str(ipaddress.ip_address(value))
            except ValueError:
                log.debug("san.unparsed_ip_address", value=value)
        normalised.append((key, value))
    return normalised


def san_text_from_dump(dump: str) -> str:
    """Join the lines that follow each SubjectAltName header in a dump."""
    lines = dump.splitlines()
    found: list[str] = []
    for index, line in enumerate(lines):
        if SAN_HEADER not in line:
            continue
        for following in lines[index + 1:]:
            if following.strip():
                found.append(following.strip())
                break
    return ",".join(found)


class OpenSslTextSanExtractor:
    """
    Extract SANs by parsing the openssl CLI's text rendering of the request.

    Failure kinds:
      FILESYSTEM_ERROR — temporary directory or file could not be used
      COMMAND_ERROR    — openssl missing, exited non-zero, or timed out
    No retries: each failure is terminal for the call.
    """

    def __init__(
        self,
        openssl_binary: str = "openssl",
        timeout: int = DEFAULT_DUMP_TIMEOUT_SECONDS,
    ) -> None:
        self._openssl_binary = openssl_binary
        self._timeout = timeout

    def extract(self, raw_text: str) -> Result[SanSet]:
        try:
            with tempfile.TemporaryDirectory(prefix="csr-") as workdir:
                request_path = Path(workdir) / "request.pem"
                result = (
                    self._write_request(request_path, raw_text)
                    .flat_map(self._dump)
                    .map(lambda dump: SanSet.from_pairs(
                        normalise_ip_addresses(parse_san_text(san_text_from_dump(dump)))
                    ))
                )
        except OSError as e:
            return ResultFailures.filesystem_error("Unable to use a temporary directory", e)

        return result.peek_failure(
            lambda err: log.warning("san.dump_failed", code=err.code.value, error=err.message)
        )

    def _write_request(self, path: Path, raw_text: str) -> Result[Path]:
        def write() -> Path:
            path.write_text(raw_text, encoding="utf-8")
            return path

        return Result.from_computation(
            write,
            ErrorCode.FILESYSTEM_ERROR,
            "Unable to write to the temporary file",
            stage="temporary file",
        )

    def _dump(self, path: Path) -> Result[str]:
        command = [self._openssl_binary, "req", "-noout", "-text", "-in", str(path)]
        log.debug("san.dump_started", command=command[:4], timeout=self._timeout)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return ResultFailures.command_error(
                f"Running the OpenSSL command timed out after {self._timeout}s", e
            )
        except OSError as e:
            return ResultFailures.command_error("Unable to execute the OpenSSL command", e)

        if completed.returncode != 0:
            return ResultFailures.command_error(
                f"Running the OpenSSL command to read the CSR failed "
                f"(exit status {completed.returncode}): {completed.stderr.strip()}"
            )
        return Result.success(completed.stdout)
