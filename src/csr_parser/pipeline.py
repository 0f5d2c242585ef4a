"""
Pipeline — composes the two parsing stages into a CertificateSigningRequest.

Pure orchestration: all decoding is injected via ports.

  marker check (INVALID_FORMAT)
    → decoder.decode(raw_text)      subject + public key
      → extractor.extract(raw_text) SubjectAltNames
        → CertificateSigningRequest

The decoder is the format gate, so its failures always win over SAN
extraction failures; the extractor is never called when decoding fails.
Parsing is all-or-nothing.
"""

from __future__ import annotations

from csr_parser.domain.models import PEM_MARKER, CertificateSigningRequest, DecodedRequest, SanSet
from csr_parser.domain.ports import RequestDecoder, SanExtractor
from csr_parser.railway import ErrorCode, Result


def _assemble(raw_text: str, decoded: DecodedRequest, sans: SanSet) -> CertificateSigningRequest:
    return CertificateSigningRequest(
        subject=decoded.subject,
        key=decoded.key,
        pem=raw_text,
        sans=sans,
    )


def parse_csr(
    raw_text: str,
    decoder: RequestDecoder,
    extractor: SanExtractor,
) -> Result[CertificateSigningRequest]:
    """
    Parse PEM text into an immutable CertificateSigningRequest.

    Returns the first failure encountered: INVALID_FORMAT, then the
    decoder's DECODE_ERROR, then the extractor's failure.
    """
    return (
        Result.success(raw_text)
        .ensure(
            lambda text: PEM_MARKER in text,
            ErrorCode.INVALID_FORMAT,
            f"Unable to detect {PEM_MARKER}",
        )
        .flat_map(decoder.decode)
        .flat_map(
            lambda decoded: extractor.extract(raw_text).map(
                lambda sans: _assemble(raw_text, decoded, sans)
            )
        )
    )
