"""
SubjectAltName extractor adapter — direct ASN.1 walk with asn1crypto.

Implements the SanExtractor port. asn1crypto exposes the raw
CertificationRequestInfo attributes, which the cryptography API only
surfaces indirectly, so the extension request is walked here:

  PEM text
    → pem.unarmor(multiple=True)           DER of the CERTIFICATE REQUEST block
    → CertificationRequest.load()          PKCS#10
    → attributes[extensionRequest]         1.2.840.113549.1.9.14
    → extensions[subjectAltName]           2.5.29.17
    → GeneralNames                         dNSName / iPAddress / rfc822Name
    → SanSet

A request without the attribute or the extension yields an empty SanSet.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog
from asn1crypto import core, pem
from asn1crypto import csr as asn1_csr
from asn1crypto import x509 as asn1_x509

from csr_parser.domain.models import SAN_DNS, SAN_EMAIL, SAN_IP_ADDRESS, SanSet
from csr_parser.railway import ErrorCode, Result

log = structlog.get_logger()

EXTENSION_REQUEST_OID = "1.2.840.113549.1.9.14"
SUBJECT_ALT_NAME_OID = "2.5.29.17"

_REQUEST_PEM_TYPES = ("CERTIFICATE REQUEST", "NEW CERTIFICATE REQUEST")

_CATEGORY_BY_CHOICE: dict[str, str] = {
    "dns_name": SAN_DNS,
    "ip_address": SAN_IP_ADDRESS,
    "rfc822_name": SAN_EMAIL,
}


def _load_request(raw_text: str) -> asn1_csr.CertificationRequest:
    """
    Load the first CERTIFICATE REQUEST block as a PKCS#10 request.

    Blocks of other types (a private key stored alongside, for instance)
    are skipped, so the same block is read as by the PEM decoder.
    """
    for object_type, _, der_bytes in pem.unarmor(raw_text.encode("utf-8"), multiple=True):
        if object_type in _REQUEST_PEM_TYPES:
            return asn1_csr.CertificationRequest.load(der_bytes, strict=True)
    raise ValueError("No CERTIFICATE REQUEST block found in PEM data")


def _as_extensions(value: core.Asn1Value) -> asn1_x509.Extensions:
    if isinstance(value, asn1_x509.Extensions):
        return value
    return asn1_x509.Extensions.load(value.dump(), strict=True)


def _requested_extensions(request: asn1_csr.CertificationRequest) -> Iterator[asn1_x509.Extension]:
    """Yield every extension listed in extensionRequest attributes, in order."""
    attributes = request["certification_request_info"]["attributes"]
    for attribute in attributes:
        if attribute["type"].dotted != EXTENSION_REQUEST_OID:
            continue
        for value in attribute["values"]:
            yield from _as_extensions(value)


def _general_names(extension: asn1_x509.Extension) -> asn1_x509.GeneralNames:
    return asn1_x509.GeneralNames.load(extension["extn_value"].contents, strict=True)


def _san_pairs(request: asn1_csr.CertificationRequest) -> list[tuple[str, str]]:
    """
    Collect (category, value) pairs from all SubjectAltName extensions.

    General-name types other than dNSName, iPAddress and rfc822Name are skipped.
    """
    pairs: list[tuple[str, str]] = []
    for extension in _requested_extensions(request):
        if extension["extn_id"].dotted != SUBJECT_ALT_NAME_OID:
            continue
        for general_name in _general_names(extension):
            category = _CATEGORY_BY_CHOICE.get(general_name.name)
            if category is None:
                log.debug("san.skipped_general_name", type=general_name.name)
                continue
            value = general_name.native
            if value is None:
                # asn1crypto returns None for an iPAddress of invalid length
                raise ValueError(f"Malformed {general_name.name} entry in subjectAltName")
            pairs.append((category, str(value)))
    return pairs


class Asn1SanExtractor:
    """
    Extract SANs by decoding the extension request with asn1crypto.

    Implements the SanExtractor port. Any asn1crypto exception (bad PEM
    armour, truncated DER, malformed GeneralNames, bad IP length) becomes
    an EXTRACTION_ERROR failure.
    """

    def extract(self, raw_text: str) -> Result[SanSet]:
        return (
            Result.from_computation(
                lambda: SanSet.from_pairs(_san_pairs(_load_request(raw_text))),
                ErrorCode.EXTRACTION_ERROR,
                "Unable to read the subject alternative names",
                stage="subject alt name",
            )
            .peek(lambda sans: log.debug(
                "san.extracted",
                dns=len(sans.dns),
                ip_addresses=len(sans.ip_addresses),
                emails=len(sans.emails),
            ))
            .peek_failure(lambda err: log.warning("san.extraction_failed", error=err.diagnostic))
        )
