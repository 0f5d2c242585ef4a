"""
PEM decoder adapter — subject and public key metadata via cryptography.

Implements the RequestDecoder port. Decoding runs as four stages so a
failure says which part of the request the library rejected:

  raw text
    → marker check            (INVALID_FORMAT)
    → load_pem_x509_csr()     stage "request"
    → subject attributes      stage "subject"
    → csr.public_key()        stage "public key"
    → algorithm + bit length  stage "public key details"
    → DecodedRequest
"""

from __future__ import annotations

from typing import Callable, TypeVar

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dh, dsa, ec, ed448, ed25519, rsa, x448, x25519
from cryptography.x509.oid import NameOID

from csr_parser.domain.models import PEM_MARKER, DecodedRequest, KeyAlgorithm, PublicKeyInfo
from csr_parser.railway import ErrorCode, Result, ResultFailures

T = TypeVar("T")

log = structlog.get_logger()

# OpenSSL short names; attributes missing here fall back to the RFC 4514
# name cryptography knows, or the dotted OID.
_SHORT_NAMES: dict[x509.ObjectIdentifier, str] = {
    NameOID.COUNTRY_NAME: "C",
    NameOID.STATE_OR_PROVINCE_NAME: "ST",
    NameOID.LOCALITY_NAME: "L",
    NameOID.STREET_ADDRESS: "street",
    NameOID.ORGANIZATION_NAME: "O",
    NameOID.ORGANIZATIONAL_UNIT_NAME: "OU",
    NameOID.COMMON_NAME: "CN",
    NameOID.EMAIL_ADDRESS: "emailAddress",
    NameOID.SERIAL_NUMBER: "serialNumber",
    NameOID.SURNAME: "SN",
    NameOID.GIVEN_NAME: "GN",
    NameOID.TITLE: "title",
    NameOID.DOMAIN_COMPONENT: "DC",
    NameOID.USER_ID: "UID",
    NameOID.POSTAL_CODE: "postalCode",
}

# Keys without key_size: bit lengths as OpenSSL's EVP_PKEY_bits reports them.
_FIXED_BITS: tuple[tuple[type, int], ...] = (
    (ed25519.Ed25519PublicKey, 253),
    (x25519.X25519PublicKey, 253),
    (ed448.Ed448PublicKey, 456),
    (x448.X448PublicKey, 448),
)


def _short_name(attribute: x509.NameAttribute) -> str:
    short = _SHORT_NAMES.get(attribute.oid)
    if short is not None:
        return short
    return attribute.rfc4514_attribute_name


def _attribute_value(attribute: x509.NameAttribute) -> str:
    value = attribute.value
    if isinstance(value, bytes):
        return value.hex()
    return value


def _extract_subject(csr: x509.CertificateSigningRequest) -> dict[str, str]:
    """
    Flatten the subject DN into short-name → value.

    Repeated attributes overwrite earlier ones, so the last occurrence wins.
    """
    subject: dict[str, str] = {}
    for attribute in csr.subject:
        subject[_short_name(attribute)] = _attribute_value(attribute)
    return subject


def _describe_key(public_key: object) -> PublicKeyInfo:
    """Map a cryptography public key to OpenSSL's key type and bit length."""
    match public_key:
        case rsa.RSAPublicKey():
            return PublicKeyInfo(KeyAlgorithm.RSA, public_key.key_size)
        case dsa.DSAPublicKey():
            return PublicKeyInfo(KeyAlgorithm.DSA, public_key.key_size)
        case dh.DHPublicKey():
            return PublicKeyInfo(KeyAlgorithm.DH, public_key.key_size)
        case ec.EllipticCurvePublicKey():
            return PublicKeyInfo(KeyAlgorithm.EC, public_key.curve.key_size)

    for key_class, bits in _FIXED_BITS:
        if isinstance(public_key, key_class):
            return PublicKeyInfo(KeyAlgorithm.UNKNOWN, bits)

    key_size = getattr(public_key, "key_size", None)
    if not isinstance(key_size, int):
        raise TypeError(f"Unsupported public key type: {type(public_key).__name__}")
    return PublicKeyInfo(KeyAlgorithm.UNKNOWN, key_size)


def _stage(computation: Callable[[], T], stage: str) -> Result[T]:
    """Run one decoding stage, tagging any failure with its stage name."""
    return Result.from_computation(
        computation,
        ErrorCode.DECODE_ERROR,
        f"Unable to read {stage}",
        stage=stage,
    )


class CryptographyRequestDecoder:
    """
    Decode a PEM certificate request with cryptography (PyCA).

    Implements the RequestDecoder port. Never raises: every library
    exception is converted to a DECODE_ERROR failure.
    """

    def decode(self, raw_text: str) -> Result[DecodedRequest]:
        if PEM_MARKER not in raw_text:
            log.warning("csr.invalid_format", length=len(raw_text))
            return ResultFailures.invalid_format(f"Unable to detect {PEM_MARKER}")

        return (
            _stage(lambda: x509.load_pem_x509_csr(raw_text.encode("utf-8")), "request")
            .flat_map(self._decode_request)
            .peek(lambda decoded: log.debug(
                "csr.decoded",
                key_type=decoded.key.label,
                key_bits=decoded.key.bits,
                subject_fields=len(decoded.subject),
            ))
            .peek_failure(lambda err: log.warning(
                "csr.decode_failed", stage=err.stage, error=err.diagnostic,
            ))
        )

    def _decode_request(self, csr: x509.CertificateSigningRequest) -> Result[DecodedRequest]:
        subject = _stage(lambda: _extract_subject(csr), "subject")
        key = (
            _stage(csr.public_key, "public key")
            .flat_map(lambda public_key: _stage(lambda: _describe_key(public_key), "public key details"))
        )
        return Result.combine(subject, key, lambda s, k: DecodedRequest(subject=s, key=k))
