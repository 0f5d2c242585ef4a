"""
Domain models — immutable value objects describing a parsed CSR.

All models are frozen dataclasses. The subject mapping is wrapped in a
read-only proxy so nothing handed out by an accessor can be mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any

PEM_MARKER = "BEGIN CERTIFICATE REQUEST"

SAN_DNS = "DNS"
SAN_IP_ADDRESS = "IP Address"
SAN_EMAIL = "email"

SAN_CATEGORIES: tuple[str, ...] = (SAN_DNS, SAN_IP_ADDRESS, SAN_EMAIL)

# OpenSSL short attribute name (C, O, CN, emailAddress, ...) -> value.
SubjectName = Mapping[str, str]


class KeyAlgorithm(IntEnum):
    """Public key algorithm, numbered like OpenSSL's OPENSSL_KEYTYPE_* constants."""

    UNKNOWN = -1
    RSA = 0
    DSA = 1
    DH = 2
    EC = 3


_KEY_TYPE_LABELS: dict[int, str] = {
    KeyAlgorithm.RSA: "RSA",
    KeyAlgorithm.DSA: "DSA",
    KeyAlgorithm.DH: "DH",
    KeyAlgorithm.EC: "EC",
}


def key_type_label(code: int) -> str:
    """Human label for a key type code; "Unknown" for anything unrecognised."""
    return _KEY_TYPE_LABELS.get(code, "Unknown")


def _freeze(values: Mapping[str, str]) -> SubjectName:
    return MappingProxyType(dict(values))


@dataclass(frozen=True, slots=True)
class PublicKeyInfo:
    """Algorithm and bit length, as reported by the crypto library."""

    algorithm: KeyAlgorithm
    bits: int

    @property
    def label(self) -> str:
        return key_type_label(self.algorithm)


@dataclass(frozen=True, slots=True, eq=False)
class SanSet(Mapping[str, tuple[str, ...]]):
    """
    Subject Alternative Names grouped by category.

    A read-only mapping whose keys are always exactly "DNS", "IP Address"
    and "email". Each value is a tuple in order of appearance in the
    request, empty when the category is absent. Equality is mapping
    equality.
    """

    dns: tuple[str, ...] = ()
    ip_addresses: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> SanSet:
        """
        Build a SanSet from (category, value) pairs.

        Pairs whose category is not one of DNS, IP Address or email are dropped.
        """
        grouped: dict[str, list[str]] = {category: [] for category in SAN_CATEGORIES}
        for category, value in pairs:
            if category in grouped:
                grouped[category].append(value)
        return cls(
            dns=tuple(grouped[SAN_DNS]),
            ip_addresses=tuple(grouped[SAN_IP_ADDRESS]),
            emails=tuple(grouped[SAN_EMAIL]),
        )

    def as_dict(self) -> dict[str, list[str]]:
        """Plain mapping keyed by "DNS", "IP Address" and "email"."""
        return {
            SAN_DNS: list(self.dns),
            SAN_IP_ADDRESS: list(self.ip_addresses),
            SAN_EMAIL: list(self.emails),
        }

    def __getitem__(self, category: str) -> tuple[str, ...]:
        match category:
            case "DNS":
                return self.dns
            case "IP Address":
                return self.ip_addresses
            case "email":
                return self.emails
        raise KeyError(category)

    def __iter__(self) -> Iterator[str]:
        return iter(SAN_CATEGORIES)

    def __len__(self) -> int:
        return len(SAN_CATEGORIES)

    @property
    def is_empty(self) -> bool:
        return not (self.dns or self.ip_addresses or self.emails)


@dataclass(frozen=True, slots=True)
class DecodedRequest:
    """Output of the PEM decoder: subject attributes plus key metadata."""

    subject: SubjectName
    key: PublicKeyInfo

    def __post_init__(self) -> None:
        object.__setattr__(self, "subject", _freeze(self.subject))


@dataclass(frozen=True, slots=True)
class CertificateSigningRequest:
    """
    A parsed PKCS#10 certificate signing request.

    Built only by `csr_parser.pipeline.parse_csr` (or `csr_parser.main.parse`,
    which wires the configured adapters). `pem` is the exact input text.

    Subject keys are OpenSSL short names (C, ST, L, O, OU, CN,
    emailAddress, ...). When an attribute repeats in the DN the last
    occurrence is kept.
    """

    subject: SubjectName
    key: PublicKeyInfo
    pem: str = field(repr=False)
    sans: SanSet = field(default_factory=SanSet)

    def __post_init__(self) -> None:
        object.__setattr__(self, "subject", _freeze(self.subject))

    def _subject_field(self, code: str) -> str:
        return self.subject.get(code, "")

    @property
    def country(self) -> str:
        return self._subject_field("C")

    @property
    def state(self) -> str:
        return self._subject_field("ST")

    @property
    def locality(self) -> str:
        return self._subject_field("L")

    @property
    def organization(self) -> str:
        return self._subject_field("O")

    @property
    def organization_unit(self) -> str:
        return self._subject_field("OU")

    @property
    def common_name(self) -> str:
        return self._subject_field("CN")

    @property
    def email(self) -> str:
        return self._subject_field("emailAddress")

    @property
    def key_type(self) -> KeyAlgorithm:
        return self.key.algorithm

    @property
    def key_type_string(self) -> str:
        return key_type_label(self.key.algorithm)

    @property
    def key_bits(self) -> int:
        return self.key.bits

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary of the request."""
        return {
            "subject": dict(self.subject),
            "key": {"type": self.key_type_string, "bits": self.key_bits},
            "sans": self.sans.as_dict(),
        }
