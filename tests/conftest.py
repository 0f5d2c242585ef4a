"""
Shared test fixtures for the csr-parser test suite.

CSRs are generated on the fly with cryptography's builder, so every test
states exactly which subject attributes and SANs its request carries.
Keys are session-scoped because generation dominates test time.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Sequence

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed25519, rsa
from cryptography.x509.oid import NameOID

SUBJECT_OIDS = {
    "C": NameOID.COUNTRY_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "L": NameOID.LOCALITY_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "CN": NameOID.COMMON_NAME,
    "emailAddress": NameOID.EMAIL_ADDRESS,
}

CsrFactory = Callable[..., str]


def build_csr_pem(
    private_key,
    subject: Sequence[tuple[str, str]] = (("CN", "test.example.com"),),
    sans: Sequence[x509.GeneralName] | None = None,
) -> str:
    """
    Build and sign a PEM CSR.

    `subject` is a sequence of (short name, value) pairs so repeated
    attributes can be expressed; `sans` adds a SubjectAltName extension.
    """
    name = x509.Name([x509.NameAttribute(SUBJECT_OIDS[code], value) for code, value in subject])
    builder = x509.CertificateSigningRequestBuilder().subject_name(name)
    if sans is not None:
        builder = builder.add_extension(x509.SubjectAlternativeName(list(sans)), critical=False)
    algorithm = None if isinstance(private_key, ed25519.Ed25519PrivateKey) else hashes.SHA256()
    csr = builder.sign(private_key, algorithm)
    return csr.public_bytes(serialization.Encoding.PEM).decode("ascii")


def dns(value: str) -> x509.DNSName:
    return x509.DNSName(value)


def ip(value: str) -> x509.IPAddress:
    return x509.IPAddress(ipaddress.ip_address(value))


def email(value: str) -> x509.RFC822Name:
    return x509.RFC822Name(value)


def uri(value: str) -> x509.UniformResourceIdentifier:
    return x509.UniformResourceIdentifier(value)


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture(scope="session")
def dsa_key() -> dsa.DSAPrivateKey:
    return dsa.generate_private_key(key_size=2048)


@pytest.fixture(scope="session")
def ed25519_key() -> ed25519.Ed25519PrivateKey:
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture()
def make_csr(rsa_key: rsa.RSAPrivateKey) -> CsrFactory:
    """
    Factory for RSA-signed PEM CSRs.

        make_csr(subject=[("CN", "x")], sans=[dns("a.example.com")])
    """

    def factory(
        subject: Sequence[tuple[str, str]] = (("CN", "test.example.com"),),
        sans: Sequence[x509.GeneralName] | None = None,
        key=None,
    ) -> str:
        return build_csr_pem(key or rsa_key, subject=subject, sans=sans)

    return factory


@pytest.fixture()
def plain_csr(make_csr: CsrFactory) -> str:
    """C=US, O=Example, CN=test.example.com; no SubjectAltName extension."""
    return make_csr(subject=[("C", "US"), ("O", "Example"), ("CN", "test.example.com")])


@pytest.fixture()
def san_csr(make_csr: CsrFactory) -> str:
    """CN=test.example.com with DNS:a.example.com, DNS:b.example.com, IP:10.0.0.1."""
    return make_csr(sans=[dns("a.example.com"), dns("b.example.com"), ip("10.0.0.1")])


@pytest.fixture()
def key_bundle_csr(rsa_key: rsa.RSAPrivateKey, san_csr: str) -> str:
    """A PKCS#8 private key block followed by `san_csr`, as key+request bundles are often stored."""
    key_pem = rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    return key_pem + san_csr


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog.configure() a test performed."""
    yield
    structlog.reset_defaults()
