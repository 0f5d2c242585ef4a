"""
Ports — Protocol-based interfaces for the two parsing stages.

  Pipeline ← Ports (protocols) ← Adapters (cryptography, asn1crypto, openssl)

Adapters satisfy a port simply by implementing the method; no inheritance.
Both stages receive the raw PEM text so they can be swapped independently.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from csr_parser.domain.models import DecodedRequest, SanSet
from csr_parser.railway.result import Result


@runtime_checkable
class RequestDecoder(Protocol):
    """
    Port: decode subject and public key metadata from PEM text.

    Fails with INVALID_FORMAT when the BEGIN marker is missing and with
    DECODE_ERROR (stage attached) when the crypto library rejects the input.
    """

    def decode(self, raw_text: str) -> Result[DecodedRequest]: ...


@runtime_checkable
class SanExtractor(Protocol):
    """
    Port: extract Subject Alternative Names from PEM text.

    A request without the extension yields an empty SanSet, not a failure.
    """

    def extract(self, raw_text: str) -> Result[SanSet]: ...
