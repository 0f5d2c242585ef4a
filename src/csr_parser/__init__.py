"""
csr_parser — PKCS#10 Certificate Signing Request parser.

Decodes PEM-encoded CSRs and exposes the subject distinguished name,
public key metadata and Subject Alternative Names, for issuance
workflows that inspect a request before signing it.

Built on Railway-Oriented Programming (csr_parser.railway): parsing
returns a Result instead of raising.
"""

__version__ = "0.1.0"
