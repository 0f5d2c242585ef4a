"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings so every knob can be set with a CSR_PARSER_*
environment variable (CSR_PARSER_SAN_SOURCE=openssl,
CSR_PARSER_DUMP_TIMEOUT_SECONDS=10, ...) or a .env file in the working
directory. Defaults give the pure ASN.1 behaviour with no external tools.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DUMP_TIMEOUT_SECONDS = 30


class CsrParserSettings(BaseSettings):
    """
    Runtime settings.

    san_source selects the SubjectAltName extractor:
      "asn1"    — walk the extension request directly (default)
      "openssl" — parse `openssl req -noout -text` output
    The openssl_* and dump_* fields only matter for the "openssl" source.
    """

    model_config = SettingsConfigDict(
        env_prefix="CSR_PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    san_source: Literal["asn1", "openssl"] = Field(default="asn1")
    openssl_binary: str = Field(default="openssl", min_length=1)
    dump_timeout_seconds: int = Field(default=DEFAULT_DUMP_TIMEOUT_SECONDS, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()
