"""
Unit tests for CsrParserSettings — defaults, environment overrides and validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from csr_parser.config import CsrParserSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SAN_SOURCE", "OPENSSL_BINARY", "DUMP_TIMEOUT_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(f"CSR_PARSER_{name}", raising=False)


class TestDefaults:
    def test_asn1_source_and_thirty_second_timeout(self) -> None:
        settings = CsrParserSettings(_env_file=None)
        assert settings.san_source == "asn1"
        assert settings.openssl_binary == "openssl"
        assert settings.dump_timeout_seconds == 30
        assert settings.log_level == "INFO"


class TestEnvironmentOverrides:
    def test_prefixed_variables_are_read(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CSR_PARSER_SAN_SOURCE", "openssl")
        monkeypatch.setenv("CSR_PARSER_OPENSSL_BINARY", "/usr/local/bin/openssl")
        monkeypatch.setenv("CSR_PARSER_DUMP_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("CSR_PARSER_LOG_LEVEL", " debug ")

        settings = CsrParserSettings(_env_file=None)

        assert settings.san_source == "openssl"
        assert settings.openssl_binary == "/usr/local/bin/openssl"
        assert settings.dump_timeout_seconds == 5
        assert settings.log_level == "DEBUG"

    def test_env_file_is_read(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CSR_PARSER_SAN_SOURCE=openssl\n", encoding="utf-8")

        assert CsrParserSettings(_env_file=env_file).san_source == "openssl"


class TestValidation:
    def test_unknown_san_source_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CsrParserSettings(_env_file=None, san_source="ldap")

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_timeout_must_be_positive(self, timeout: int) -> None:
        with pytest.raises(ValidationError):
            CsrParserSettings(_env_file=None, dump_timeout_seconds=timeout)

    def test_empty_binary_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CsrParserSettings(_env_file=None, openssl_binary="")
