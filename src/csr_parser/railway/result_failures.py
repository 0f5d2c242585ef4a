"""
Convenience factories for failures detected outside a caught computation.

    ResultFailures.invalid_format("Unable to detect BEGIN CERTIFICATE REQUEST")

instead of

    Result.failure(ErrorCode.INVALID_FORMAT, "Unable to detect BEGIN CERTIFICATE REQUEST")

Failures raised by library calls go through `Result.from_computation`.
"""

from __future__ import annotations

from csr_parser.railway.failure import ErrorCode
from csr_parser.railway.result import Result


class ResultFailures:
    """Factory methods for the explicitly detected failure kinds."""

    @staticmethod
    def invalid_format(message: str) -> Result:
        """Input is not a PEM certificate request."""
        return Result.failure(ErrorCode.INVALID_FORMAT, message)

    @staticmethod
    def filesystem_error(message: str, exception: BaseException | None = None) -> Result:
        """Temporary file could not be used."""
        return Result.failure(ErrorCode.FILESYSTEM_ERROR, message, exception, "temporary file")

    @staticmethod
    def command_error(message: str, exception: BaseException | None = None) -> Result:
        """The dump command failed or timed out."""
        return Result.failure(ErrorCode.COMMAND_ERROR, message, exception, "command")
