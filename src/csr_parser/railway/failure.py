"""
Failure description — structured error information for the failure track.

The error kinds form a closed set: callers can `match` on `ErrorCode`
exhaustively. The first three belong to the parsing core, the last two
only ever come out of the `openssl req -text` fallback extractor.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """Error kinds reported while parsing a certificate signing request."""

    INVALID_FORMAT = "INVALID_FORMAT"
    """Input lacks the BEGIN CERTIFICATE REQUEST marker. Caller error."""

    DECODE_ERROR = "DECODE_ERROR"
    """The crypto library rejected the request, its subject or its public key."""

    EXTRACTION_ERROR = "EXTRACTION_ERROR"
    """The extension request or SubjectAltName structure is corrupt."""

    FILESYSTEM_ERROR = "FILESYSTEM_ERROR"
    """Temporary file for the text dump could not be created or written."""

    COMMAND_ERROR = "COMMAND_ERROR"
    """The dump command exited non-zero, was missing, or timed out."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor: error code, message, optional exception,
    the stage that failed and a timestamp.

    >>> desc = FailureDescription(ErrorCode.DECODE_ERROR, "bad subject", stage="subject")
    >>> desc.code
    <ErrorCode.DECODE_ERROR: 'DECODE_ERROR'>
    >>> desc.stage
    'subject'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    stage: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def diagnostic(self) -> str:
        """The underlying library's message, or an empty string."""
        if self.exception is None:
            return ""
        return str(self.exception)

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__))
        return f"{self.message}\n{tb}"
