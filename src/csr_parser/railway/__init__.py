"""
Railway-oriented error handling for csr_parser.

Every adapter returns `Result[T]`; the failure track carries a
`FailureDescription` tagged with one of the `ErrorCode` kinds.

    from csr_parser.railway import ErrorCode, Result

    result = (
        Result.success(raw_text)
        .ensure(lambda t: "BEGIN CERTIFICATE REQUEST" in t, ErrorCode.INVALID_FORMAT, "no marker")
        .flat_map(decoder.decode)
    )
"""

from csr_parser.railway.assertions import ResultAssertions
from csr_parser.railway.failure import ErrorCode, FailureDescription
from csr_parser.railway.result import Failure, Result, Success
from csr_parser.railway.result_failures import ResultFailures

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultFailures",
    "ResultAssertions",
]
