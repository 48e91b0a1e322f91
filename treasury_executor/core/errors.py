"""
Error Classification

Defines the error types raised by the bridge executor.
Errors are classified as recoverable (the next scheduled tick may succeed)
or unrecoverable (the process cannot continue without operator action).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .bridge.verifier import TransactionOutcome


class ErrorCategory(str, Enum):
    """Categories of errors for logging and exit decisions."""

    CONFIGURATION = "configuration"   # Bad or missing settings
    QUERY = "query"                   # Getter / balance / lite-server failure
    SUBMIT = "submit"                 # Message submission failure
    VERIFICATION = "verification"     # Transaction executed but did not succeed
    STARTUP = "startup"               # Initial run failed


class ExecutorError(Exception):
    """Base class for all executor errors."""

    category: ErrorCategory = ErrorCategory.QUERY
    recoverable: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExecutorError):
    """Settings are missing, malformed, or reference unparsable addresses."""

    category = ErrorCategory.CONFIGURATION
    recoverable = False


class QueryError(ExecutorError):
    """A getter call, balance read, or lite-server request failed."""

    category = ErrorCategory.QUERY


class SubmitError(ExecutorError):
    """The bridge message could not be submitted through the wallet."""

    category = ErrorCategory.SUBMIT


class VerificationError(ExecutorError):
    """The bridge transaction was not confirmed as successful."""

    category = ErrorCategory.VERIFICATION

    def __init__(self, message: str, outcome: Optional["TransactionOutcome"] = None):
        super().__init__(message)
        self.outcome = outcome


class InitialRunError(ExecutorError):
    """At least one route failed during the startup run."""

    category = ErrorCategory.STARTUP
    recoverable = False

    def __init__(self, errors: Dict[str, Exception]):
        details = "; ".join(f"{route}: {exc}" for route, exc in errors.items())
        super().__init__(f"initial run failed for {len(errors)} route(s): {details}")
        self.errors = dict(errors)
