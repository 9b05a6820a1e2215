"""Typed failures raised across the tailoring core."""

from __future__ import annotations


class AreteError(Exception):
    """Base class for all failures the core reports to its callers."""

    kind: str = "error"
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(AreteError):
    """User input was rejected before any external call was made."""

    kind = "validation"


class UpstreamTimeoutError(AreteError):
    """The text-generation call did not finish within its time bound."""

    kind = "timeout"
    retryable = True


class UpstreamServiceError(AreteError):
    """Transport-level failure talking to an external collaborator."""

    kind = "upstream"
    retryable = True


class ResponseParseError(AreteError):
    """The collaborator answered, but not in the expected structured shape."""

    kind = "parse"
    retryable = True

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class ProposalGenerationError(AreteError):
    """A strategy failed while formatting a change proposal."""

    kind = "proposal"
    retryable = True


class InvalidTransitionError(AreteError):
    """A gap-walk action was requested in a state that does not allow it."""

    kind = "invalid_transition"
