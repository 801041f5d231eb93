"""Failure kinds raised by the analysis client. The session turns each into an inline message."""


class AnalysisError(Exception):
    """Base class for every analysis request failure."""


class AnalysisTimeoutError(AnalysisError):
    """No response arrived within the analysis time bound."""


class AnalysisTransportError(AnalysisError):
    """The request never produced an HTTP response (connection refused, DNS, reset)."""


class AnalysisHTTPError(AnalysisError):
    """Non-2xx answer. message is the body's "error" field when present."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AnalysisResponseFormatError(AnalysisError):
    """2xx answer whose body does not carry a usable analysis."""
