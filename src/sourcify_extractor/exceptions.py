"""
Exception hierarchy for the Sourcify extractor.

Errors fall into two families:

- ``ExtractionError`` and its subclasses are business-level failures scoped to
  one contract or one chain. Workers catch and log them; they never abort a run.
- ``ConfigurationError`` and ``WorkerCrashedError`` are structural failures that
  terminate the process with a nonzero status.
"""
from typing import Any, Dict, List, Optional


class ExtractorError(Exception):
    """Base exception for all extractor-specific exceptions."""
    pass


class ConfigurationError(ExtractorError):
    """Raised when settings are missing or invalid."""
    pass


class ExtractionError(ExtractorError):
    """Base exception for failures isolated to a single contract or chain."""
    pass


class HttpError(ExtractionError):
    """Raised when an HTTP request fails after the client's retry budget.

    ``status`` is ``None`` for network-level failures (connection refused,
    timeouts, truncated payloads).
    """

    def __init__(self, url: str, status: Optional[int] = None, message: str = ""):
        self.url = url
        self.status = status
        if status is None:
            detail = f"request to {url} failed"
        else:
            detail = f"request to {url} failed with status {status}"
        super().__init__(f"{detail}: {message}" if message else detail)


class DecodeError(ExtractionError):
    """Raised when a payload cannot be parsed into the expected shape."""
    pass


class MissingFieldError(ExtractionError):
    """Raised when a required field is absent from a contract payload."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"missing required field: {field}")


class RpcError(ExtractionError):
    """Raised when the verification service rejects or fails a submission."""

    def __init__(self, message: str, status: Optional[int] = None,
                 response_data: Optional[Dict[str, Any]] = None):
        self.status = status
        self.response_data = response_data or {}
        super().__init__(message)


class WorkerCrashedError(ExtractorError):
    """Raised when one or more chain workers could not run to completion."""

    def __init__(self, failures: Dict[int, BaseException]):
        self.failures = failures
        chains: List[str] = [str(chain_id) for chain_id in sorted(failures)]
        super().__init__(f"chain workers crashed: {', '.join(chains)}")
