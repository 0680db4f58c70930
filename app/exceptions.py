"""Application exception types.

API-level exceptions carry a ``detail`` string and are translated to JSON
responses by the handlers registered in ``app.main``. The assessment core
raises the domain errors at the bottom of this module.
"""
from typing import Optional


class AppException(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class UnauthorizedException(AppException):
    status_code = 401


class ForbiddenException(AppException):
    status_code = 403


class NotFoundException(AppException):
    status_code = 404


class ValidationException(AppException):
    status_code = 400


class ContractViolation(ValidationException):
    """Caller broke an input contract (length mismatch, missing score fields...).

    Fatal to the current call and never retried.
    """


class GenerationError(AppException):
    """Base for failures of the text generation collaborator."""

    retryable: bool = False
    error_type: str = "generation"

    def __init__(self, detail: str = "", *, provider: Optional[str] = None):
        super().__init__(detail)
        self.provider = provider


class GenerationUnavailable(GenerationError):
    """Generation is misconfigured (e.g. missing API key). Not retryable."""

    status_code = 500
    error_type = "configuration"


class GenerationTransient(GenerationError):
    """Timeout, provider error or empty completion. The caller may retry."""

    status_code = 503
    retryable = True
    error_type = "transient"


class PersistTransient(Exception):
    """A storage write failed.

    The analysis cache gate logs and swallows it. Anywhere else (saving a
    result) it becomes a 503 with ``retryable`` set.
    """
