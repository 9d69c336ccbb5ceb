"""
Errors raised by the harness.

Every failure an implementation under test can cause derives from
HarnessError and carries an HTTP-like ``status`` when one is known.
Misconfiguration of the harness itself (a missing endpoint, an operation
that is not supported yet) uses separate types so that it is never counted
as an implementation rejecting input.
"""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base class for failures reported by an implementation under test."""

    status: int | None = None


class TransportFault(HarnessError):
    """Raised when the request could not be sent or the response not parsed."""


class HttpStatusError(HarnessError):
    """Raised when an endpoint answers with a status code of 400 or above.

    Attributes:
        status: The HTTP status code.
        errors: The ``errors`` collection from the response body, if any.
        body: The raw parsed response body.
    """

    def __init__(
        self,
        status: int | None,
        errors: list[Any] | None = None,
        body: Any = None,
    ) -> None:
        self.status = status
        self.errors = errors
        self.body = body
        super().__init__(self.payload)

    @property
    def payload(self) -> Any:
        """The sub-errors collection when present, otherwise the raw body."""
        if self.errors is not None:
            return self.errors
        return self.body

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.payload!r}"


class RedirectNotSupportedError(HarnessError):
    """Raised when an endpoint answers with a 3xx redirect."""

    def __init__(self, status: int, location: str | None = None) -> None:
        self.status = status
        self.location = location
        super().__init__(f"Redirect not supported (HTTP {status})")


class ApplicationRejection(HarnessError):
    """Raised when a 2xx response reports errors in its body.

    Attributes:
        error: The first reported error.
        errors: All reported errors.
        result: The full response payload.
    """

    def __init__(self, errors: list[Any], result: Any = None) -> None:
        self.error = errors[0]
        self.errors = errors
        self.result = result
        if isinstance(self.error, dict):
            self.status = self.error.get("status")
        super().__init__(self.error)


class UnsupportedOperationError(NotImplementedError):
    """Raised by operations the harness declares but does not implement."""


class EndpointNotConfiguredError(LookupError):
    """Raised when an operation needs an endpoint the implementation lacks."""
