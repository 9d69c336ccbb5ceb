"""
Transports for sending JSON requests to VC API endpoints.

Two delivery paths share one contract: ``send()`` returns the parsed success
payload or raises a HarnessError.

- DelegatedTransport hands the body to a client bound to the endpoint
  (https endpoints configured with a client).
- LocalTransport performs the HTTP POST itself with httpx.

DispatchTransport picks between them per call by inspecting the endpoint.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import httpx

from vc_api_harness.config import HTTP_TIMEOUT_SECONDS
from vc_api_harness.descriptors import EndpointDescriptor, EndpointSettings
from vc_api_harness.errors import (
    HarnessError,
    HttpStatusError,
    RedirectNotSupportedError,
    TransportFault,
)

JSON_CONTENT_TYPE = "application/json"

log = logging.getLogger(__name__)


@dataclass
class PostOutcome:
    """What a delegated client returns: data or error, never both."""

    data: Any = None
    error: Any = None


class PostClient(Protocol):
    """A client bound to an endpoint that performs the request for us."""

    def post(self, *, json: Any) -> PostOutcome:
        ...


class Transport(ABC):
    """Sends a JSON body to an endpoint."""

    @abstractmethod
    def send(self, endpoint: EndpointDescriptor, body: Any) -> Any:
        """Send a request body and return the parsed success payload.

        Raises:
            HarnessError: If the endpoint fails or rejects the request.
        """


def encode_body(body: Any) -> bytes:
    """Serialize a request body to UTF-8 JSON bytes."""
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def read_response(response: httpx.Response, url: str) -> Any:
    """Apply the status policy to a response and return its JSON payload.

    - 3xx: RedirectNotSupportedError, whatever the body.
    - >= 400: HttpStatusError with the ``errors`` collection when the body
      has one, otherwise the raw body.
    - Anything else: the parsed body.

    Args:
        response: The received response.
        url: The requested URL, for error messages.

    Returns:
        The parsed JSON body (None for an empty body).

    Raises:
        RedirectNotSupportedError: On a redirect status.
        HttpStatusError: On an error status.
        TransportFault: If a success response is not valid JSON.
    """
    status = response.status_code
    if 300 <= status < 400:
        raise RedirectNotSupportedError(status, response.headers.get("Location"))

    try:
        result = response.json() if response.content else None
    except ValueError as e:
        if status >= 400:
            raise HttpStatusError(status, body=response.text) from e
        raise TransportFault(f"Invalid JSON in response from {url}") from e

    if status >= 400:
        errors = None
        if isinstance(result, dict) and result.get("errors") is not None:
            errors = result["errors"]
        log.warning("%s answered HTTP %d", url, status)
        raise HttpStatusError(status, errors=errors, body=result)

    return result


def normalize_error(error: Any) -> HarnessError:
    """Convert an error reported by a delegated client into a HarnessError.

    Accepts HarnessErrors (returned unchanged), objects or mappings carrying
    ``status``/``status_code`` and optional ``errors``, and plain exceptions.
    """
    if isinstance(error, HarnessError):
        return error

    if isinstance(error, Mapping):
        status = error.get("status")
        errors = error.get("errors")
        body = error.get("data", error)
    else:
        status = getattr(error, "status", None) or getattr(error, "status_code", None)
        errors = getattr(error, "errors", None)
        body = getattr(error, "data", None) or str(error)

    if status is None:
        return TransportFault(str(body) if body is not None else repr(error))
    if 300 <= status < 400:
        return RedirectNotSupportedError(status)
    return HttpStatusError(
        status,
        errors=errors if isinstance(errors, list) else None,
        body=body,
    )


class DelegatedTransport(Transport):
    """Sends through the client bound to the endpoint."""

    def send(self, endpoint: EndpointDescriptor, body: Any) -> Any:
        client = endpoint.client
        if client is None:
            raise ValueError(f"No client bound to {endpoint.settings.endpoint}")

        log.debug("Delegating POST to %s", endpoint.settings.endpoint)
        try:
            outcome = client.post(json=body)
        except httpx.HTTPError as e:
            raise TransportFault(
                f"Network error posting to {endpoint.settings.endpoint}: {e}"
            ) from e

        if isinstance(outcome, Mapping):
            data, error = outcome.get("data"), outcome.get("error")
        else:
            data, error = outcome.data, outcome.error

        if error:
            fault = normalize_error(error)
            if isinstance(error, BaseException) and fault is not error:
                raise fault from error
            raise fault
        return data


class LocalTransport(Transport):
    """Performs a single HTTP POST exchange per call."""

    def __init__(self, timeout: float | None = HTTP_TIMEOUT_SECONDS) -> None:
        """Initialize the transport.

        Args:
            timeout: HTTP timeout in seconds. None waits indefinitely.
        """
        self.timeout = timeout

    def send(self, endpoint: EndpointDescriptor, body: Any) -> Any:
        url = endpoint.settings.endpoint
        payload = encode_body(body)
        headers = {
            **endpoint.settings.headers,
            "Content-Type": JSON_CONTENT_TYPE,
            "Content-Length": str(len(payload)),
            "Accept": JSON_CONTENT_TYPE,
        }

        log.debug("POST %s (%d bytes)", url, len(payload))
        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=False) as client:
                response = client.post(url, content=payload, headers=headers)
        except httpx.RequestError as e:
            raise TransportFault(f"Network error posting to {url}: {e}") from e

        return read_response(response, url)


class DispatchTransport(Transport):
    """Chooses the delegated or local path for each endpoint."""

    def __init__(
        self,
        local: Transport | None = None,
        delegated: Transport | None = None,
    ) -> None:
        self.local = local or LocalTransport()
        self.delegated = delegated or DelegatedTransport()

    def select(self, endpoint: EndpointDescriptor) -> Transport:
        """Pick the transport for an endpoint.

        https endpoints with a bound client are delegated; everything else
        goes over the wire locally.
        """
        if endpoint.is_direct:
            return self.delegated
        return self.local

    def send(self, endpoint: EndpointDescriptor, body: Any) -> Any:
        return self.select(endpoint).send(endpoint, body)


class HttpxPostClient:
    """Delegated client for https endpoints, built on httpx.

    Reports failures through PostOutcome.error instead of raising.
    """

    def __init__(
        self,
        settings: EndpointSettings,
        timeout: float | None = HTTP_TIMEOUT_SECONDS,
        verify_ssl: bool = True,
    ) -> None:
        """Initialize the client.

        Args:
            settings: The endpoint to post to, including extra headers.
            timeout: HTTP timeout in seconds. None waits indefinitely.
            verify_ssl: Whether to verify SSL certificates.
        """
        self.settings = settings
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def post(self, *, json: Any) -> PostOutcome:
        url = self.settings.endpoint
        headers = {**self.settings.headers, "Accept": JSON_CONTENT_TYPE}
        try:
            with httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=False,
            ) as client:
                response = client.post(url, json=json, headers=headers)
            return PostOutcome(data=read_response(response, url))
        except httpx.RequestError as e:
            return PostOutcome(error=e)
        except HarnessError as e:
            return PostOutcome(error=e)


def post(endpoint: EndpointDescriptor, body: Any) -> Any:
    """Send a body to an endpoint over the path its address calls for."""
    return DispatchTransport().send(endpoint, body)
