"""
Issue, verify and verify-presentation against one implementation.

ImplementationEndpoints resolves the endpoints an implementation offers for
a test profile tag and runs the VC API operations against them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from vc_api_harness.bodies import (
    build_issue_body,
    build_presentation_verify_body,
    build_verify_body,
)
from vc_api_harness.descriptors import (
    EndpointDescriptor,
    EndpointRole,
    ImplementationDescriptor,
    resolve,
)
from vc_api_harness.errors import (
    ApplicationRejection,
    EndpointNotConfiguredError,
    HarnessError,
    UnsupportedOperationError,
)
from vc_api_harness.transport import DispatchTransport, Transport

IssueBodyBuilder = Callable[[EndpointDescriptor, dict[str, Any]], Any]

log = logging.getLogger(__name__)


@dataclass
class OperationOutcome:
    """Result of an operation: a payload or an error, never both.

    ``verify_error`` is set when an issued payload was rejected by the
    verifier afterwards.
    """

    result: Any = None
    error: BaseException | None = None
    verify_error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def raise_for_rejection(result: Any) -> Any:
    """Raise the first error a 2xx verification payload reports.

    Returns:
        The payload unchanged when it reports no errors.

    Raises:
        ApplicationRejection: If the payload has a non-empty ``errors`` list.
    """
    if isinstance(result, dict) and result.get("errors"):
        raise ApplicationRejection(list(result["errors"]), result=result)
    return result


class ImplementationEndpoints:
    """The endpoints of one implementation for one tag.

    Attributes:
        issuer: Issuer endpoint for the tag, or None.
        verifier: Verifier endpoint for the tag, or None.
        vp_verifier: Presentation verifier endpoint for the tag, or None.
    """

    def __init__(
        self,
        implementation: ImplementationDescriptor,
        tag: str,
        transport: Transport | None = None,
        issue_body_builder: IssueBodyBuilder = build_issue_body,
    ) -> None:
        """Initialize and resolve the endpoints.

        Args:
            implementation: The implementation under test.
            tag: Test profile tag selecting the endpoints.
            transport: Transport for all requests. Defaults to dispatching
                between the delegated and local paths.
            issue_body_builder: Builds the issuance request body from the
                issuer endpoint and the candidate credential.
        """
        self.implementation = implementation
        self.tag = tag
        self.transport = transport or DispatchTransport()
        self.issue_body_builder = issue_body_builder

        self.issuer = resolve(implementation, EndpointRole.ISSUER, tag)
        self.verifier = resolve(implementation, EndpointRole.VERIFIER, tag)
        self.vp_verifier = resolve(implementation, EndpointRole.VP_VERIFIER, tag)

    def _require(
        self, endpoint: EndpointDescriptor | None, role: EndpointRole
    ) -> EndpointDescriptor:
        if endpoint is None:
            raise EndpointNotConfiguredError(
                f"{self.implementation.name} has no {role.value} for tag {self.tag!r}"
            )
        return endpoint

    def issue(self, credential: dict[str, Any]) -> Any:
        """Issue a credential.

        Args:
            credential: The candidate credential.

        Returns:
            The issuer's response payload, not validated.

        Raises:
            HarnessError: If the issuer fails or rejects the request.
            EndpointNotConfiguredError: If there is no issuer for the tag.
        """
        issuer = self._require(self.issuer, EndpointRole.ISSUER)
        body = self.issue_body_builder(issuer, credential)
        return self.transport.send(issuer, body)

    def create_presentation(self, *args: Any, **kwargs: Any) -> Any:
        """Create a presentation.

        Raises:
            UnsupportedOperationError: Always.
        """
        # TODO: wire up once the VC API create-presentation route is
        # adopted by implementations.
        raise UnsupportedOperationError("Create presentation is not implemented yet.")

    def verify(self, credential: Any) -> Any:
        """Verify a credential.

        Raises:
            ApplicationRejection: If the verifier answered 2xx but reported
                errors.
            HarnessError: If the verifier fails or rejects the request.
            EndpointNotConfiguredError: If there is no verifier for the tag.
        """
        verifier = self._require(self.verifier, EndpointRole.VERIFIER)
        result = self.transport.send(verifier, build_verify_body(credential))
        return raise_for_rejection(result)

    def verify_presentation(
        self,
        presentation: Any,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Verify a presentation.

        Args:
            presentation: The verifiable presentation.
            options: Per-request options. They override the endpoint's
                options, which override the default domain and challenge.

        Returns:
            The verifier's payload, or None when the implementation has no
            presentation verifier for the tag.

        Raises:
            ApplicationRejection: If the verifier answered 2xx but reported
                errors.
            HarnessError: If the verifier fails or rejects the request.
        """
        if self.vp_verifier is None:
            log.info(
                "%s offers no presentation verifier for %r",
                self.implementation.name,
                self.tag,
            )
            return None

        body = build_presentation_verify_body(self.vp_verifier, presentation, options)
        result = self.transport.send(self.vp_verifier, body)
        return raise_for_rejection(result)

    def attempt(
        self, operation: Callable[..., Any], *args: Any, **kwargs: Any
    ) -> OperationOutcome:
        """Run an operation and capture its harness error instead of raising.

        Example:
            outcome = endpoints.attempt(endpoints.issue, credential)
        """
        try:
            return OperationOutcome(result=operation(*args, **kwargs))
        except HarnessError as e:
            return OperationOutcome(error=e)
