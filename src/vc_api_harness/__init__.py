"""
VC API Harness - conformance checks for VC API implementations.

Supports:
- Issue, verify and verify-presentation against tagged endpoints
- Local HTTP transport and delegated client transport
- Structural assertions over issued credentials
- Negative tests rejected at either issuance or verification
"""

from vc_api_harness.assertions import (
    assert_invalid_input_rejected,
    assert_issued_credential_shape,
    assert_rejected_by_issuer_or_verifier,
    assert_success,
    extract_enveloped_credential,
)
from vc_api_harness.descriptors import (
    EndpointDescriptor,
    EndpointRole,
    EndpointSettings,
    ImplementationDescriptor,
    resolve,
)
from vc_api_harness.endpoints import ImplementationEndpoints, OperationOutcome
from vc_api_harness.errors import (
    ApplicationRejection,
    EndpointNotConfiguredError,
    HarnessError,
    HttpStatusError,
    RedirectNotSupportedError,
    TransportFault,
    UnsupportedOperationError,
)
from vc_api_harness.transport import (
    DelegatedTransport,
    DispatchTransport,
    HttpxPostClient,
    LocalTransport,
    PostOutcome,
    post,
)

__version__ = "0.1.0"

__all__ = [
    "ImplementationEndpoints",
    "OperationOutcome",
    "ImplementationDescriptor",
    "EndpointDescriptor",
    "EndpointRole",
    "EndpointSettings",
    "resolve",
    "DispatchTransport",
    "DelegatedTransport",
    "LocalTransport",
    "HttpxPostClient",
    "PostOutcome",
    "post",
    "HarnessError",
    "TransportFault",
    "HttpStatusError",
    "RedirectNotSupportedError",
    "ApplicationRejection",
    "UnsupportedOperationError",
    "EndpointNotConfiguredError",
    "assert_invalid_input_rejected",
    "assert_success",
    "assert_issued_credential_shape",
    "assert_rejected_by_issuer_or_verifier",
    "extract_enveloped_credential",
]
