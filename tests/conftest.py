"""Shared fixtures for the harness tests."""

import copy

import pytest

from vc_api_harness import (
    EndpointDescriptor,
    EndpointRole,
    EndpointSettings,
    ImplementationDescriptor,
    PostOutcome,
)
from vc_api_harness.transport import Transport

ISSUER_URL = "http://localhost:40443/credentials/issue"
VERIFIER_URL = "http://localhost:40443/credentials/verify"
VP_VERIFIER_URL = "http://localhost:40443/presentations/verify"
TAG = "vc2.0"


class RecordingClient:
    """Delegated client returning a fixed outcome."""

    def __init__(self, data=None, error=None):
        self.outcome = PostOutcome(data=data, error=error)
        self.calls = []

    def post(self, *, json):
        self.calls.append(json)
        return self.outcome


class ScriptedTransport(Transport):
    """Transport answering from a per-role script; exceptions are raised."""

    def __init__(self, responses):
        self.responses = responses
        self.sent = []

    def send(self, endpoint, body):
        self.sent.append((endpoint.role, body))
        response = self.responses[endpoint.role]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def make_endpoint():
    """Build an EndpointDescriptor."""

    def _make(role, url, tags=(TAG,), client=None, **settings):
        return EndpointDescriptor(
            role=role,
            tags=frozenset(tags),
            settings=EndpointSettings(endpoint=url, **settings),
            client=client,
        )

    return _make


@pytest.fixture
def implementation(make_endpoint):
    """An implementation with an issuer and a verifier but no VP verifier."""
    return ImplementationDescriptor(
        name="Example",
        issuers=(
            make_endpoint(
                EndpointRole.ISSUER,
                ISSUER_URL,
                id="did:key:z6MkIssuer",
                options={"credentialId": "urn:uuid:issued"},
            ),
        ),
        verifiers=(make_endpoint(EndpointRole.VERIFIER, VERIFIER_URL),),
    )


@pytest.fixture
def credential():
    """An unsigned candidate credential."""
    return {
        "@context": ["https://www.w3.org/ns/credentials/v2"],
        "type": ["VerifiableCredential"],
        "issuer": "did:example:placeholder",
        "validFrom": "2025-01-01T00:00:00Z",
        "credentialSubject": {
            "id": "did:example:holder",
            "name": "Test User",
        },
    }


@pytest.fixture
def issued_credential(credential):
    """A credential as an issuer would return it."""
    issued = copy.deepcopy(credential)
    issued["id"] = "urn:uuid:test-123"
    issued["issuer"] = "did:key:z6MkIssuer"
    issued["proof"] = {
        "type": "DataIntegrityProof",
        "cryptosuite": "ecdsa-rdfc-2019",
        "created": "2025-01-15T10:00:00Z",
        "verificationMethod": "did:key:z6MkIssuer#z6MkIssuer",
        "proofPurpose": "assertionMethod",
        "proofValue": "z58DAdFfa9SkqZMVPxAQp",
    }
    return issued
