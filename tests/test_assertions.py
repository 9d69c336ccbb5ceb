"""Tests for the conformance assertions."""

import ast
import base64
import inspect
import json

import pytest

from vc_api_harness import (
    ApplicationRejection,
    EndpointRole,
    HarnessError,
    HttpStatusError,
    ImplementationEndpoints,
    OperationOutcome,
    TransportFault,
    assert_invalid_input_rejected,
    assert_issued_credential_shape,
    assert_rejected_by_issuer_or_verifier,
    assert_success,
    extract_enveloped_credential,
)
from vc_api_harness import assertions as assertions_module
from vc_api_harness.assertions import trim_text

from conftest import TAG, ScriptedTransport


REASON = "Should not verify a credential with an invalid validFrom."


def b64url(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


class TestIssuedCredentialShape:
    """Tests for the issued credential structure check."""

    def test_valid_credential(self, issued_credential):
        assert_issued_credential_shape(issued_credential)

    def test_minimal_credential(self):
        """Test the smallest credential that passes."""
        assert_issued_credential_shape({
            "@context": ["https://www.w3.org/ns/credentials/v2"],
            "type": ["VerifiableCredential"],
            "id": "urn:x",
            "credentialSubject": {"a": 1},
            "issuer": "did:x",
            "proof": {"type": "DataIntegrityProof"},
        })

    @pytest.mark.parametrize(
        "field",
        ["@context", "type", "id", "credentialSubject", "issuer", "proof"],
    )
    def test_missing_required_field(self, issued_credential, field):
        del issued_credential[field]
        with pytest.raises(AssertionError):
            assert_issued_credential_shape(issued_credential)

    def test_not_an_object(self):
        with pytest.raises(AssertionError, match="to be an object"):
            assert_issued_credential_shape("eyJhbGciOiJFUzI1NiJ9")

    def test_type_without_verifiable_credential(self, issued_credential):
        issued_credential["type"] = ["ExampleCredential"]
        with pytest.raises(AssertionError, match="VerifiableCredential"):
            assert_issued_credential_shape(issued_credential)

    @pytest.mark.parametrize("types", [5, None, {"VerifiableCredential": 1}])
    def test_type_not_string_or_list(self, issued_credential, types):
        issued_credential["type"] = types
        with pytest.raises(AssertionError, match="string or a list"):
            assert_issued_credential_shape(issued_credential)

    def test_type_as_string(self, issued_credential):
        issued_credential["type"] = "VerifiableCredential"
        assert_issued_credential_shape(issued_credential)

    def test_empty_object_names_first_missing_field(self):
        with pytest.raises(AssertionError, match="@context"):
            assert_issued_credential_shape({})

    def test_id_not_string(self, issued_credential):
        issued_credential["id"] = 123
        with pytest.raises(AssertionError, match="`id` to be a string"):
            assert_issued_credential_shape(issued_credential)

    def test_subject_without_claims(self, issued_credential):
        """Test an empty credentialSubject object fails."""
        issued_credential["credentialSubject"] = {}
        with pytest.raises(AssertionError, match="at least one claim"):
            assert_issued_credential_shape(issued_credential)

    def test_subject_list(self, issued_credential):
        issued_credential["credentialSubject"] = [{"id": "did:example:a"}, {"name": "B"}]
        assert_issued_credential_shape(issued_credential)

    def test_empty_subject_list(self, issued_credential):
        issued_credential["credentialSubject"] = []
        with pytest.raises(AssertionError, match="at least one subject"):
            assert_issued_credential_shape(issued_credential)

    def test_subject_list_with_empty_subject(self, issued_credential):
        issued_credential["credentialSubject"] = [{"id": "did:example:a"}, {}]
        with pytest.raises(AssertionError):
            assert_issued_credential_shape(issued_credential)

    def test_subject_not_an_object(self, issued_credential):
        issued_credential["credentialSubject"] = "did:example:holder"
        with pytest.raises(AssertionError):
            assert_issued_credential_shape(issued_credential)

    def test_issuer_object_with_id(self, issued_credential):
        issued_credential["issuer"] = {"id": "did:key:z6MkIssuer", "name": "Example"}
        assert_issued_credential_shape(issued_credential)

    def test_issuer_object_without_id(self, issued_credential):
        issued_credential["issuer"] = {"name": "Example"}
        with pytest.raises(AssertionError, match="issuer object to have property id"):
            assert_issued_credential_shape(issued_credential)

    def test_issuer_wrong_type(self, issued_credential):
        issued_credential["issuer"] = 42
        with pytest.raises(AssertionError):
            assert_issued_credential_shape(issued_credential)

    def test_proof_not_object(self, issued_credential):
        issued_credential["proof"] = "z58DAdFfa9SkqZMVPxAQp"
        with pytest.raises(AssertionError, match="`proof` to be an object"):
            assert_issued_credential_shape(issued_credential)


class TestInvalidInputRejected:
    """Tests for the 400/422 rejection check."""

    @pytest.mark.parametrize("status", [400, 422])
    def test_accepted_statuses(self, status):
        assert_invalid_input_rejected(OperationOutcome(error=HttpStatusError(status)))

    def test_error_mapping(self):
        assert_invalid_input_rejected(OperationOutcome(error={"status": 422}))

    def test_authorization_error(self):
        """Test a 401 is reported as an authorization problem."""
        with pytest.raises(AssertionError, match="Authorization"):
            assert_invalid_input_rejected(OperationOutcome(error=HttpStatusError(401)))

    @pytest.mark.parametrize("status", [403, 404, 500])
    def test_other_statuses(self, status):
        with pytest.raises(AssertionError, match="400"):
            assert_invalid_input_rejected(OperationOutcome(error=HttpStatusError(status)))

    def test_result_present(self, issued_credential):
        with pytest.raises(AssertionError, match="Expected no result"):
            assert_invalid_input_rejected(OperationOutcome(result=issued_credential))

    def test_error_without_status(self):
        with pytest.raises(AssertionError, match="HTTP error response code"):
            assert_invalid_input_rejected(OperationOutcome(error=TransportFault("refused")))


class TestSuccess:
    """Tests for the success check."""

    def test_result_without_error(self, issued_credential):
        assert_success(OperationOutcome(result=issued_credential))

    def test_error(self):
        with pytest.raises(AssertionError, match="Expected no error"):
            assert_success(OperationOutcome(error=HttpStatusError(500)))

    def test_no_result(self):
        with pytest.raises(AssertionError, match="Expected a result"):
            assert_success(OperationOutcome())


class TestRejectedByIssuerOrVerifier:
    """Tests for the issue-or-verify negative check."""

    def test_rejected_at_issuance(self, implementation, credential):
        """Test an issuer rejection returns at once without verifying."""
        error = HttpStatusError(400, errors=[{"message": "invalid validFrom"}])
        transport = ScriptedTransport({EndpointRole.ISSUER: error})
        endpoints = ImplementationEndpoints(implementation, TAG, transport=transport)

        outcome = assert_rejected_by_issuer_or_verifier(endpoints, credential, REASON)

        assert outcome.error is error
        assert outcome.result is None
        assert [role for role, _ in transport.sent] == [EndpointRole.ISSUER]
        assert_invalid_input_rejected(outcome)

    def test_rejected_at_verification(self, implementation, credential, issued_credential):
        """Test an issuer that signs anything passes when the verifier rejects."""
        rejection = HttpStatusError(400)
        transport = ScriptedTransport({
            EndpointRole.ISSUER: issued_credential,
            EndpointRole.VERIFIER: rejection,
        })
        endpoints = ImplementationEndpoints(implementation, TAG, transport=transport)

        outcome = assert_rejected_by_issuer_or_verifier(endpoints, credential, REASON)

        assert outcome.error is None
        assert outcome.result == issued_credential
        assert outcome.verify_error is rejection
        assert transport.sent[1] == (
            EndpointRole.VERIFIER,
            {"verifiableCredential": issued_credential},
        )

    def test_rejected_in_verification_payload(self, implementation, credential, issued_credential):
        """Test errors reported in a 2xx verification response count as rejection."""
        transport = ScriptedTransport({
            EndpointRole.ISSUER: issued_credential,
            EndpointRole.VERIFIER: {"errors": [{"message": "validFrom is invalid"}]},
        })
        endpoints = ImplementationEndpoints(implementation, TAG, transport=transport)

        outcome = assert_rejected_by_issuer_or_verifier(endpoints, credential, REASON)

        assert outcome.result == issued_credential
        assert isinstance(outcome.verify_error, ApplicationRejection)

    def test_unreachable_verifier_is_kept(self, implementation, credential, issued_credential):
        """Test a verifier network fault is returned for the caller to judge."""
        fault = TransportFault("Network error posting to verifier")
        transport = ScriptedTransport({
            EndpointRole.ISSUER: issued_credential,
            EndpointRole.VERIFIER: fault,
        })
        endpoints = ImplementationEndpoints(implementation, TAG, transport=transport)

        outcome = assert_rejected_by_issuer_or_verifier(endpoints, credential, REASON)

        assert outcome.error is None
        assert outcome.verify_error is fault

    def test_accepted_everywhere(self, implementation, credential, issued_credential):
        """Test the check fails with the reason when nobody rejects."""
        transport = ScriptedTransport({
            EndpointRole.ISSUER: issued_credential,
            EndpointRole.VERIFIER: {"checks": ["proof"], "errors": []},
        })
        endpoints = ImplementationEndpoints(implementation, TAG, transport=transport)

        with pytest.raises(AssertionError, match="invalid validFrom"):
            assert_rejected_by_issuer_or_verifier(endpoints, credential, REASON)

    def test_application_rejection_is_harness_error(self):
        assert issubclass(ApplicationRejection, HarnessError)
        rejection = ApplicationRejection([{"message": "bad"}])
        assert rejection.error == {"message": "bad"}


class TestEnvelopedCredential:
    """Tests for decoding enveloped VC-JWT credentials."""

    def test_extracts_payload(self, issued_credential):
        token = ".".join([b64url({"alg": "ES256"}), b64url(issued_credential), "c2ln"])
        enveloped = {
            "@context": ["https://www.w3.org/ns/credentials/v2"],
            "type": "EnvelopedVerifiableCredential",
            "id": f"data:application/vc+jwt,{token}",
        }

        assert extract_enveloped_credential(enveloped) == issued_credential

    def test_missing_data_url(self, issued_credential):
        with pytest.raises(AssertionError, match="Missing id field"):
            extract_enveloped_credential(issued_credential)


class TestTrimText:
    def test_collapses_whitespace(self):
        assert trim_text("  Should   reject\n   an invalid\tissuer ") == (
            "Should reject an invalid issuer"
        )


def test_checks_hold_in_optimized_mode():
    """Test the library raises AssertionError itself instead of using assert."""
    source = inspect.getsource(assertions_module)
    asserts = [node for node in ast.walk(ast.parse(source)) if isinstance(node, ast.Assert)]
    assert asserts == []
