"""
Assertions over issued credentials and operation outcomes.

Each assertion raises AssertionError with a descriptive message, so it can
be used directly inside pytest tests.
"""

from __future__ import annotations

import base64
import json
import re
from typing import Any

from vc_api_harness.endpoints import ImplementationEndpoints, OperationOutcome
from vc_api_harness.errors import HarnessError

ENVELOPED_VC_PREFIX = "data:application/vc+jwt"


def _status_of(error: Any) -> int | None:
    if isinstance(error, dict):
        return error.get("status")
    return getattr(error, "status", None)


def _check(condition: bool, message: str) -> None:
    """Raise AssertionError with message unless condition holds."""
    if not condition:
        raise AssertionError(message)


def assert_invalid_input_rejected(outcome: OperationOutcome) -> None:
    """Assert the implementation rejected the request as invalid input.

    The error must carry status 400 or 422. A 401 is called out separately
    since it means the request never got past authorization.
    """
    _check(outcome.result is None, "Expected no result from issuer.")
    _check(outcome.error is not None, "Expected issuer to Error.")
    status = _status_of(outcome.error)
    _check(status is not None, "Expected an HTTP error response code.")
    _check(status != 401, "Should not get an Authorization Error.")
    _check(
        status in (400, 422),
        "Expected status code 400 (invalid input) or 422 (unprocessable entity), "
        f"got {status}.",
    )


def assert_success(outcome: OperationOutcome) -> None:
    _check(outcome.error is None, f"Expected no error, got {outcome.error}")
    _check(outcome.result is not None, "Expected a result")


def assert_issued_credential_shape(credential: Any) -> None:
    """Assert an issued credential has the structure of a VC.

    Checks @context, type (including VerifiableCredential), a string id, a
    credentialSubject with claims, a string or object issuer (objects need an
    id) and a proof object.
    """
    _check(
        isinstance(credential, dict),
        "Expected the issued Verifiable Credential to be an object.",
    )
    for name in ("@context", "type", "id", "credentialSubject", "issuer", "proof"):
        _check(name in credential, f"Expected credential to have property '{name}'.")

    types = credential["type"]
    if isinstance(types, str):
        types = [types]
    _check(isinstance(types, list), "Expected `type` to be a string or a list.")
    _check(
        "VerifiableCredential" in types,
        'Expected `type` to contain "VerifiableCredential".',
    )
    _check(isinstance(credential["id"], str), "Expected `id` to be a string.")
    _assert_valid_credential_subject(credential["credentialSubject"])

    issuer = credential["issuer"]
    _check(
        isinstance(issuer, (str, dict)),
        "Expected `issuer` to be a string or an object.",
    )
    _check(isinstance(credential["proof"], dict), "Expected `proof` to be an object.")
    if isinstance(issuer, dict):
        _check(issuer.get("id") is not None, "Expected issuer object to have property id")


def _assert_valid_credential_subject(credential_subject: Any) -> None:
    _check(credential_subject is not None, "Expected credentialSubject to exist.")
    if not isinstance(credential_subject, list):
        _assert_has_claims(credential_subject)
        return

    _check(
        len(credential_subject) > 0,
        "Expected credentialSubject to make a claim on at least one subject.",
    )
    for subject in credential_subject:
        _assert_has_claims(subject)


def _assert_has_claims(subject: Any) -> None:
    _check(isinstance(subject, dict), "Expected credentialSubject to be an object.")
    _check(len(subject) > 0, "Expected credentialSubject to have at least one claim.")


def assert_rejected_by_issuer_or_verifier(
    endpoints: ImplementationEndpoints,
    invalid_credential: dict[str, Any],
    reason: str,
) -> OperationOutcome:
    """Assert an invalid credential is rejected at issuance or verification.

    Some issuers validate credentials before issuing and others don't. An
    issuer error ends the check at once and verify is never called. If the
    issuer signs the credential anyway, the verifier must reject it.

    Args:
        endpoints: The implementation's endpoints.
        invalid_credential: A credential that must not be accepted.
        reason: Why the credential is invalid, used as the failure message.

    Returns:
        The issuance outcome: the issuer's error, or the issued credential
        with the verifier's error in ``verify_error``.

    Raises:
        AssertionError: If both issuance and verification succeed.
    """
    try:
        result = endpoints.issue(invalid_credential)
    except HarnessError as e:
        return OperationOutcome(error=e)

    try:
        endpoints.verify(result)
    except HarnessError as e:
        return OperationOutcome(result=result, verify_error=e)

    raise AssertionError(reason)


def extract_enveloped_credential(issued: dict[str, Any]) -> dict[str, Any]:
    """Decode the payload of an enveloped VC-JWT credential.

    Args:
        issued: An EnvelopedVerifiableCredential whose id is a
            ``data:application/vc+jwt,<jwt>`` URL.

    Returns:
        The decoded JWT payload.
    """
    credential_id = issued.get("id") if isinstance(issued, dict) else None
    _check(
        isinstance(credential_id, str) and ENVELOPED_VC_PREFIX in credential_id,
        "Missing id field.",
    )
    _, _, token = credential_id.partition(",")
    segments = token.split(".")
    _check(len(segments) >= 2, f"Expected a JWT in the credential id, got {token!r}")

    # Add padding if needed
    data = segments[1]
    padding = 4 - (len(data) % 4)
    if padding != 4:
        data += "=" * padding
    return json.loads(base64.urlsafe_b64decode(data))


def trim_text(text: str) -> str:
    """Collapse whitespace runs and strip, for long test titles."""
    return re.sub(r"\s+", " ", text).strip()
