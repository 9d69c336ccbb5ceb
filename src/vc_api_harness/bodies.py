"""Request bodies for the issue and verify operations."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from vc_api_harness.config import DEFAULT_CHALLENGE, DEFAULT_DOMAIN
from vc_api_harness.descriptors import EndpointDescriptor

# Option layers for presentation verification, lowest priority first.
OPTION_PRECEDENCE = ("defaults", "endpoint", "call")


def default_presentation_options() -> dict[str, Any]:
    return {"domain": DEFAULT_DOMAIN, "challenge": DEFAULT_CHALLENGE}


def merge_options(
    defaults: Mapping[str, Any] | None = None,
    endpoint: Mapping[str, Any] | None = None,
    call: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge option layers; later layers win on key collision.

    The layers are applied in OPTION_PRECEDENCE order. The merge is shallow:
    a nested mapping in a later layer replaces the earlier one whole.

    Args:
        defaults: Harness defaults (domain, challenge).
        endpoint: Options configured on the endpoint.
        call: Options passed for this request.

    Returns:
        A new dict with the merged options.
    """
    layers = {"defaults": defaults, "endpoint": endpoint, "call": call}
    merged: dict[str, Any] = {}
    for name in OPTION_PRECEDENCE:
        merged.update(layers[name] or {})
    return merged


def build_issue_body(
    issuer: EndpointDescriptor, credential: dict[str, Any]
) -> dict[str, Any]:
    """Wrap a candidate credential for the issuer.

    The credential's issuer is set to the endpoint's configured issuer id,
    keeping the object form when the credential uses one. Endpoint options
    are passed along when configured.
    """
    vc = copy.deepcopy(credential)
    issuer_id = issuer.settings.id
    if issuer_id:
        if isinstance(vc.get("issuer"), dict):
            vc["issuer"]["id"] = issuer_id
        else:
            vc["issuer"] = issuer_id

    body: dict[str, Any] = {"credential": vc}
    if issuer.settings.options:
        body["options"] = dict(issuer.settings.options)
    return body


def build_verify_body(credential: Any) -> dict[str, Any]:
    return {"verifiableCredential": credential}


def build_presentation_verify_body(
    vp_verifier: EndpointDescriptor,
    presentation: Any,
    options: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Wrap a presentation with merged verification options.

    Request options override endpoint options, which override the harness
    domain and challenge.
    """
    return {
        "verifiablePresentation": presentation,
        "options": merge_options(
            default_presentation_options(),
            vp_verifier.settings.options,
            options,
        ),
    }
