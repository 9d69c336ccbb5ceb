"""
Implementation and endpoint descriptors.

An implementation under test exposes issuers, verifiers and presentation
verifiers. Each endpoint advertises a set of tags; a test profile picks the
endpoint for a role by tag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from vc_api_harness.transport import PostClient


class EndpointRole(Enum):
    """Role an endpoint plays for an implementation."""

    ISSUER = "issuer"
    VERIFIER = "verifier"
    VP_VERIFIER = "presentation-verifier"


# Manifest key for each role's endpoint list.
ROLE_KEYS: dict[EndpointRole, str] = {
    EndpointRole.ISSUER: "issuers",
    EndpointRole.VERIFIER: "verifiers",
    EndpointRole.VP_VERIFIER: "vpVerifiers",
}


@dataclass(frozen=True)
class EndpointSettings:
    """Address and options of a single endpoint."""

    endpoint: str
    id: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EndpointSettings:
        """Create EndpointSettings from a manifest entry."""
        endpoint = data.get("endpoint")
        if not endpoint or not isinstance(endpoint, str):
            raise ValueError(f"Endpoint entry has no endpoint address: {data!r}")
        return cls(
            endpoint=endpoint,
            id=data.get("id"),
            options=dict(data.get("options") or {}),
            headers=dict(data.get("headers") or {}),
        )

    @property
    def scheme(self) -> str:
        return urlsplit(self.endpoint).scheme.lower()


@dataclass(frozen=True)
class EndpointDescriptor:
    """A configured endpoint performing one role."""

    role: EndpointRole
    tags: frozenset[str]
    settings: EndpointSettings
    client: PostClient | None = None

    @property
    def is_direct(self) -> bool:
        """Whether requests go through the bound client instead of the wire.

        True only for https addresses with a client bound to them.
        """
        return self.settings.scheme == "https" and self.client is not None

    def supports(self, tag: str) -> bool:
        return tag in self.tags


@dataclass(frozen=True)
class ImplementationDescriptor:
    """An implementation under test and its endpoints, in declared order."""

    name: str
    issuers: tuple[EndpointDescriptor, ...] = ()
    verifiers: tuple[EndpointDescriptor, ...] = ()
    vp_verifiers: tuple[EndpointDescriptor, ...] = ()

    def endpoints(self, role: EndpointRole) -> tuple[EndpointDescriptor, ...]:
        """Get the endpoints declared for a role."""
        if role is EndpointRole.ISSUER:
            return self.issuers
        if role is EndpointRole.VERIFIER:
            return self.verifiers
        return self.vp_verifiers

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        client_factory: Callable[[EndpointSettings], PostClient] | None = None,
    ) -> ImplementationDescriptor:
        """Create an ImplementationDescriptor from a manifest.

        Args:
            data: Manifest with ``name`` and ``issuers``, ``verifiers`` and
                ``vpVerifiers`` lists.
            client_factory: Builds the client bound to https endpoints.
                Without one, every endpoint uses the local transport.

        Returns:
            The parsed descriptor.

        Raises:
            ValueError: If an endpoint entry is malformed.
        """
        parsed: dict[EndpointRole, tuple[EndpointDescriptor, ...]] = {}
        for role, key in ROLE_KEYS.items():
            entries = data.get(key) or []
            if not isinstance(entries, list):
                raise ValueError(f"{key} must be a list")
            parsed[role] = tuple(
                _parse_endpoint(role, entry, client_factory) for entry in entries
            )

        return cls(
            name=data.get("name", "unnamed"),
            issuers=parsed[EndpointRole.ISSUER],
            verifiers=parsed[EndpointRole.VERIFIER],
            vp_verifiers=parsed[EndpointRole.VP_VERIFIER],
        )


def _parse_endpoint(
    role: EndpointRole,
    entry: dict[str, Any],
    client_factory: Callable[[EndpointSettings], PostClient] | None,
) -> EndpointDescriptor:
    settings = EndpointSettings.from_dict(entry)
    tags = entry.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]

    client = None
    if client_factory is not None and settings.scheme == "https":
        client = client_factory(settings)

    return EndpointDescriptor(
        role=role,
        tags=frozenset(tags),
        settings=settings,
        client=client,
    )


def resolve(
    implementation: ImplementationDescriptor,
    role: EndpointRole,
    tag: str,
) -> EndpointDescriptor | None:
    """Find the endpoint for a role that advertises a tag.

    Args:
        implementation: The implementation under test.
        role: The endpoint role to look up.
        tag: The test profile tag.

    Returns:
        The first matching endpoint in declared order, or None when the
        implementation does not offer the capability.
    """
    for endpoint in implementation.endpoints(role):
        if endpoint.supports(tag):
            return endpoint
    return None
