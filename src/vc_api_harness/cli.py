"""
Command-line interface for the VC API harness.

Usage:
    vc-api-harness implementation.json credential.json --tag ecdsa-rdfc-2019
    vc-api-harness impl.json invalid.json --tag vc2.0 --expect-rejection "bad validFrom"
    cat credential.json | vc-api-harness implementation.json - --tag vc2.0
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from vc_api_harness.assertions import (
    assert_issued_credential_shape,
    assert_rejected_by_issuer_or_verifier,
)
from vc_api_harness.config import HTTP_TIMEOUT_SECONDS, LOG_LEVEL
from vc_api_harness.descriptors import EndpointSettings, ImplementationDescriptor
from vc_api_harness.endpoints import ImplementationEndpoints
from vc_api_harness.errors import EndpointNotConfiguredError, HarnessError, TransportFault
from vc_api_harness.transport import DispatchTransport, HttpxPostClient, LocalTransport


console = Console()


@dataclass
class CheckReport:
    """Outcome of one conformance check."""

    implementation: str
    tag: str
    mode: str
    passed: bool
    steps: list[tuple[str, bool, str]] = field(default_factory=list)

    def step(self, name: str, ok: bool, detail: str = "") -> None:
        self.steps.append((name, ok, detail))


def format_report(report: CheckReport) -> None:
    """Format and print a check report."""
    if report.passed:
        status_icon = "[bold green]PASS[/]"
        panel_style = "green"
    else:
        status_icon = "[bold red]FAIL[/]"
        panel_style = "red"

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Result", status_icon)
    table.add_row("Implementation", report.implementation)
    table.add_row("Tag", report.tag)
    table.add_row("Mode", report.mode)

    for name, ok, detail in report.steps:
        marker = "[green]ok[/]" if ok else "[red]failed[/]"
        table.add_row(name, f"{marker} {escape(detail)}".rstrip())

    console.print(Panel(table, title="Conformance Check", border_style=panel_style))


def load_json(source: str) -> Any:
    """Load JSON from a file, or stdin for "-"."""
    if source == "-":
        return json.loads(sys.stdin.read())

    path = Path(source)
    if not path.exists():
        raise click.ClickException(f"File not found: {source}")

    with path.open() as f:
        return json.load(f)


def run_positive(
    endpoints: ImplementationEndpoints, credential: dict[str, Any]
) -> CheckReport:
    """Issue a credential, check its shape and verify it."""
    report = CheckReport(
        implementation=endpoints.implementation.name,
        tag=endpoints.tag,
        mode="issue and verify",
        passed=False,
    )

    try:
        issued = endpoints.issue(credential)
    except TransportFault:
        raise
    except HarnessError as e:
        report.step("Issue", False, str(e))
        return report
    report.step("Issue", True)

    try:
        assert_issued_credential_shape(issued)
    except AssertionError as e:
        report.step("Credential shape", False, str(e))
        return report
    report.step("Credential shape", True)

    try:
        endpoints.verify(issued)
    except TransportFault:
        raise
    except HarnessError as e:
        report.step("Verify", False, str(e))
        return report
    report.step("Verify", True)

    report.passed = True
    return report


def run_negative(
    endpoints: ImplementationEndpoints,
    credential: dict[str, Any],
    reason: str,
) -> CheckReport:
    """Check an invalid credential is rejected at issuance or verification."""
    report = CheckReport(
        implementation=endpoints.implementation.name,
        tag=endpoints.tag,
        mode="expect rejection",
        passed=False,
    )

    try:
        outcome = assert_rejected_by_issuer_or_verifier(endpoints, credential, reason)
    except AssertionError as e:
        report.step("Rejected", False, str(e))
        return report

    for error in (outcome.error, outcome.verify_error):
        if isinstance(error, TransportFault):
            raise error
    if outcome.error is not None:
        report.step("Rejected at issuance", True, str(outcome.error))
    else:
        report.step("Rejected at verification", True, str(outcome.verify_error))
    report.passed = True
    return report


@click.command()
@click.argument("manifest", required=True)
@click.argument("credential", required=True)
@click.option("--tag", required=True, help="Test profile tag selecting the endpoints")
@click.option(
    "--expect-rejection",
    "reason",
    default=None,
    help="Treat CREDENTIAL as invalid; REASON is reported if it is accepted",
)
@click.option(
    "--json-output",
    is_flag=True,
    help="Output result as JSON",
)
@click.option(
    "--timeout",
    type=float,
    default=HTTP_TIMEOUT_SECONDS,
    help="HTTP request timeout in seconds (default: none)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log each request")
@click.version_option(package_name="vc-api-harness")
def main(
    manifest: str,
    credential: str,
    tag: str,
    reason: str | None,
    json_output: bool,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Run a VC API conformance check against one implementation.

    MANIFEST is a JSON file describing the implementation's issuers,
    verifiers and vpVerifiers. CREDENTIAL is the candidate credential file,
    or "-" to read it from stdin.

    Examples:

        vc-api-harness impl.json credential.json --tag vc2.0

        vc-api-harness impl.json expired.json --tag vc2.0 \
            --expect-rejection "validUntil in the past"
    """
    logging.basicConfig(level=logging.DEBUG if verbose else LOG_LEVEL)

    try:
        def bind_client(settings: EndpointSettings) -> HttpxPostClient:
            return HttpxPostClient(settings, timeout=timeout)

        implementation = ImplementationDescriptor.from_dict(
            load_json(manifest), client_factory=bind_client
        )
        endpoints = ImplementationEndpoints(
            implementation,
            tag,
            transport=DispatchTransport(local=LocalTransport(timeout=timeout)),
        )
        candidate = load_json(credential)

        if reason is None:
            report = run_positive(endpoints, candidate)
        else:
            report = run_negative(endpoints, candidate, reason)

        if json_output:
            console.print_json(data={
                "implementation": report.implementation,
                "tag": report.tag,
                "mode": report.mode,
                "passed": report.passed,
                "steps": [
                    {"name": name, "ok": ok, "detail": detail}
                    for name, ok, detail in report.steps
                ],
            })
        else:
            format_report(report)

        sys.exit(0 if report.passed else 1)

    except json.JSONDecodeError as e:
        if json_output:
            console.print_json(data={"error": f"Invalid JSON: {e}"})
        else:
            console.print(f"[red]Error:[/] Invalid JSON: {e}")
        sys.exit(2)

    except TransportFault as e:
        if json_output:
            console.print_json(data={"error": f"Transport error: {e}"})
        else:
            console.print(f"[red]Error:[/] Transport error: {e}")
        sys.exit(2)

    except (EndpointNotConfiguredError, ValueError) as e:
        if json_output:
            console.print_json(data={"error": str(e)})
        else:
            console.print(f"[red]Error:[/] {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
