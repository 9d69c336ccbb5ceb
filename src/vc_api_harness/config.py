"""Harness configuration.

Environment-based defaults. Every value can be overridden per call; the
environment only changes what is used when nothing is passed.
"""
from __future__ import annotations

import os
from typing import Optional


def _get_timeout() -> Optional[float]:
    """HTTP timeout for the local transport in seconds.

    Unset or empty means no timeout: the harness waits for the endpoint and
    leaves deadlines to the caller.
    """
    raw = os.getenv("VC_HARNESS_TIMEOUT", "")
    if not raw:
        return None
    return float(raw)


# Presentation verification defaults. Endpoint options and per-call options
# override these.
DEFAULT_DOMAIN: str = os.getenv("VC_HARNESS_DOMAIN", "https://vc.example/")
DEFAULT_CHALLENGE: str = os.getenv(
    "VC_HARNESS_CHALLENGE", "99612b24-63d9-11ea-b99f-4f66f3e4f81a"
)

HTTP_TIMEOUT_SECONDS: Optional[float] = _get_timeout()

LOG_LEVEL: str = os.getenv("VC_HARNESS_LOG_LEVEL", "WARNING").upper()
