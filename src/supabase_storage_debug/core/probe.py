"""Reachability probing for the project URL and public object URLs.

A probe answers "does this URL answer a plain GET?" and nothing more. Whether
a public URL could be *generated* says nothing about whether it can be
fetched: that depends on bucket visibility and CORS, which the storage API
never checks.
"""

import logging
from typing import Optional

import requests

from .models import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


class ReachabilityProber:
    """Single-GET prober with a bounded timeout."""

    def __init__(
        self,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        """Initialize the prober.

        Args:
            timeout: Seconds before the request is abandoned
            http: Optional requests session to reuse connections
        """
        self.timeout = timeout
        self.http = http or requests.Session()

    def check(self, url: str) -> ProbeResult:
        """Probe a URL. Never raises.

        Redirects are not followed and the body is never read; a 3xx counts
        as reachable.
        """
        try:
            response = self.http.get(
                url, timeout=self.timeout, allow_redirects=False, stream=True
            )
        except requests.exceptions.Timeout:
            logger.debug(f"Probe timed out after {self.timeout}s: {url}")
            return ProbeResult(accessible=False, status_code=0, error="Timeout")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return ProbeResult(accessible=False, status_code=0, error="Network error")

        try:
            status_code = int(response.status_code)
        finally:
            response.close()

        logger.debug(f"Probe {url} -> {status_code}")
        return ProbeResult(accessible=200 <= status_code < 400, status_code=status_code)

    def close(self) -> None:
        self.http.close()


def check_url(url: str, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ProbeResult:
    """One-off probe with a throwaway session."""
    prober = ReachabilityProber(timeout=timeout)
    try:
        return prober.check(url)
    finally:
        prober.close()
