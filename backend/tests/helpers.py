"""Test doubles shared across modules."""
import asyncio
from typing import Dict, List, Optional

from sitewatch.services.prober import ProbeError, ProbeResult


class RecordingNotifier:
    """Stands in for the websocket manager and remembers every update."""

    def __init__(self):
        self.updates = []

    async def broadcast_status_update(self, **kwargs):
        self.updates.append(kwargs)


def up_result(latency_ms: int = 120, status_code: int = 200, location: str = "Test Lab") -> ProbeResult:
    return ProbeResult(reachable=True, http_status_code=status_code, latency_ms=latency_ms, location=location)


def unreachable_result(location: str = "Test Lab") -> ProbeResult:
    return ProbeResult(
        reachable=False,
        error=ProbeError.NETWORK_FAILURE,
        location=location,
        details="Connection error: refused",
    )


class FakeProber:
    """Prober returning canned results per URL.

    URLs listed in ``gates`` block until their event is set; URLs in
    ``explode`` raise instead of returning.
    """

    def __init__(
        self,
        results: Optional[Dict[str, ProbeResult]] = None,
        gates: Optional[Dict[str, asyncio.Event]] = None,
        explode: Optional[List[str]] = None,
    ):
        self.results = results or {}
        self.gates = gates or {}
        self.explode = explode or []
        self.calls: List[str] = []

    async def probe(self, url, headers=None):
        self.calls.append(url)
        if url in self.gates:
            await self.gates[url].wait()
        if url in self.explode:
            raise RuntimeError(f"probe of {url} blew up")
        return self.results.get(url, up_result())


class FakeScheduler:
    """Records immediate-check requests made by the API."""

    def __init__(self, in_flight=()):
        self.in_flight = set(in_flight)
        self.checked = []

    def check_now(self, target_id, url):
        if target_id in self.in_flight:
            return False
        self.checked.append((target_id, url))
        return True
