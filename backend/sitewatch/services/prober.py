"""Prober service - performs a single reachability check against a URL."""
import enum
import logging
import time
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"


class ProbeError(str, enum.Enum):
    """Why a probe produced no response."""
    NETWORK_FAILURE = "network_failure"


@dataclass
class ProbeResult:
    """Raw outcome of one probe. Logical Up/Down is decided by the reconciler."""
    reachable: bool
    http_status_code: Optional[int] = None
    latency_ms: Optional[int] = None
    error: Optional[ProbeError] = None
    location: str = UNKNOWN_LOCATION
    details: Optional[str] = None


def resolve_location(headers: Optional[Mapping[str, str]] = None) -> str:
    """Best-effort label for where the probe runs from.

    Joins the city/region/country edge headers when present, otherwise falls
    back to the configured ``monitoring_location`` and finally to
    "Unknown Location".
    """
    if headers:
        parts = [
            headers.get(settings.location_city_header) or "",
            headers.get(settings.location_region_header) or "",
            headers.get(settings.location_country_header) or "",
        ]
        label = ", ".join(part for part in parts if part)
        if label:
            return label
    return settings.monitoring_location or UNKNOWN_LOCATION


class ProberService:
    """Issues one GET per probe, following redirects, never retrying."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.user_agent = user_agent or settings.probe_user_agent
        self.timeout = timeout if timeout is not None else settings.probe_timeout_seconds
        # Injected in tests; None means real network
        self.transport = transport

    async def probe(self, url: str, headers: Optional[Mapping[str, str]] = None) -> ProbeResult:
        """Probe ``url`` once.

        Any HTTP response counts as reachable, whatever its status code.
        Every exception, including a malformed URL, becomes a network failure
        with no latency.
        """
        location = resolve_location(headers)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                start = time.perf_counter()
                # get() reads the whole body, so latency covers the full round trip
                response = await client.get(url)
                latency_ms = int((time.perf_counter() - start) * 1000)

            return ProbeResult(
                reachable=True,
                http_status_code=response.status_code,
                latency_ms=latency_ms,
                location=location,
            )
        except httpx.TimeoutException:
            details = "Request timeout"
        except httpx.ConnectError as e:
            details = f"Connection error: {e}"
        except Exception as e:
            details = f"{type(e).__name__}: {e}"

        logger.debug(f"Probe of {url} failed: {details}")
        return ProbeResult(
            reachable=False,
            error=ProbeError.NETWORK_FAILURE,
            location=location,
            details=details,
        )


# Global instance
prober_service = ProberService()
