"""Ad-hoc probe endpoint used by the dashboard."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..dependencies import get_prober
from ..schemas.probe import ProbeRequest, ProbeResponse
from ..models.target import STATUS_DOWN
from ..services.prober import ProberService, ProbeError, ProbeResult, resolve_location
from ..services.reconciler import to_logical_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["probe"])


@router.post(
    "/check-status",
    response_model=ProbeResponse,
    response_model_exclude_unset=True,
)
async def check_status(
    body: ProbeRequest,
    request: Request,
    prober: ProberService = Depends(get_prober),
):
    """Probe a URL once and report Up/Down with latency.

    Nothing is persisted. Probe failures come back as a Down response, never
    as an error status.
    """
    url = (body.url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        result = await prober.probe(url, headers=request.headers)
    except Exception as e:
        logger.error(f"Probe of {url} raised: {e}")
        result = ProbeResult(
            reachable=False,
            error=ProbeError.NETWORK_FAILURE,
            location=resolve_location(request.headers),
        )

    status = to_logical_status(result)
    fields = {
        "status": status,
        "latency": result.latency_ms,
        "monitoring_location": result.location,
    }
    if status == STATUS_DOWN and result.http_status_code is not None:
        fields["status_code"] = result.http_status_code
    return ProbeResponse(**fields)
