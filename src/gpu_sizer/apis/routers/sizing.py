"""
Sizing API routes: device listing, recommendation, promotion, hydration.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from ...catalog import CatalogClient
from ...config import settings
from ...exceptions import CatalogLookupError, InvalidRequirementError
from ...service import SizingService
from ...types import WorkloadRequirement
from ..schemas import HydrateRequest, PromoteRequest, RecommendationRequest


router = APIRouter(prefix="/api/sizing", tags=["sizing"])


@lru_cache()
def get_sizing_service() -> SizingService:
    catalog = CatalogClient(settings.CATALOG_BASE_URL, timeout=settings.CATALOG_TIMEOUT_S)
    return SizingService(catalog, settings)


@router.get("/devices")
def list_devices(service: SizingService = Depends(get_sizing_service)):
    """List normalized devices from the catalog."""
    try:
        return [device.to_dict() for device in service.devices()]
    except CatalogLookupError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/recommendation")
def recommend(request: RecommendationRequest,
              service: SizingService = Depends(get_sizing_service)):
    """Recommend a single device or device group for a workload."""
    try:
        if request.model_id:
            envelope = service.recommend_for_model(
                request.model_id,
                request.concurrent_sessions,
                request.per_session_throughput,
                request.kv_cache_per_session_gb,
            )
        else:
            envelope = service.recommend(WorkloadRequirement(
                required_memory_gb=request.required_memory_gb or 0.0,
                required_throughput=request.required_throughput or 0.0,
            ))
        return envelope.to_dict()
    except InvalidRequirementError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CatalogLookupError as e:
        if e.not_found and e.kind == "model":
            raise HTTPException(status_code=404, detail=f"Model details not found: {request.model_id}")
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/promote")
def promote_alternative(request: PromoteRequest,
                        service: SizingService = Depends(get_sizing_service)):
    """Swap an alternative into the recommended slot."""
    envelope = request.envelope.to_envelope()
    updated = service.promote(envelope, (request.device_id, request.unit_count))
    return updated.to_dict()


@router.post("/hydrate")
def hydrate(request: HydrateRequest,
            service: SizingService = Depends(get_sizing_service)):
    """Resolve identifiers to full records; failed lookups come back degraded."""
    result = service.hydrate(request.kind, request.entries)
    return result.to_dict()
