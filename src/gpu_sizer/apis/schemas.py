"""
Pydantic models for API request and response schemas.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..types import Candidate, DeviceProfile, GroupPlan, RecommendationEnvelope


# Shared Models

class DeviceSchema(BaseModel):
    """Normalized device as returned by the API."""
    id: str
    memory_gb: float = Field(0.0, ge=0)
    throughput: float = Field(0.0, ge=0)
    group_capable: bool = False
    max_group_size: int = Field(0, ge=0)
    tflops_fp16: Optional[float] = None
    manufacturer: Optional[str] = None

    def to_profile(self) -> DeviceProfile:
        return DeviceProfile(
            id=self.id,
            memory_gb=self.memory_gb,
            throughput=self.throughput,
            group_capable=self.group_capable,
            max_group_size=self.max_group_size,
            tflops_fp16=self.tflops_fp16,
            manufacturer=self.manufacturer,
        )


class CandidateSchema(DeviceSchema):
    """A single device (kind=device) or a group plan (kind=group)."""
    kind: str = Field("device", pattern="^(device|group)$")
    device: Optional[DeviceSchema] = None
    unit_count: int = Field(1, ge=1)
    total_memory_gb: Optional[float] = None
    total_throughput: Optional[float] = None

    def to_candidate(self) -> Candidate:
        if self.kind == "device":
            return self.to_profile()
        device = self.device.to_profile() if self.device is not None else self.to_profile()
        return GroupPlan(
            device=device,
            unit_count=self.unit_count,
            total_memory_gb=(self.total_memory_gb if self.total_memory_gb is not None
                             else self.unit_count * device.memory_gb),
            total_throughput=(self.total_throughput if self.total_throughput is not None
                              else self.unit_count * device.throughput),
        )


class EnvelopeSchema(BaseModel):
    """Recommendation envelope as exchanged with clients."""
    recommended: Optional[CandidateSchema] = None
    alternatives: List[CandidateSchema] = []
    rationale: str = ""

    def to_envelope(self) -> RecommendationEnvelope:
        return RecommendationEnvelope(
            recommended=self.recommended.to_candidate() if self.recommended is not None else None,
            alternatives=tuple(alt.to_candidate() for alt in self.alternatives),
            rationale=self.rationale,
        )


# Request Models

class RecommendationRequest(BaseModel):
    """Either an explicit requirement or a model plus its expected load."""
    required_memory_gb: Optional[float] = Field(None, ge=0, description="Memory required in GB")
    required_throughput: Optional[float] = Field(None, ge=0, description="Tokens/s required")
    model_id: Optional[str] = Field(None, description="Catalog model identifier")
    concurrent_sessions: int = Field(1, ge=1, description="Simultaneous users")
    per_session_throughput: float = Field(0.0, ge=0, description="Tokens/s per user")
    kv_cache_per_session_gb: Optional[float] = Field(
        None, ge=0, description="KV cache held per user; scales memory by session count"
    )


class PromoteRequest(BaseModel):
    """Promote one alternative of a previous envelope."""
    envelope: EnvelopeSchema
    device_id: str
    unit_count: int = Field(1, ge=1)


class HydrateRequest(BaseModel):
    """Entries to hydrate: identifiers or already-resolved rows."""
    kind: str = Field("model", pattern="^(model|device)$")
    entries: List[Union[str, Dict[str, Any]]] = []
