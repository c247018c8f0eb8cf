"""Type definitions for GPU Sizer."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

# (device id, unit count); a single device has unit count 1
IdentityKey = Tuple[str, int]


@dataclass(frozen=True)
class WorkloadRequirement:
    """Memory and throughput a configuration has to provide."""
    required_memory_gb: float = 0.0
    required_throughput: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "required_memory_gb": self.required_memory_gb,
            "required_throughput": self.required_throughput,
        }


@dataclass(frozen=True)
class DeviceProfile:
    """Normalized accelerator record."""
    id: str
    memory_gb: float = 0.0
    throughput: float = 0.0
    group_capable: bool = False
    max_group_size: int = 0
    # Display-only
    tflops_fp16: Optional[float] = None
    manufacturer: Optional[str] = None

    @property
    def unit_count(self) -> int:
        return 1

    @property
    def total_memory_gb(self) -> float:
        return self.memory_gb

    @property
    def total_throughput(self) -> float:
        return self.throughput

    @property
    def identity_key(self) -> IdentityKey:
        return (self.id, 1)

    @property
    def label(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "device",
            "id": self.id,
            "memory_gb": self.memory_gb,
            "throughput": self.throughput,
            "group_capable": self.group_capable,
            "max_group_size": self.max_group_size,
            "tflops_fp16": self.tflops_fp16,
            "manufacturer": self.manufacturer,
            "unit_count": 1,
            "total_memory_gb": self.memory_gb,
            "total_throughput": self.throughput,
        }


@dataclass(frozen=True)
class ModelProfile:
    """Normalized model record."""
    id: Optional[str]
    min_memory_gb: float = 0.0
    # Display-only, None when unknown
    base_latency_s: Optional[float] = None
    kv_cache_gb: Optional[float] = None
    size: Optional[str] = None
    missing_kv_cache: bool = False
    config: Optional[Dict[str, Any]] = field(default=None, compare=False, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "model",
            "id": self.id,
            "min_memory_gb": self.min_memory_gb,
            "base_latency_s": self.base_latency_s,
            "kv_cache_gb": self.kv_cache_gb,
            "size": self.size,
            "missing_kv_cache": self.missing_kv_cache,
        }


@dataclass(frozen=True)
class GroupPlan:
    """A number of identical group-capable devices pooled together."""
    device: DeviceProfile
    unit_count: int
    total_memory_gb: float
    total_throughput: float

    @property
    def identity_key(self) -> IdentityKey:
        return (self.device.id, self.unit_count)

    @property
    def label(self) -> str:
        return f"{self.device.id} x{self.unit_count}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "group",
            "id": self.device.id,
            "device": self.device.to_dict(),
            "unit_count": self.unit_count,
            "total_memory_gb": self.total_memory_gb,
            "total_throughput": self.total_throughput,
        }


Candidate = Union[DeviceProfile, GroupPlan]


@dataclass(frozen=True)
class RecommendationEnvelope:
    """Recommended configuration, its alternatives and why."""
    recommended: Optional[Candidate]
    alternatives: Tuple[Candidate, ...] = ()
    rationale: str = ""

    def members(self) -> Tuple[Candidate, ...]:
        """All candidates in the envelope, recommended first."""
        head = (self.recommended,) if self.recommended is not None else ()
        return head + tuple(self.alternatives)

    def find_alternative(self, key: IdentityKey) -> Optional[Candidate]:
        for candidate in self.alternatives:
            if candidate.identity_key == key:
                return candidate
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended": self.recommended.to_dict() if self.recommended is not None else None,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class HydrationRecord:
    """Outcome of resolving one catalog entry."""
    id: Optional[str]
    resolved: Optional[Union[DeviceProfile, ModelProfile]] = None
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resolved": self.resolved.to_dict() if self.resolved is not None else None,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class GenerationToken:
    """Identifies one hydration invocation; larger values are newer."""
    value: int

    def __int__(self) -> int:
        return self.value
