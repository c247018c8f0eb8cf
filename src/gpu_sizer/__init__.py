"""
GPU Sizer - Recommend GPUs and NVLink groups for LLM inference workloads.

This package ranks catalog devices against a workload's memory and
throughput needs, and hydrates sparse catalog identifiers into full records
with bounded concurrency.
"""

__version__ = "0.1.0"

# Import main types
from .types import (
    WorkloadRequirement,
    DeviceProfile,
    ModelProfile,
    GroupPlan,
    RecommendationEnvelope,
    HydrationRecord,
    GenerationToken,
)
from .exceptions import SizerError, InvalidRequirementError, CatalogLookupError

# Import core functions
from .profile_normalizer import (
    ProfileNormalizer,
    normalize_device,
    normalize_devices,
    normalize_model,
)
from .kv_cache import estimate_kv_cache_gb
from .candidate_ranker import RankingResult, rank_candidates
from .recommendation import compute_recommendation
from .swap import promote
from .hydration import HydrationScheduler, HydrationResult
from .workload import build_requirement

# Import catalog access
from .catalog import CatalogClient
from .service import SizingService

# Define public API
__all__ = [
    # Types
    "WorkloadRequirement",
    "DeviceProfile",
    "ModelProfile",
    "GroupPlan",
    "RecommendationEnvelope",
    "HydrationRecord",
    "GenerationToken",
    "RankingResult",
    "HydrationResult",

    # Errors
    "SizerError",
    "InvalidRequirementError",
    "CatalogLookupError",

    # Functions
    "ProfileNormalizer",
    "normalize_device",
    "normalize_devices",
    "normalize_model",
    "estimate_kv_cache_gb",
    "rank_candidates",
    "compute_recommendation",
    "promote",
    "build_requirement",

    # Services
    "HydrationScheduler",
    "CatalogClient",
    "SizingService",
]
