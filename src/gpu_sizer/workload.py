"""Derive workload requirements from a model and its expected load."""

from typing import Optional

from .exceptions import InvalidRequirementError
from .types import ModelProfile, WorkloadRequirement


def build_requirement(model: ModelProfile,
                      concurrent_sessions: int,
                      per_session_throughput: float,
                      kv_cache_per_session_gb: Optional[float] = None) -> WorkloadRequirement:
    """Build the requirement for serving ``model`` to concurrent sessions.

    Memory is the model's base memory. Session count only scales memory when
    the caller supplies a per-session KV cache size.

    Args:
        model: Normalized model profile.
        concurrent_sessions: Number of simultaneous users (>= 1).
        per_session_throughput: Tokens/s each session needs.
        kv_cache_per_session_gb: Optional KV cache held per session.

    Raises:
        InvalidRequirementError: On non-positive sessions or negative rates.
    """
    if concurrent_sessions < 1:
        raise InvalidRequirementError(
            f"concurrent_sessions must be >= 1, got {concurrent_sessions}"
        )
    if per_session_throughput < 0:
        raise InvalidRequirementError(
            f"per_session_throughput must be >= 0, got {per_session_throughput}"
        )
    if kv_cache_per_session_gb is not None and kv_cache_per_session_gb < 0:
        raise InvalidRequirementError(
            f"kv_cache_per_session_gb must be >= 0, got {kv_cache_per_session_gb}"
        )

    memory_gb = model.min_memory_gb
    if kv_cache_per_session_gb is not None:
        memory_gb += concurrent_sessions * kv_cache_per_session_gb

    return WorkloadRequirement(
        required_memory_gb=memory_gb,
        required_throughput=concurrent_sessions * per_session_throughput,
    )
