"""Recommendation selection over ranked candidates."""

import logging
from typing import Iterable, List, Optional, Sequence

from .candidate_ranker import LIMIT_MEMORY, RankingResult, rank_candidates
from .types import (
    Candidate,
    DeviceProfile,
    RecommendationEnvelope,
    WorkloadRequirement,
)

logger = logging.getLogger(__name__)

# Selection policy names, reported in the rationale
POLICY_SINGLE_UNIT = "single-unit"
POLICY_GROUP_FALLBACK = "group-fallback"


def _fmt(value: float) -> str:
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def dedupe_candidates(candidates: Iterable[Candidate],
                      exclude: Optional[Candidate] = None) -> List[Candidate]:
    """Drop repeated identity keys (first wins) and the excluded candidate's key."""
    seen = set()
    if exclude is not None:
        seen.add(exclude.identity_key)
    unique = []
    for candidate in candidates:
        key = candidate.identity_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def select_policy(ranking: RankingResult) -> Optional[str]:
    """Single units always win over groups; grouping is only a fallback."""
    if ranking.single_units:
        return POLICY_SINGLE_UNIT
    if ranking.group_plans:
        return POLICY_GROUP_FALLBACK
    return None


def explain_selection(recommended: Candidate, policy: str, requirement: WorkloadRequirement) -> str:
    lines = [
        f"Requirement: {_fmt(requirement.required_memory_gb)} GB memory, "
        f"{_fmt(requirement.required_throughput)} tokens/s."
    ]
    if policy == POLICY_SINGLE_UNIT:
        lines.append(
            f"{recommended.label} is the smallest single device that meets both "
            f"({_fmt(recommended.total_memory_gb)} GB, {_fmt(recommended.total_throughput)} tokens/s)."
        )
    else:
        lines.append("No single device meets both requirements; grouping identical devices.")
        lines.append(
            f"{recommended.label} pools {_fmt(recommended.total_memory_gb)} GB and "
            f"{_fmt(recommended.total_throughput)} tokens/s with the fewest units."
        )
    return "\n".join(lines)


def explain_infeasible(ranking: RankingResult) -> str:
    """Name each constraint that no device or group could satisfy."""
    requirement = ranking.requirement
    if ranking.device_count == 0:
        return "No devices available in the catalog."

    lines = ["No single device or device group satisfies the requirement."]
    if not ranking.any_memory_fit:
        lines.append(
            f"Memory: no single device has {_fmt(requirement.required_memory_gb)} GB."
        )
    if not ranking.any_throughput_fit:
        lines.append(
            f"Throughput: no single device reaches {_fmt(requirement.required_throughput)} tokens/s."
        )
    if ranking.any_memory_fit and ranking.any_throughput_fit:
        lines.append("Memory and throughput are each met by some device, but never by the same one.")

    if not ranking.any_group_eligible:
        lines.append("Group-size cap: no device can be grouped.")
    for rejection in ranking.group_rejections:
        driver = "memory" if rejection.limiting_factor == LIMIT_MEMORY else "throughput"
        lines.append(
            f"Group-size cap: {rejection.device.id} would need {rejection.required_units} units "
            f"({driver}-bound) but allows at most {rejection.device.max_group_size}."
        )
    return "\n".join(lines)


def build_envelope(ranking: RankingResult) -> RecommendationEnvelope:
    policy = select_policy(ranking)
    if policy is None:
        return RecommendationEnvelope(
            recommended=None,
            alternatives=(),
            rationale=explain_infeasible(ranking),
        )

    if policy == POLICY_SINGLE_UNIT:
        recommended = ranking.single_units[0]
        rest = list(ranking.single_units[1:]) + list(ranking.group_plans)
    else:
        recommended = ranking.group_plans[0]
        rest = list(ranking.group_plans[1:])

    return RecommendationEnvelope(
        recommended=recommended,
        alternatives=tuple(dedupe_candidates(rest, exclude=recommended)),
        rationale=explain_selection(recommended, policy, ranking.requirement),
    )


def compute_recommendation(workload: WorkloadRequirement,
                           devices: Sequence[DeviceProfile]) -> RecommendationEnvelope:
    """Rank devices and pick a recommended configuration.

    Args:
        workload: Memory and throughput to satisfy.
        devices: Normalized device profiles.

    Returns:
        RecommendationEnvelope; ``recommended`` is None when nothing fits.

    Raises:
        InvalidRequirementError: If the workload asks for nothing.
    """
    ranking = rank_candidates(workload, devices)
    envelope = build_envelope(ranking)
    if envelope.recommended is None:
        logger.info(f"No feasible configuration for {workload}")
    else:
        logger.info(
            f"Recommended {envelope.recommended.label} with "
            f"{len(envelope.alternatives)} alternatives"
        )
    return envelope
