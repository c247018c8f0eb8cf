"""
Candidate Ranker for inference sizing.

Ranks devices against a workload requirement in two independent lists:
- Single units: devices that meet memory and throughput on their own
- Group plans: N identical group-capable devices pooled under the device's
  group-size cap

Total orders:
- Single units: memory_gb asc, throughput headroom asc
- Group plans: unit_count asc, total_memory_gb asc, total_throughput desc

Python's sort is stable, so candidates with equal keys keep catalog order.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .exceptions import InvalidRequirementError
from .types import DeviceProfile, GroupPlan, WorkloadRequirement

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2

# Which requirement drove a group's unit count past its cap
LIMIT_MEMORY = "memory"
LIMIT_THROUGHPUT = "throughput"


@dataclass(frozen=True)
class GroupRejection:
    """A group-eligible device whose required unit count exceeds its cap."""
    device: DeviceProfile
    required_units: int
    limiting_factor: str


@dataclass
class RankingResult:
    """Ordered candidates plus the diagnostics used to explain empty results."""
    requirement: WorkloadRequirement
    single_units: List[DeviceProfile] = field(default_factory=list)
    group_plans: List[GroupPlan] = field(default_factory=list)
    group_rejections: List[GroupRejection] = field(default_factory=list)
    device_count: int = 0
    any_memory_fit: bool = False
    any_throughput_fit: bool = False
    any_group_eligible: bool = False

    @property
    def has_candidates(self) -> bool:
        return bool(self.single_units or self.group_plans)


def validate_requirement(requirement: WorkloadRequirement) -> None:
    """Raise InvalidRequirementError unless the requirement can be ranked."""
    memory = requirement.required_memory_gb
    throughput = requirement.required_throughput

    for name, value in (("required_memory_gb", memory), ("required_throughput", throughput)):
        if value is None or not math.isfinite(value):
            raise InvalidRequirementError(f"{name} must be a finite number, got {value!r}")
        if value < 0:
            raise InvalidRequirementError(f"{name} must be >= 0, got {value}")

    if memory <= 0 and throughput <= 0:
        raise InvalidRequirementError(
            "Workload requirement asks for neither memory nor throughput"
        )


def meets_requirement(device: DeviceProfile, requirement: WorkloadRequirement) -> bool:
    return (device.memory_gb >= requirement.required_memory_gb
            and device.throughput >= requirement.required_throughput)


def single_unit_sort_key(device: DeviceProfile, requirement: WorkloadRequirement) -> Tuple[float, float]:
    """Smallest sufficient device first, then least wasted throughput."""
    return (device.memory_gb, device.throughput - requirement.required_throughput)


def group_plan_sort_key(plan: GroupPlan) -> Tuple[int, float, float]:
    """Fewest units first, then least memory, then most throughput."""
    return (plan.unit_count, plan.total_memory_gb, -plan.total_throughput)


def is_group_eligible(device: DeviceProfile) -> bool:
    return (device.group_capable
            and device.max_group_size >= MIN_GROUP_SIZE
            and device.memory_gb > 0
            and device.throughput > 0)


def required_units(device: DeviceProfile, requirement: WorkloadRequirement) -> Tuple[int, str]:
    """Units needed to cover both requirements, and which one dominates.

    Assumes ``device`` is group-eligible (non-zero memory and throughput).
    """
    by_memory = math.ceil(requirement.required_memory_gb / device.memory_gb)
    by_throughput = math.ceil(requirement.required_throughput / device.throughput)
    units = max(by_memory, by_throughput, MIN_GROUP_SIZE)
    limiting = LIMIT_MEMORY if by_memory >= by_throughput else LIMIT_THROUGHPUT
    return units, limiting


def plan_group(device: DeviceProfile,
               requirement: WorkloadRequirement) -> Tuple[Optional[GroupPlan], Optional[GroupRejection]]:
    """Build the group plan for one device.

    Returns:
        (plan, None) when the device can be grouped within its cap,
        (None, rejection) when the cap is too small,
        (None, None) when the device cannot be grouped at all.
    """
    if not is_group_eligible(device):
        return None, None

    units, limiting = required_units(device, requirement)
    if units > device.max_group_size:
        return None, GroupRejection(device=device, required_units=units, limiting_factor=limiting)

    plan = GroupPlan(
        device=device,
        unit_count=units,
        total_memory_gb=units * device.memory_gb,
        total_throughput=units * device.throughput,
    )

    # Totals must cover both requirements
    if (plan.total_memory_gb < requirement.required_memory_gb
            or plan.total_throughput < requirement.required_throughput):
        logger.warning(
            f"Discarding group plan {plan.label}: totals "
            f"{plan.total_memory_gb} GB / {plan.total_throughput} do not cover requirement"
        )
        return None, None

    return plan, None


def rank_single_units(devices: Iterable[DeviceProfile],
                      requirement: WorkloadRequirement) -> List[DeviceProfile]:
    qualified = [d for d in devices if meets_requirement(d, requirement)]
    qualified.sort(key=lambda d: single_unit_sort_key(d, requirement))
    return qualified


def rank_group_plans(devices: Iterable[DeviceProfile],
                     requirement: WorkloadRequirement) -> List[GroupPlan]:
    plans = []
    for device in devices:
        plan, _ = plan_group(device, requirement)
        if plan is not None:
            plans.append(plan)
    plans.sort(key=group_plan_sort_key)
    return plans


def rank_candidates(requirement: WorkloadRequirement,
                    devices: Iterable[DeviceProfile]) -> RankingResult:
    """Rank all devices for a requirement.

    Args:
        requirement: Memory and throughput to satisfy.
        devices: Normalized device profiles, in catalog order.

    Returns:
        RankingResult with ordered single units and group plans.

    Raises:
        InvalidRequirementError: If the requirement is empty or negative.
    """
    validate_requirement(requirement)
    devices = list(devices)

    result = RankingResult(requirement=requirement, device_count=len(devices))
    plans = []
    for device in devices:
        if device.memory_gb >= requirement.required_memory_gb:
            result.any_memory_fit = True
        if device.throughput >= requirement.required_throughput:
            result.any_throughput_fit = True
        if is_group_eligible(device):
            result.any_group_eligible = True

        plan, rejection = plan_group(device, requirement)
        if plan is not None:
            plans.append(plan)
        elif rejection is not None:
            result.group_rejections.append(rejection)

    result.single_units = rank_single_units(devices, requirement)
    plans.sort(key=group_plan_sort_key)
    result.group_plans = plans

    logger.debug(
        f"Ranked {len(devices)} devices: {len(result.single_units)} single, "
        f"{len(result.group_plans)} grouped, {len(result.group_rejections)} over cap"
    )
    return result
