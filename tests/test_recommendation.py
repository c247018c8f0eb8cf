"""Tests for recommendation selection and rationale."""

import random

import pytest

from gpu_sizer.exceptions import InvalidRequirementError
from gpu_sizer.recommendation import (
    POLICY_GROUP_FALLBACK,
    POLICY_SINGLE_UNIT,
    compute_recommendation,
    dedupe_candidates,
    select_policy,
)
from gpu_sizer.candidate_ranker import rank_candidates
from gpu_sizer.types import DeviceProfile, GroupPlan, WorkloadRequirement


class TestScenarios:
    """End-to-end selection scenarios."""

    def test_single_unit_preferred(self, device_a, device_b, device_c, requirement_40_500):
        """B fits alone; the C pair is the only alternative."""
        envelope = compute_recommendation(requirement_40_500, [device_a, device_b, device_c])

        assert envelope.recommended == device_b
        assert len(envelope.alternatives) == 1
        plan = envelope.alternatives[0]
        assert isinstance(plan, GroupPlan)
        assert plan.device == device_c
        assert plan.unit_count == 2
        assert plan.total_memory_gb == 48
        assert plan.total_throughput == 600
        assert "B" in envelope.rationale

    def test_group_fallback(self, device_c8):
        """No single device fits; five C units cover memory and throughput."""
        envelope = compute_recommendation(WorkloadRequirement(100, 1000), [device_c8])

        plan = envelope.recommended
        assert isinstance(plan, GroupPlan)
        assert plan.unit_count == 5
        assert plan.total_memory_gb == 120
        assert plan.total_throughput == 1500
        assert envelope.alternatives == ()
        assert "grouping" in envelope.rationale

    def test_group_cap_exceeded(self, device_c):
        """21 units are needed for memory but C allows only 4."""
        envelope = compute_recommendation(WorkloadRequirement(500, 10), [device_c])

        assert envelope.recommended is None
        assert envelope.alternatives == ()
        assert "Memory" in envelope.rationale
        assert "Group-size cap" in envelope.rationale
        assert "21 units" in envelope.rationale
        assert "at most 4" in envelope.rationale

    def test_no_devices(self, requirement_40_500):
        envelope = compute_recommendation(requirement_40_500, [])
        assert envelope.recommended is None
        assert "No devices" in envelope.rationale

    def test_throughput_shortfall_named(self):
        slow = DeviceProfile(id="slow", memory_gb=80, throughput=100)
        envelope = compute_recommendation(WorkloadRequirement(40, 500), [slow])
        assert envelope.recommended is None
        assert "Throughput" in envelope.rationale
        assert "no device can be grouped" in envelope.rationale

    def test_split_constraints_named(self):
        """Memory and throughput met separately, never together."""
        roomy = DeviceProfile(id="roomy", memory_gb=80, throughput=100)
        fast = DeviceProfile(id="fast", memory_gb=16, throughput=900)
        envelope = compute_recommendation(WorkloadRequirement(40, 500), [roomy, fast])
        assert envelope.recommended is None
        assert "never by the same one" in envelope.rationale

    def test_invalid_requirement_raises(self, device_b):
        with pytest.raises(InvalidRequirementError):
            compute_recommendation(WorkloadRequirement(0, 0), [device_b])


class TestPolicy:
    """Test the single-over-group policy rule."""

    def test_group_with_more_headroom_never_wins(self):
        """A single device wins even when a group has far more throughput."""
        single = DeviceProfile(id="single", memory_gb=48, throughput=500)
        group = DeviceProfile(id="group", memory_gb=24, throughput=5000, group_capable=True, max_group_size=8)
        envelope = compute_recommendation(WorkloadRequirement(40, 500), [group, single])
        assert envelope.recommended.identity_key == ("single", 1)
        assert [alt.identity_key for alt in envelope.alternatives] == [("group", 2)]

    def test_policy_names(self, device_b, device_c8, requirement_40_500):
        assert select_policy(rank_candidates(requirement_40_500, [device_b])) == POLICY_SINGLE_UNIT
        assert select_policy(rank_candidates(requirement_40_500, [device_c8])) == POLICY_GROUP_FALLBACK
        assert select_policy(rank_candidates(requirement_40_500, [])) is None

    def test_alternatives_order(self):
        """Remaining singles first, then group plans."""
        req = WorkloadRequirement(40, 500)
        small = DeviceProfile(id="small", memory_gb=48, throughput=600)
        large = DeviceProfile(id="large", memory_gb=80, throughput=3000, group_capable=True, max_group_size=8)
        pair = DeviceProfile(id="pair", memory_gb=24, throughput=300, group_capable=True, max_group_size=4)
        envelope = compute_recommendation(req, [large, pair, small])

        assert envelope.recommended.identity_key == ("small", 1)
        assert [alt.identity_key for alt in envelope.alternatives] == [
            ("large", 1),
            ("pair", 2),
            ("large", 2),
        ]

    def test_duplicate_catalog_rows_deduplicated(self):
        row = DeviceProfile(id="dup", memory_gb=48, throughput=600)
        other = DeviceProfile(id="other", memory_gb=80, throughput=600)
        envelope = compute_recommendation(WorkloadRequirement(40, 500), [row, other, row])
        keys = [alt.identity_key for alt in envelope.alternatives]
        assert keys == [("other", 1)]

    def test_dedupe_candidates(self, device_b):
        assert dedupe_candidates([device_b, device_b]) == [device_b]
        assert dedupe_candidates([device_b], exclude=device_b) == []


class TestEnvelopeProperties:
    """Randomized envelope invariants."""

    @pytest.mark.parametrize("seed", range(25))
    def test_recommended_not_in_alternatives(self, seed):
        rng = random.Random(seed)
        devices = [
            DeviceProfile(
                id=f"d{rng.randint(0, 6)}",
                memory_gb=rng.choice([16, 24, 48, 80]),
                throughput=rng.choice([150, 300, 900, 3000]),
                group_capable=rng.random() < 0.6,
                max_group_size=rng.choice([0, 2, 4, 8]),
            )
            for _ in range(rng.randint(1, 10))
        ]
        req = WorkloadRequirement(rng.choice([10, 40, 100]), rng.choice([100, 500, 2000]))
        envelope = compute_recommendation(req, devices)
        ranking = rank_candidates(req, devices)

        keys = [alt.identity_key for alt in envelope.alternatives]
        assert len(keys) == len(set(keys))
        if envelope.recommended is not None:
            assert envelope.recommended.identity_key not in keys
        if ranking.single_units:
            assert isinstance(envelope.recommended, DeviceProfile)
