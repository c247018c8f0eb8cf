"""Tests for promoting an alternative into the recommended slot."""

import pytest

from gpu_sizer.recommendation import compute_recommendation
from gpu_sizer.swap import promote
from gpu_sizer.types import DeviceProfile, GroupPlan, RecommendationEnvelope, WorkloadRequirement


def _keys(candidates):
    return [candidate.identity_key for candidate in candidates]


@pytest.fixture
def envelope(device_a, device_b, device_c, requirement_40_500):
    return compute_recommendation(requirement_40_500, [device_a, device_b, device_c])


@pytest.fixture
def wide_envelope():
    """Recommended single, two more singles and two group plans."""
    devices = [
        DeviceProfile(id="s48", memory_gb=48, throughput=600),
        DeviceProfile(id="s80", memory_gb=80, throughput=1400, group_capable=True, max_group_size=8),
        DeviceProfile(id="s141", memory_gb=141, throughput=3000),
        DeviceProfile(id="g24", memory_gb=24, throughput=300, group_capable=True, max_group_size=4),
    ]
    return compute_recommendation(WorkloadRequirement(40, 500), devices)


class TestPromote:
    """Test swap semantics."""

    def test_promote_group_plan(self, envelope, device_b):
        """C x2 becomes recommended and B becomes the only alternative."""
        swapped = promote(envelope, ("C", 2))

        assert isinstance(swapped.recommended, GroupPlan)
        assert swapped.recommended.identity_key == ("C", 2)
        assert swapped.alternatives == (device_b,)

    def test_old_recommendation_moves_to_end(self, device_b, device_c):
        plan = GroupPlan(device=device_c, unit_count=2, total_memory_gb=48, total_throughput=600)
        device_d = DeviceProfile(id="D", memory_gb=80, throughput=1400)
        envelope = RecommendationEnvelope(recommended=device_b, alternatives=(plan, device_d))

        swapped = promote(envelope, ("D", 1))

        assert swapped.recommended == device_d
        assert swapped.alternatives == (plan, device_b)

    def test_promote_by_candidate(self, envelope):
        plan = envelope.alternatives[0]
        swapped = promote(envelope, plan)
        assert swapped.recommended == plan

    def test_promote_with_list_key(self, envelope):
        """Keys decoded from JSON arrive as lists."""
        swapped = promote(envelope, ["C", 2])
        assert swapped.recommended.identity_key == ("C", 2)

    def test_unknown_key_is_noop(self, envelope):
        assert promote(envelope, ("Z", 1)) is envelope

    def test_recommended_key_is_noop(self, envelope):
        assert promote(envelope, ("B", 1)) is envelope

    def test_wrong_unit_count_is_noop(self, envelope):
        assert promote(envelope, ("C", 3)) is envelope

    def test_input_not_mutated(self, envelope):
        before = (envelope.recommended, envelope.alternatives)
        promote(envelope, ("C", 2))
        assert (envelope.recommended, envelope.alternatives) == before

    def test_rationale_passed_through(self, envelope):
        assert promote(envelope, ("C", 2), rationale="picked").rationale == "picked"

    def test_swap_back_restores_recommendation(self, envelope):
        swapped = promote(promote(envelope, ("C", 2)), ("B", 1))
        assert swapped.recommended == envelope.recommended
        assert swapped.alternatives == envelope.alternatives

    def test_empty_envelope(self):
        empty = RecommendationEnvelope(recommended=None, alternatives=(), rationale="none")
        assert promote(empty, ("A", 1)) is empty

    def test_no_recommended_with_alternatives(self, device_b):
        """Without a recommendation nothing is pushed back into the alternatives."""
        envelope = RecommendationEnvelope(recommended=None, alternatives=(device_b,))
        swapped = promote(envelope, ("B", 1))
        assert swapped.recommended == device_b
        assert swapped.alternatives == ()


class TestPromoteMembership:
    """Promotion preserves the envelope's candidate set."""

    def test_every_alternative(self, wide_envelope):
        members = set(_keys(wide_envelope.members()))
        assert len(wide_envelope.alternatives) >= 4

        for index, alternative in enumerate(wide_envelope.alternatives):
            swapped = promote(wide_envelope, alternative.identity_key)

            assert swapped.recommended == alternative
            assert set(_keys(swapped.members())) == members
            assert len(swapped.members()) == len(wide_envelope.members())
            # old recommendation goes last; the rest keep their order
            assert swapped.alternatives[-1] == wide_envelope.recommended
            expected = [alt for i, alt in enumerate(wide_envelope.alternatives) if i != index]
            assert list(swapped.alternatives[:-1]) == expected
