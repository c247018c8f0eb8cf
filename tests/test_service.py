"""Tests for SizingService wiring."""

from unittest.mock import Mock

import pytest

from gpu_sizer.catalog import CatalogClient
from gpu_sizer.config import Settings
from gpu_sizer.exceptions import CatalogLookupError
from gpu_sizer.service import SizingService
from gpu_sizer.types import GroupPlan, WorkloadRequirement


@pytest.fixture
def catalog(raw_gpu_rows):
    catalog = Mock(spec=CatalogClient)
    catalog.list_catalog.return_value = raw_gpu_rows
    catalog.fetch_by_id.return_value = {"model_id": "llama", "minimal_gpu_memory_gb": 70}
    catalog.resolver.side_effect = lambda kind: (lambda identifier: {"model_id": identifier})
    return catalog


@pytest.fixture
def service(catalog):
    return SizingService(catalog, Settings(HYDRATION_WIDTH=2, DEFAULT_MAX_GROUP_SIZE=0))


class TestSizingService:
    """Test the service facade."""

    def test_devices_listed_once(self, service, catalog):
        first = service.devices()
        second = service.devices()

        assert [d.id for d in first] == ["L4", "A100-80GB", "H100-80GB", "L40S"]
        assert first == second
        catalog.list_catalog.assert_called_once_with("device")

    def test_refresh(self, service, catalog):
        service.devices()
        service.refresh()
        service.devices()
        assert catalog.list_catalog.call_count == 2

    def test_recommend(self, service):
        envelope = service.recommend(WorkloadRequirement(40, 500))
        assert envelope.recommended.id == "L40S"

    def test_recommend_for_model(self, service, catalog):
        """70 GB and 10 x 200 tokens/s: only the H100 fits alone."""
        envelope = service.recommend_for_model("llama", 10, 200)

        catalog.fetch_by_id.assert_called_once_with("model", "llama")
        assert envelope.recommended.id == "H100-80GB"
        assert [alt.identity_key for alt in envelope.alternatives] == [
            ("H100-80GB", 2),
            ("A100-80GB", 2),
        ]

    def test_group_fallback_for_large_model(self, service):
        envelope = service.recommend(WorkloadRequirement(300, 1000))
        assert isinstance(envelope.recommended, GroupPlan)
        assert envelope.recommended.identity_key == ("H100-80GB", 4)

    def test_catalog_failure_propagates(self, service, catalog):
        catalog.list_catalog.side_effect = CatalogLookupError("down", kind="device")
        with pytest.raises(CatalogLookupError):
            service.devices()

    def test_promote_regenerates_rationale(self, service):
        envelope = service.recommend_for_model("llama", 10, 200)

        swapped = service.promote(envelope, ("A100-80GB", 2))

        assert swapped.recommended.identity_key == ("A100-80GB", 2)
        assert swapped.rationale == "A100-80GB x2 selected from alternatives."

    def test_promote_unknown_key(self, service):
        envelope = service.recommend(WorkloadRequirement(40, 500))
        assert service.promote(envelope, ("nope", 1)) is envelope

    def test_scheduler_uses_settings(self, service, catalog):
        scheduler = service.scheduler("model")

        assert scheduler.width == 2
        assert service.scheduler("model") is scheduler
        catalog.resolver.assert_called_once_with("model")

    def test_hydrate(self, service):
        result = service.hydrate("model", ["a", "b", "a"])
        assert sorted(record.id for record in result.records) == ["a", "b"]
