"""Sizing service: one catalog session wired to ranking, swapping and hydration."""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from .catalog import CatalogClient
from .config import Settings, settings as default_settings
from .hydration import HydrationResult, HydrationScheduler, Entry
from .profile_normalizer import normalize_devices, normalize_model
from .recommendation import compute_recommendation
from .swap import promote
from .types import (
    DeviceProfile,
    GenerationToken,
    IdentityKey,
    RecommendationEnvelope,
    WorkloadRequirement,
)
from .workload import build_requirement

logger = logging.getLogger(__name__)


class SizingService:
    """Facade used by the HTTP layer.

    The device catalog is listed once and cached until ``refresh()``.
    """

    def __init__(self, catalog: CatalogClient, settings: Optional[Settings] = None):
        self.catalog = catalog
        self.settings = settings or default_settings
        self._devices: Optional[List[DeviceProfile]] = None
        self._lock = threading.Lock()
        self._schedulers: Dict[str, HydrationScheduler] = {}

    def devices(self) -> List[DeviceProfile]:
        with self._lock:
            if self._devices is None:
                rows = self.catalog.list_catalog("device")
                self._devices = normalize_devices(rows, self.settings.DEFAULT_MAX_GROUP_SIZE)
            return list(self._devices)

    def refresh(self) -> None:
        with self._lock:
            self._devices = None

    def recommend(self, requirement: WorkloadRequirement) -> RecommendationEnvelope:
        return compute_recommendation(requirement, self.devices())

    def requirement_for_model(self, model_id: str, concurrent_sessions: int,
                              per_session_throughput: float,
                              kv_cache_per_session_gb: Optional[float] = None) -> WorkloadRequirement:
        model = normalize_model(self.catalog.fetch_by_id("model", model_id))
        return build_requirement(model, concurrent_sessions, per_session_throughput,
                                 kv_cache_per_session_gb)

    def recommend_for_model(self, model_id: str, concurrent_sessions: int,
                            per_session_throughput: float,
                            kv_cache_per_session_gb: Optional[float] = None) -> RecommendationEnvelope:
        requirement = self.requirement_for_model(
            model_id, concurrent_sessions, per_session_throughput, kv_cache_per_session_gb
        )
        return self.recommend(requirement)

    def promote(self, envelope: RecommendationEnvelope, key: IdentityKey) -> RecommendationEnvelope:
        updated = promote(envelope, key)
        if updated is envelope:
            return envelope
        return replace(updated, rationale=f"{updated.recommended.label} selected from alternatives.")

    def scheduler(self, kind: str) -> HydrationScheduler:
        with self._lock:
            if kind not in self._schedulers:
                self._schedulers[kind] = HydrationScheduler(
                    self.catalog.resolver(kind),
                    kind=kind,
                    width=self.settings.HYDRATION_WIDTH,
                    default_max_group_size=self.settings.DEFAULT_MAX_GROUP_SIZE,
                )
            return self._schedulers[kind]

    def hydrate(self, kind: str, entries: Sequence[Entry],
                token: Optional[GenerationToken] = None) -> HydrationResult:
        return self.scheduler(kind).hydrate(entries, token)
