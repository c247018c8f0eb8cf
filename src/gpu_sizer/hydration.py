"""
Bounded-concurrency hydration of catalog identifiers.

A list of entries (already-resolved rows or bare identifiers) is turned into
normalized ``HydrationRecord`` objects by a fixed number of worker threads
sharing one queue. Every completed fetch republishes the growing record set.

Each call runs under a ``GenerationToken``. Issuing a newer token cancels
every older one: their workers stop taking identifiers, in-flight fetches run
to completion, and their results are dropped in ``_collect``. Issuing a
token also clears the published snapshot, so at most one generation is ever
visible and a superseded one is never visible again.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from .profile_normalizer import ProfileNormalizer
from .types import DeviceProfile, GenerationToken, HydrationRecord, ModelProfile

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 8

KIND_MODEL = "model"
KIND_DEVICE = "device"

Resolver = Callable[[str], Optional[Mapping[str, Any]]]
Entry = Union[str, Mapping[str, Any], DeviceProfile, ModelProfile]
Records = Tuple[HydrationRecord, ...]
Subscriber = Callable[[GenerationToken, Records], None]


@dataclass(frozen=True)
class HydrationResult:
    """Final state of one hydration call."""
    generation: GenerationToken
    records: Records
    cancelled: bool

    @property
    def degraded_count(self) -> int:
        return sum(1 for record in self.records if record.degraded)

    def to_dict(self):
        return {
            "generation": self.generation.value,
            "cancelled": self.cancelled,
            "records": [record.to_dict() for record in self.records],
        }


class HydrationScheduler:
    """Resolve identifiers with at most ``width`` fetches in flight.

    Args:
        resolver: ``fetch_by_id(identifier)`` returning a raw row. Raising or
            returning None marks that record degraded.
        kind: ``"model"`` or ``"device"``; selects the normalizer.
        width: Maximum number of concurrent fetches.
        default_max_group_size: Passed to the device normalizer.
    """

    def __init__(self,
                 resolver: Resolver,
                 kind: str = KIND_MODEL,
                 width: int = DEFAULT_WIDTH,
                 default_max_group_size: int = 0):
        if kind not in (KIND_MODEL, KIND_DEVICE):
            raise ValueError(f"Unknown record kind: {kind}")
        if width < 1:
            raise ValueError(f"Hydration width must be at least 1, got {width}")

        self.resolver = resolver
        self.kind = kind
        self.width = width
        self.default_max_group_size = default_max_group_size

        # Guards the generation counter, the published snapshot and subscribers
        self._lock = threading.RLock()
        self._latest = 0
        self._published: Records = ()
        self._published_generation: Optional[GenerationToken] = None
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # Generations
    # ------------------------------------------------------------------

    def new_generation(self) -> GenerationToken:
        """Issue a token newer than every previous one, cancelling them."""
        with self._lock:
            self._latest += 1
            # Records of a superseded generation stop being visible
            self._published = ()
            self._published_generation = None
            return GenerationToken(self._latest)

    def cancel(self) -> None:
        """Cancel whatever generation is running without starting a new one.

        Subscribers receive an empty record set under the cancelling token.
        """
        with self._lock:
            token = self.new_generation()
            self._publish(token, ())

    def is_current(self, token: GenerationToken) -> bool:
        with self._lock:
            return token.value == self._latest

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback(generation, records)`` on every publication.

        Callbacks run while the publication lock is held, so they observe
        snapshots in publication order. Returns an unsubscribe function.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> Tuple[Optional[GenerationToken], Records]:
        """Currently published generation and records."""
        with self._lock:
            return self._published_generation, self._published

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    def hydrate(self, entries: Sequence[Entry],
                token: Optional[GenerationToken] = None) -> HydrationResult:
        """Resolve ``entries`` and publish progressively; blocks until done.

        Args:
            entries: Resolved rows/profiles and bare identifier strings.
            token: Generation to run under; a new one is issued when omitted.

        Returns:
            HydrationResult. When not cancelled, ``records`` holds one record
            per pre-resolved entry plus one per unique identifier.
        """
        pre_resolved, identifiers = self._partition(entries)
        if token is None:
            token = self.new_generation()

        collected: List[HydrationRecord] = []

        with self._lock:
            if not self.is_current(token):
                logger.debug(f"Generation {token.value} superseded before it started")
                return HydrationResult(generation=token, records=(), cancelled=True)
            # Replaces the previous generation's snapshot in one step
            collected.extend(pre_resolved)
            self._publish(token, tuple(collected))

        if identifiers:
            work: "queue.Queue[str]" = queue.Queue()
            for identifier in identifiers:
                work.put(identifier)

            workers = [
                threading.Thread(
                    target=self._worker,
                    args=(token, work, collected),
                    name=f"hydrate-{self.kind}-{token.value}-{i}",
                    daemon=True,
                )
                for i in range(min(self.width, len(identifiers)))
            ]
            for worker in workers:
                worker.start()
            for worker in workers:
                worker.join()

        with self._lock:
            cancelled = not self.is_current(token)
            records = tuple(collected)

        if cancelled:
            logger.debug(f"Generation {token.value} cancelled after {len(records)} records")
        else:
            degraded = sum(1 for record in records if record.degraded)
            logger.info(
                f"Hydrated {len(records)} {self.kind} records "
                f"({degraded} degraded) in generation {token.value}"
            )
        return HydrationResult(generation=token, records=records, cancelled=cancelled)

    def _partition(self, entries: Sequence[Entry]) -> Tuple[List[HydrationRecord], List[str]]:
        """Split entries into published-as-is records and unique identifiers."""
        pre_resolved = []
        identifiers = {}
        for entry in entries:
            if isinstance(entry, str):
                identifiers.setdefault(entry, None)
            elif isinstance(entry, (DeviceProfile, ModelProfile)):
                pre_resolved.append(HydrationRecord(id=entry.id, resolved=entry))
            elif isinstance(entry, Mapping):
                profile = self._normalize(entry)
                pre_resolved.append(HydrationRecord(id=profile.id, resolved=profile))
            else:
                raise TypeError(f"Cannot hydrate entry of type {type(entry).__name__}")
        return pre_resolved, list(identifiers)

    def _normalize(self, raw: Mapping[str, Any]) -> Union[DeviceProfile, ModelProfile]:
        if self.kind == KIND_DEVICE:
            return ProfileNormalizer.normalize_device(raw, self.default_max_group_size)
        return ProfileNormalizer.normalize_model(raw)

    def _worker(self, token: GenerationToken, work: "queue.Queue[str]",
                collected: List[HydrationRecord]) -> None:
        while self.is_current(token):
            try:
                identifier = work.get_nowait()
            except queue.Empty:
                return
            self._collect(token, collected, self._resolve(identifier))

    def _resolve(self, identifier: str) -> HydrationRecord:
        try:
            raw = self.resolver(identifier)
        except Exception as e:
            logger.warning(f"Failed to resolve {self.kind} {identifier!r}: {e}")
            return HydrationRecord(id=identifier, degraded=True)

        if raw is None:
            logger.warning(f"No {self.kind} record for {identifier!r}")
            return HydrationRecord(id=identifier, degraded=True)

        return HydrationRecord(id=identifier, resolved=self._normalize(raw))

    def _collect(self, token: GenerationToken, collected: List[HydrationRecord],
                 record: HydrationRecord) -> None:
        with self._lock:
            if not self.is_current(token):
                logger.debug(f"Dropping {record.id!r} from stale generation {token.value}")
                return
            collected.append(record)
            self._publish(token, tuple(collected))

    def _publish(self, token: GenerationToken, records: Records) -> None:
        # Caller holds self._lock
        self._published = records
        self._published_generation = token
        for callback in list(self._subscribers):
            try:
                callback(token, records)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed on generation {token.value}")
