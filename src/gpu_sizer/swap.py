"""Promote an alternative to the recommended slot of an envelope."""

import logging
from typing import Union

from .recommendation import dedupe_candidates
from .types import Candidate, IdentityKey, RecommendationEnvelope

logger = logging.getLogger(__name__)


def promote(envelope: RecommendationEnvelope,
            chosen: Union[IdentityKey, Candidate],
            rationale: str = "") -> RecommendationEnvelope:
    """Swap ``chosen`` into ``recommended``.

    The previous recommendation moves to the end of the alternatives, so the
    set of candidates in the envelope is unchanged. A key that is not among
    the alternatives leaves the envelope untouched.

    Args:
        envelope: Envelope returned by ``compute_recommendation``.
        chosen: Identity key ``(device_id, unit_count)`` or a candidate.
        rationale: Text for the new envelope; callers regenerate it.

    Returns:
        New envelope, or ``envelope`` itself when ``chosen`` is not an alternative.
    """
    key = chosen.identity_key if hasattr(chosen, "identity_key") else tuple(chosen)
    candidate = envelope.find_alternative(key)
    if candidate is None:
        logger.debug(f"Ignoring promotion of {key}: not an alternative")
        return envelope

    remaining = [alt for alt in envelope.alternatives if alt.identity_key != key]
    if envelope.recommended is not None:
        remaining.append(envelope.recommended)

    return RecommendationEnvelope(
        recommended=candidate,
        alternatives=tuple(dedupe_candidates(remaining, exclude=candidate)),
        rationale=rationale,
    )
