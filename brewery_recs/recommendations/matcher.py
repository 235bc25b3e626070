from __future__ import annotations

from collections.abc import Sequence

from .models import InventoryItem, TasteProfile

MAX_RECOMMENDATIONS = 5


def _matches(query: TasteProfile, candidate: TasteProfile) -> bool:
    """True when any attribute the query specifies is equal on the candidate."""
    return bool(
        (query.primary_flavor and candidate.primary_flavor == query.primary_flavor)
        or (query.sweetness and candidate.sweetness == query.sweetness)
        or (query.bitterness and candidate.bitterness == query.bitterness)
    )


def match_taste_profile(
    profile: TasteProfile,
    inventory: Sequence[InventoryItem],
    limit: int = MAX_RECOMMENDATIONS,
) -> list[InventoryItem]:
    """
    Pick the inventory items that share a flavor attribute with ``profile``.

    Matches are ordered by stock quantity, highest first, and cut to ``limit``.
    ``sorted`` is stable, so equal stock keeps the upstream order. An empty
    query profile matches nothing.
    """
    matched = [item for item in inventory if _matches(profile, item.taste_profile)]
    matched = sorted(matched, key=lambda item: item.stock_quantity, reverse=True)
    return matched[:limit]
