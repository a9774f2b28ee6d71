"""
Tier Classifier

Maps a propensity score to a priority tier. The thresholds are fixed
business constants; tiering always uses the raw score.
"""
import math
from typing import Iterable

from callplan.models.enums import Tier

HIGH_TIER_MIN_SCORE = 45
MED_TIER_MIN_SCORE = 20


def clamp_score(score) -> float:
    """
    Normalize an upstream score.

    None, NaN, non-numeric and negative values all become 0 so a malformed
    score degrades to the lowest tier instead of raising.
    """
    if score is None or isinstance(score, bool):
        return 0.0
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or value < 0:
        return 0.0
    return value


def classify_tier(score) -> Tier:
    """
    Classify a score into high / med / low.

    Examples:
        >>> classify_tier(45)
        <Tier.HIGH: 'high'>
        >>> classify_tier(44.9)
        <Tier.MED: 'med'>
        >>> classify_tier(float("nan"))
        <Tier.LOW: 'low'>
    """
    value = clamp_score(score)
    if value >= HIGH_TIER_MIN_SCORE:
        return Tier.HIGH
    if value >= MED_TIER_MIN_SCORE:
        return Tier.MED
    return Tier.LOW


def group_by_tier(contacts: Iterable) -> dict[Tier, list]:
    """
    Split contacts into tier sections, preserving their order.

    Every tier key is present, high first.
    """
    groups: dict[Tier, list] = {Tier.HIGH: [], Tier.MED: [], Tier.LOW: []}
    for contact in contacts:
        groups[classify_tier(contact.score)].append(contact)
    return groups
