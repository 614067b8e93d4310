# engine/classifier.py

"""
Maps a final score (or an average of final scores) to a performance tier (desempeño).

Cut points are inclusive on their lower edge and no rounding is applied before comparison,
so 4.59999 is HIGH and 4.6 is SUPERIOR.

An ungraded result (None) classifies as LOW. Reporting views that need to tell "no data"
apart from "failing" must check for None (or `StudentAverage.has_grades`) themselves.
"""

from __future__ import annotations

from enum import Enum

SUPERIOR_CUTOFF = 4.6
HIGH_CUTOFF = 4.0
BASIC_CUTOFF = 3.0


class Tier(Enum):
    # values are the institutional labels printed on report cards
    SUPERIOR = "Superior"
    HIGH = "Alto"
    BASIC = "Básico"
    LOW = "Bajo"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        # 3 for SUPERIOR down to 0 for LOW
        return len(TIER_ORDER) - 1 - TIER_ORDER.index(self)


TIER_ORDER = (Tier.SUPERIOR, Tier.HIGH, Tier.BASIC, Tier.LOW)


def classify(score: float | None) -> Tier:
    if score is None:
        return Tier.LOW

    if score >= SUPERIOR_CUTOFF:
        return Tier.SUPERIOR
    if score >= HIGH_CUTOFF:
        return Tier.HIGH
    if score >= BASIC_CUTOFF:
        return Tier.BASIC

    return Tier.LOW


def is_passing(score: float | None) -> bool:
    return score is not None and score >= BASIC_CUTOFF
