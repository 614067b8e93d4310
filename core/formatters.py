# core/formatters.py

# all pure utilities & score/weight text helpers
# must never import from models!

import math
from typing import Any

# === score input parsing ===


def parse_score_input(raw: Any) -> float | None:
    """
    Parses a raw score entry as typed into a grade sheet cell.

    Accepts numbers, or strings using either "." or "," as the decimal separator.
    Blank strings and None mean "not graded" and return None.

    Raises:
        TypeError: If the input cannot be read as a number.
        ValueError: If the number is not finite.
    """
    if raw is None:
        return None

    if isinstance(raw, bool):
        raise TypeError("Score must be a number, not a boolean.")

    if isinstance(raw, str):
        text = raw.strip().replace(",", ".")
        if not text:
            return None
        raw = text

    try:
        value = float(raw)

    except (TypeError, ValueError):
        raise TypeError(f"Score must be a number: {raw!r}.") from None

    if not math.isfinite(value):
        raise ValueError("Score must be a finite number.")

    return value


# === score formatters ===


def format_score(score: float | None, placeholder: str = "N/A") -> str:
    return f"{score:.2f}" if score is not None else placeholder


def format_score_for_entry(score: float | None) -> str:
    # one decimal, comma separator, as shown in the grade sheet editor
    if score is None:
        return ""

    return f"{score:.1f}".replace(".", ",")


# === weight formatters ===


def format_weight_percent(weight: float) -> str:
    return f"{weight * 100:.0f}%"
