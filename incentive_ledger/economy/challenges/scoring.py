from __future__ import annotations

from collections.abc import Mapping

# criteria key -> progress key
NUMERIC_THRESHOLDS: dict[str, str] = {
    "minSales": "currentSales",
    "minRevenue": "currentRevenue",
}


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def criteria_met(criteria: Mapping[str, object], progress: Mapping[str, object] | None) -> bool:
    """True when every numeric threshold present in criteria is reached by progress.

    targetRegion / targetProduct narrow which deals the upstream feeder counts
    into progress; they are not compared here. Criteria without any numeric
    threshold can only be completed by an explicit completion call.
    """
    progress = progress or {}
    checked = 0
    for criteria_key, progress_key in NUMERIC_THRESHOLDS.items():
        if criteria_key not in criteria or criteria[criteria_key] is None:
            continue
        threshold = _as_number(criteria[criteria_key])
        if threshold is None:
            return False
        current = _as_number(progress.get(progress_key, 0))
        if current is None or current < threshold:
            return False
        checked += 1
    return checked > 0


def merge_progress(
    current: Mapping[str, object] | None,
    update: Mapping[str, object],
) -> dict[str, object]:
    merged = dict(current or {})
    merged.update(update)
    return merged
