"""Trend and chart aggregation over recorded symptom intensities.

The trend is a moving-difference heuristic, not a regression: it averages
the step-to-step change over the most recent samples. With only two or three
points a single noisy rating can flip the result.
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Union

TREND_WINDOW = 5
TREND_THRESHOLD = 0.3


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class TrendPoint:
    symptom_id: str
    timestamp: datetime
    intensity: int


def compute_trend(
    intensities: Sequence[Union[int, float]],
    window: int = TREND_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> Trend:
    """Classify the direction of a time-ordered (oldest first) intensity series."""
    if len(intensities) < 2:
        return Trend.STABLE
    recent = list(intensities)[-window:]
    diffs = [b - a for a, b in zip(recent, recent[1:])]
    mean = sum(diffs) / len(diffs)
    if abs(mean) < threshold:
        return Trend.STABLE
    return Trend.INCREASING if mean > 0 else Trend.DECREASING


def trends_by_symptom(points: Iterable[TrendPoint]) -> Dict[str, Trend]:
    series: Dict[str, List[TrendPoint]] = defaultdict(list)
    for p in points:
        series[p.symptom_id].append(p)
    out: Dict[str, Trend] = {}
    for symptom_id, items in series.items():
        items.sort(key=lambda p: p.timestamp)
        out[symptom_id] = compute_trend([p.intensity for p in items])
    return out


def _bucket_label(ts: datetime, period: str) -> str:
    if period == "daily":
        return ts.strftime("%H:%M")
    if period == "weekly":
        return ts.strftime("%a")
    return ts.strftime("%b %d")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def chart_series(points: Iterable[TrendPoint], period: str) -> List[Dict[str, Union[str, int]]]:
    """Average intensity per symptom per time bucket, sorted by bucket label."""
    grouped: Dict[str, Dict[str, List[int]]] = defaultdict(lambda: defaultdict(list))
    for p in points:
        grouped[_bucket_label(p.timestamp, period)][p.symptom_id].append(p.intensity)

    rows: List[Dict[str, Union[str, int]]] = []
    for label, per_symptom in grouped.items():
        row: Dict[str, Union[str, int]] = {"date": label}
        for symptom_id, values in per_symptom.items():
            row[symptom_id] = _round_half_up(sum(values) / len(values))
        rows.append(row)
    rows.sort(key=lambda r: str(r["date"]))
    return rows


__all__ = [
    "Trend",
    "TrendPoint",
    "TREND_WINDOW",
    "TREND_THRESHOLD",
    "compute_trend",
    "trends_by_symptom",
    "chart_series",
]
