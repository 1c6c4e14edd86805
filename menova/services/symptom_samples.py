from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from menova.models.symptom_sample import SampleSource, SymptomSample
from menova.services.lexicon import MAX_INTENSITY, MIN_INTENSITY, SymptomLexicon, default_lexicon
from menova.services.symptom_detection import DetectionResult
from menova.services.symptom_trends import TrendPoint

logger = logging.getLogger("menova")

DEDUPE_WINDOW_SECONDS = 10
PERIODS = ("daily", "weekly", "monthly", "3months")


def dedupe_key(user_id: str, source: SampleSource, text: str) -> str:
    raw = f"{user_id}|{SampleSource(source).value}|{(text or '').strip()}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def period_range(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return the [start, end] window for a history period."""
    now = now or datetime.now(timezone.utc)
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "daily":
        return day_start, day_start + timedelta(days=1) - timedelta(microseconds=1)
    if period == "weekly":
        start = day_start - timedelta(days=day_start.weekday())
        return start, start + timedelta(days=7) - timedelta(microseconds=1)
    if period == "monthly":
        start = day_start.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return start, next_month - timedelta(microseconds=1)
    if period == "3months":
        return now - timedelta(days=90), now
    raise ValueError(f"unknown period: {period}")


def record_samples(
    db: Session,
    user_id: str,
    ratings: Dict[str, int],
    source: SampleSource = SampleSource.MANUAL,
    notes: Optional[str] = None,
    lexicon: Optional[SymptomLexicon] = None,
    key: Optional[str] = None,
) -> List[SymptomSample]:
    """Insert one sample per (symptom, intensity) pair."""
    lexicon = lexicon or default_lexicon()
    source = SampleSource(source)
    for symptom_id, intensity in ratings.items():
        if symptom_id not in lexicon:
            raise ValueError(f"unknown symptom: {symptom_id}")
        if not isinstance(intensity, int) or not MIN_INTENSITY <= intensity <= MAX_INTENSITY:
            raise ValueError(f"intensity for {symptom_id} must be between 1 and 5")

    now = datetime.now(timezone.utc)
    samples = [
        SymptomSample(
            user_id=str(user_id),
            symptom_id=symptom_id,
            intensity=intensity,
            source=source,
            notes=notes,
            dedupe_key=key,
            recorded_at=now,
        )
        for symptom_id, intensity in ratings.items()
    ]
    try:
        db.add_all(samples)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for s in samples:
        db.refresh(s)
    logger.info({
        "function": "record_samples",
        "status": "inserted",
        "source": source.value,
        "symptoms": list(ratings),
    })
    return samples


def record_detection(
    db: Session,
    user_id: str,
    text: str,
    result: DetectionResult,
    source: SampleSource,
    lexicon: Optional[SymptomLexicon] = None,
) -> List[SymptomSample]:
    """Persist a detection as samples, reusing an identical submission from the last few seconds."""
    if result.is_empty:
        return []
    key = dedupe_key(user_id, source, text)
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=DEDUPE_WINDOW_SECONDS)
    existing = (
        db.query(SymptomSample)
        .filter(
            SymptomSample.user_id == str(user_id),
            SymptomSample.dedupe_key == key,
            SymptomSample.recorded_at >= cutoff,
        )
        .all()
    )
    if existing:
        logger.info({"function": "record_detection", "status": "reused", "key": key})
        return existing

    ratings = {symptom_id: result.intensity for symptom_id in result.detected_symptoms}
    return record_samples(
        db,
        user_id,
        ratings,
        source=source,
        notes=(text or "").strip() or None,
        lexicon=lexicon,
        key=key,
    )


def fetch_history(
    db: Session,
    user_id: str,
    symptom: str = "all",
    period: str = "weekly",
    now: Optional[datetime] = None,
) -> List[SymptomSample]:
    """Samples inside the period window, newest first."""
    start, end = period_range(period, now)
    query = db.query(SymptomSample).filter(
        SymptomSample.user_id == str(user_id),
        SymptomSample.recorded_at >= start,
        SymptomSample.recorded_at <= end,
    )
    if symptom and symptom != "all":
        query = query.filter(SymptomSample.symptom_id == symptom)
    return query.order_by(desc(SymptomSample.recorded_at)).all()


def trend_points(samples: Iterable[SymptomSample]) -> List[TrendPoint]:
    return [
        TrendPoint(symptom_id=s.symptom_id, timestamp=s.recorded_at, intensity=s.intensity)
        for s in samples
    ]


__all__ = [
    "PERIODS",
    "dedupe_key",
    "period_range",
    "record_samples",
    "record_detection",
    "fetch_history",
    "trend_points",
]
