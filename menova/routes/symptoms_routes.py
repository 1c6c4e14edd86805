# menova/routes/symptoms_routes.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from menova.auth.deps import get_current_user
from menova.db.session import get_db
from menova.models.symptom_sample import SampleSource
from menova.models.user import User
from menova.schemas.symptoms import (
    ChartOut,
    DetectionOut,
    NotesOut,
    SampleOut,
    SamplesIn,
    SymptomTextIn,
    TrendOut,
)
from menova.services import symptom_samples
from menova.services.lexicon import default_lexicon, intensity_table
from menova.services.symptom_detection import DetectionResult, detect
from menova.services.symptom_format import (
    create_enhanced_summary,
    create_symptom_title,
    format_detected_symptoms,
    intensity_to_description,
)
from menova.services.symptom_trends import chart_series, trends_by_symptom
from menova.utils.rate_limit import limiter, user_rate_key

router = APIRouter(prefix="/api/symptoms", tags=["symptoms"])
logger = logging.getLogger("menova")

PERIOD_PATTERN = "^(daily|weekly|monthly|3months)$"


def _detection_out(text: str, result: DetectionResult) -> DetectionOut:
    return DetectionOut(
        detected_symptoms=list(result.detected_symptoms),
        primary_symptom=result.primary_symptom,
        intensity=result.intensity,
        symptoms_text=format_detected_symptoms(result.detected_symptoms),
        intensity_text=intensity_to_description(result.intensity),
        title=create_symptom_title(result.detected_symptoms),
        summary=create_enhanced_summary(text, result.detected_symptoms, result.intensity),
    )


@router.post("/detect", response_model=DetectionOut, status_code=status.HTTP_200_OK)
@limiter.limit("120/minute", key_func=user_rate_key)
def detect_text(
    request: Request,
    payload: SymptomTextIn,
    current_user: User = Depends(get_current_user),
):
    """Stateless detection; nothing is persisted."""
    return _detection_out(payload.text, detect(payload.text))


@router.post("/notes", response_model=NotesOut, status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute", key_func=user_rate_key)
def submit_notes(
    request: Request,
    payload: SymptomTextIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Detect symptoms in free-form notes and record them as samples."""
    result = detect(payload.text, table=intensity_table("notes"))
    samples = symptom_samples.record_detection(
        db, str(current_user.id), payload.text, result, SampleSource.NOTES
    )
    logger.info({
        "function": "submit_notes",
        "symptoms": list(result.detected_symptoms),
        "intensity": result.intensity,
        "samples": len(samples),
    })
    return NotesOut(
        detection=_detection_out(payload.text, result),
        samples=[SampleOut.model_validate(s) for s in samples],
    )


@router.post("/samples", response_model=List[SampleOut], status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute", key_func=user_rate_key)
def submit_samples(
    request: Request,
    payload: SamplesIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Manual ratings from the tracker or the daily check-in."""
    if payload.source not in (SampleSource.MANUAL, SampleSource.DAILY_CHECKIN):
        raise HTTPException(status_code=422, detail="source must be 'manual' or 'daily_checkin'")
    if not payload.ratings:
        raise HTTPException(status_code=422, detail="ratings must not be empty")
    try:
        samples = symptom_samples.record_samples(
            db, str(current_user.id), payload.ratings, source=payload.source, notes=payload.notes
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return [SampleOut.model_validate(s) for s in samples]


@router.get("/history", response_model=List[SampleOut])
def history(
    symptom: str = Query("all"),
    period: str = Query("weekly", pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if symptom != "all" and symptom not in default_lexicon():
        raise HTTPException(status_code=404, detail=f"Unknown symptom: {symptom}")
    samples = symptom_samples.fetch_history(db, str(current_user.id), symptom=symptom, period=period)
    return [SampleOut.model_validate(s) for s in samples]


@router.get("/trends", response_model=List[TrendOut])
def trends(
    period: str = Query("monthly", pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lexicon = default_lexicon()
    samples = symptom_samples.fetch_history(db, str(current_user.id), period=period)
    points = symptom_samples.trend_points(samples)
    by_symptom = trends_by_symptom(points)

    out: List[TrendOut] = []
    for symptom_id in lexicon.ids():
        if symptom_id not in by_symptom:
            continue
        series = sorted((p for p in points if p.symptom_id == symptom_id), key=lambda p: p.timestamp)
        out.append(TrendOut(
            symptom_id=symptom_id,
            display_name=lexicon.display_name(symptom_id),
            trend=by_symptom[symptom_id].value,
            samples=len(series),
            latest_intensity=series[-1].intensity,
        ))
    return out


@router.get("/chart", response_model=ChartOut)
def chart(
    period: str = Query("weekly", pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    samples = symptom_samples.fetch_history(db, str(current_user.id), period=period)
    points = symptom_samples.trend_points(samples)
    present = {p.symptom_id for p in points}
    return ChartOut(
        period=period,
        symptoms=[s for s in default_lexicon().ids() if s in present],
        rows=chart_series(points, period),
    )
