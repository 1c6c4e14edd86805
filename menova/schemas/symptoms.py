# menova/schemas/symptoms.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from menova.models.symptom_sample import SampleSource


class SymptomTextIn(BaseModel):
    """Free text to run through symptom detection."""

    text: str = Field(..., max_length=5000, description="User-provided text describing symptoms.")


class DetectionOut(BaseModel):
    detected_symptoms: List[str] = Field(..., description="Symptom ids in lexicon order.")
    primary_symptom: Optional[str] = Field(None, description="First matching symptom, if any.")
    intensity: Optional[int] = Field(None, ge=1, le=5)
    symptoms_text: str = Field(..., description="Display names joined for people to read.")
    intensity_text: str
    title: str
    summary: str


class SampleOut(BaseModel):
    id: str
    symptom_id: str
    intensity: int
    source: SampleSource
    notes: Optional[str] = None
    recorded_at: datetime

    class Config:
        from_attributes = True


class NotesOut(BaseModel):
    detection: DetectionOut
    samples: List[SampleOut]


class SamplesIn(BaseModel):
    ratings: Dict[str, int] = Field(..., description="symptom id -> intensity 1-5")
    source: SampleSource = SampleSource.MANUAL
    notes: Optional[str] = Field(None, max_length=5000)


class TrendOut(BaseModel):
    symptom_id: str
    display_name: str
    trend: str
    samples: int
    latest_intensity: Optional[int] = None


class ChartOut(BaseModel):
    period: str
    symptoms: List[str]
    rows: List[Dict[str, object]]
