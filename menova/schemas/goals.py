# menova/schemas/goals.py
import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from menova.models.daily_goal import GoalCategory


class GoalIn(BaseModel):
    goal: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = Field(None, description="nourish|center|play|general; inferred when omitted")
    date: Optional[dt.date] = None


class GoalOut(BaseModel):
    id: str
    goal: str
    category: GoalCategory
    date: dt.date
    completed: bool
    source: Optional[str] = None

    class Config:
        from_attributes = True


class SuggestionOut(BaseModel):
    text: str
    category: GoalCategory
    label: str


class SuggestionsOut(BaseModel):
    symptoms: List[str]
    suggestions: List[SuggestionOut]
    message: str = ""


class GoalsFromTextIn(BaseModel):
    text: str = Field(..., max_length=10000)


class GoalsFromTextOut(BaseModel):
    goals: List[GoalOut]
    matched: List[str]
    message: str = ""


class CategoryProgress(BaseModel):
    completed: int
    total: int
    percentage: int


class ProgressOut(BaseModel):
    view: str
    start: dt.date
    end: dt.date
    categories: Dict[str, CategoryProgress]
    days: Dict[str, Dict[str, CategoryProgress]] = {}
