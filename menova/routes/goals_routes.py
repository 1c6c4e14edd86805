# menova/routes/goals_routes.py
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from menova.auth.deps import get_current_user
from menova.db.session import get_db
from menova.models.user import User
from menova.schemas.goals import (
    GoalIn,
    GoalOut,
    GoalsFromTextIn,
    GoalsFromTextOut,
    ProgressOut,
    SuggestionOut,
    SuggestionsOut,
)
from menova.services import goals as goals_service
from menova.services.symptom_detection import detect
from menova.utils.rate_limit import limiter, user_rate_key

router = APIRouter(prefix="/api/goals", tags=["goals"])
logger = logging.getLogger("menova")


def _suggestion_out(s: goals_service.SuggestedGoal) -> SuggestionOut:
    return SuggestionOut(text=s.text, category=s.category, label=goals_service.CATEGORY_LABELS[s.category])


@router.get("/today", response_model=List[GoalOut])
def today_goals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [GoalOut.model_validate(g) for g in goals_service.goals_for_day(db, str(current_user.id), date.today())]


@router.post("", response_model=GoalOut, status_code=status.HTTP_201_CREATED)
def add_goal(
    payload: GoalIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        goal = goals_service.add_goal(
            db, str(current_user.id), payload.goal, category=payload.category, day=payload.date
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return GoalOut.model_validate(goal)


@router.post("/{goal_id}/complete", response_model=GoalOut)
def complete_goal(
    goal_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    goal = goals_service.complete_goal(db, str(current_user.id), goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return GoalOut.model_validate(goal)


@router.get("/suggestions", response_model=SuggestionsOut)
def suggestions(
    text: str = Query("", max_length=5000),
    current_user: User = Depends(get_current_user),
):
    """Goals for the symptoms in ``text``; the fixed fallback set when nothing matches."""
    result = detect(text)
    suggested = goals_service.suggest_goals(result.detected_symptoms, text)
    if not suggested:
        suggested = goals_service.fallback_suggestions()
    return SuggestionsOut(
        symptoms=list(result.detected_symptoms),
        suggestions=[_suggestion_out(s) for s in suggested],
        message=goals_service.motivational_message(result.detected_symptoms),
    )


@router.post("/from-text", response_model=GoalsFromTextOut, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute", key_func=user_rate_key)
def goals_from_text(
    request: Request,
    payload: GoalsFromTextIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    created, matched = goals_service.create_goals_from_text(db, str(current_user.id), payload.text)
    return GoalsFromTextOut(
        goals=[GoalOut.model_validate(g) for g in created],
        matched=matched,
        message=goals_service.motivational_message(matched),
    )


@router.get("/progress", response_model=ProgressOut)
def progress(
    view: str = Query("today", pattern="^(today|weekly|monthly)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals_service.progress_view(db, str(current_user.id), view=view)
