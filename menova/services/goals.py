"""Wellness goals: symptom-driven suggestions, daily goal storage and progress.

Suggestions come from a static symptom -> goal table; there is no model in
the loop. Progress is counted per goal category.
"""
from __future__ import annotations

import logging
import random
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import yaml
from sqlalchemy.orm import Session

from menova.models.daily_goal import DailyGoal, GoalCategory
from menova.services.lexicon import CONFIG_DIR, intensity_table
from menova.services.symptom_detection import detect, normalize_text

logger = logging.getLogger("menova")

GOALS_PATH = CONFIG_DIR / "goal_suggestions.yaml"
MAX_MAPPINGS = 2
GOALS_PER_MAPPING = 2
DUPLICATE_PREFIX_LEN = 20
AUTO_SOURCE = "symptom_auto"

CATEGORY_LABELS: Dict[GoalCategory, str] = {
    GoalCategory.NOURISH: "Nourish",
    GoalCategory.CENTER: "Center",
    GoalCategory.PLAY: "Play",
    GoalCategory.GENERAL: "General",
}

_CATEGORY_ALIASES = {"centre": GoalCategory.CENTER}

# Checked in order; first category with a matching keyword wins
_CATEGORY_KEYWORDS: Tuple[Tuple[GoalCategory, Tuple[str, ...]], ...] = (
    (GoalCategory.NOURISH, ("water", "eat", "food", "nutrition")),
    (GoalCategory.CENTER, ("meditat", "breath", "calm", "relax")),
    (GoalCategory.PLAY, ("walk", "exercise", "stretch", "yoga")),
)


@dataclass(frozen=True)
class GoalMapping:
    phrase: str
    symptom_id: Optional[str]
    goals: Tuple[str, ...]
    category: GoalCategory
    priority: int


@dataclass(frozen=True)
class SuggestedGoal:
    text: str
    category: GoalCategory


@dataclass(frozen=True)
class GoalCatalog:
    mappings: Tuple[GoalMapping, ...]
    fallback: Tuple[SuggestedGoal, ...]
    messages: Tuple[str, ...]


def normalize_category(name: str) -> GoalCategory:
    key = (name or "").strip().lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return GoalCategory(key)
    except ValueError:
        raise ValueError(f"unknown goal category: {name}") from None


def categorize_goal(text: str) -> GoalCategory:
    low = (text or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in low for k in keywords):
            return category
    return GoalCategory.GENERAL


def load_catalog(path: Optional[Path] = None) -> GoalCatalog:
    with open(path or GOALS_PATH, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    mappings = [
        GoalMapping(
            phrase=str(m["phrase"]).lower(),
            symptom_id=m.get("symptom_id"),
            goals=tuple(m.get("goals") or []),
            category=normalize_category(m["category"]),
            priority=int(m.get("priority", 1)),
        )
        for m in data.get("mappings") or []
    ]
    # Stable sort keeps file order within a priority
    mappings.sort(key=lambda m: -m.priority)
    fallback = tuple(
        SuggestedGoal(text=f["text"], category=normalize_category(f["category"]))
        for f in data.get("fallback") or []
    )
    return GoalCatalog(tuple(mappings), fallback, tuple(data.get("motivational_messages") or []))


@lru_cache(maxsize=1)
def default_catalog() -> GoalCatalog:
    return load_catalog()


def matching_mappings(
    symptom_ids: Iterable[str], text: str, catalog: Optional[GoalCatalog] = None
) -> List[GoalMapping]:
    """Mappings whose phrase occurs in the text or whose symptom was detected."""
    catalog = catalog or default_catalog()
    low = normalize_text(text)
    ids = set(symptom_ids)
    return [
        m for m in catalog.mappings
        if m.phrase in low or (m.symptom_id is not None and m.symptom_id in ids)
    ]


def suggest_goals(
    symptom_ids: Iterable[str], text: str, catalog: Optional[GoalCatalog] = None
) -> List[SuggestedGoal]:
    """Up to two goals from each of the two most relevant mappings."""
    seen: "OrderedDict[str, SuggestedGoal]" = OrderedDict()
    for mapping in matching_mappings(symptom_ids, text, catalog)[:MAX_MAPPINGS]:
        for goal_text in mapping.goals[:GOALS_PER_MAPPING]:
            seen.setdefault(goal_text, SuggestedGoal(goal_text, mapping.category))
    return list(seen.values())


def fallback_suggestions(catalog: Optional[GoalCatalog] = None) -> List[SuggestedGoal]:
    return list((catalog or default_catalog()).fallback)


def motivational_message(symptoms: Sequence[str], catalog: Optional[GoalCatalog] = None) -> str:
    catalog = catalog or default_catalog()
    if not symptoms or not catalog.messages:
        return ""
    return random.choice(catalog.messages)


# ---------- Storage ----------

def goals_for_day(db: Session, user_id: str, day: date) -> List[DailyGoal]:
    return (
        db.query(DailyGoal)
        .filter(DailyGoal.user_id == str(user_id), DailyGoal.date == day)
        .order_by(DailyGoal.created_at.asc())
        .all()
    )


def goals_between(db: Session, user_id: str, start: date, end: date) -> List[DailyGoal]:
    return (
        db.query(DailyGoal)
        .filter(DailyGoal.user_id == str(user_id), DailyGoal.date >= start, DailyGoal.date <= end)
        .order_by(DailyGoal.date.asc(), DailyGoal.created_at.asc())
        .all()
    )


def add_goal(
    db: Session,
    user_id: str,
    text: str,
    category: Optional[str] = None,
    day: Optional[date] = None,
    source: str = "manual",
) -> DailyGoal:
    text = (text or "").strip()
    if not text:
        raise ValueError("goal text is required")
    goal = DailyGoal(
        user_id=str(user_id),
        goal=text,
        category=normalize_category(category) if category else categorize_goal(text),
        date=day or date.today(),
        completed=False,
        source=source,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal


def complete_goal(db: Session, user_id: str, goal_id: str) -> Optional[DailyGoal]:
    """Mark a goal completed. Completed goals are never reopened."""
    goal = (
        db.query(DailyGoal)
        .filter(DailyGoal.id == goal_id, DailyGoal.user_id == str(user_id))
        .first()
    )
    if goal is None:
        return None
    if not goal.completed:
        goal.completed = True
        db.commit()
        db.refresh(goal)
    return goal


def _already_planned(existing: Iterable[DailyGoal], text: str) -> bool:
    prefix = text[:DUPLICATE_PREFIX_LEN].lower()
    return any(prefix in g.goal.lower() for g in existing)


def create_goals_from_text(
    db: Session,
    user_id: str,
    text: str,
    today: Optional[date] = None,
    catalog: Optional[GoalCatalog] = None,
) -> Tuple[List[DailyGoal], List[str]]:
    """Detect symptoms in a conversation and store matching goals for today.

    Returns (created goals, phrases of the mappings that were used).
    """
    today = today or date.today()
    result = detect(text, table=intensity_table("conversation"))
    mappings = matching_mappings(result.detected_symptoms, text, catalog)[:MAX_MAPPINGS]
    if not mappings:
        return [], []

    existing = goals_for_day(db, user_id, today)
    created: List[DailyGoal] = []
    for mapping in mappings:
        for goal_text in mapping.goals[:GOALS_PER_MAPPING]:
            if _already_planned(existing + created, goal_text):
                continue
            goal = DailyGoal(
                user_id=str(user_id),
                goal=goal_text,
                category=mapping.category,
                date=today,
                completed=False,
                source=AUTO_SOURCE,
            )
            db.add(goal)
            created.append(goal)
    db.commit()
    for g in created:
        db.refresh(g)
    logger.info({
        "function": "create_goals_from_text",
        "symptoms": list(result.detected_symptoms),
        "created": len(created),
    })
    return created, [m.phrase for m in mappings]


# ---------- Progress ----------

def _progress(completed: int, total: int) -> Dict[str, int]:
    percentage = int(completed * 100 / total + 0.5) if total > 0 else 0
    return {"completed": completed, "total": total, "percentage": percentage}


def category_progress(goals: Iterable[DailyGoal]) -> Dict[str, Dict[str, int]]:
    counts: Dict[GoalCategory, List[int]] = {c: [0, 0] for c in GoalCategory}
    for g in goals:
        entry = counts[GoalCategory(g.category)]
        entry[1] += 1
        if g.completed:
            entry[0] += 1
    return {c.value: _progress(done, total) for c, (done, total) in counts.items()}


def daily_breakdown(goals: Iterable[DailyGoal], start: date, end: date) -> Dict[str, Dict[str, Dict[str, int]]]:
    """Per-day category progress for every day in [start, end]."""
    by_day: Dict[date, List[DailyGoal]] = {}
    for g in goals:
        by_day.setdefault(g.date, []).append(g)
    out: Dict[str, Dict[str, Dict[str, int]]] = {}
    day = start
    while day <= end:
        out[day.isoformat()] = category_progress(by_day.get(day, []))
        day += timedelta(days=1)
    return out


def week_bounds(today: date) -> Tuple[date, date]:
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)


def month_bounds(today: date) -> Tuple[date, date]:
    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def _range_progress(db: Session, user_id: str, view: str, start: date, end: date) -> dict:
    goals = goals_between(db, user_id, start, end)
    return {
        "view": view,
        "start": start,
        "end": end,
        "categories": category_progress(goals),
        "days": daily_breakdown(goals, start, end),
    }


def weekly_progress(db: Session, user_id: str, today: Optional[date] = None) -> dict:
    start, end = week_bounds(today or date.today())
    return _range_progress(db, user_id, "weekly", start, end)


def monthly_progress(db: Session, user_id: str, today: Optional[date] = None) -> dict:
    start, end = month_bounds(today or date.today())
    return _range_progress(db, user_id, "monthly", start, end)


def progress_view(db: Session, user_id: str, view: str = "today", today: Optional[date] = None) -> dict:
    today = today or date.today()
    if view == "today":
        goals = goals_for_day(db, user_id, today)
        return {"view": view, "start": today, "end": today, "categories": category_progress(goals), "days": {}}
    if view == "weekly":
        return weekly_progress(db, user_id, today)
    if view == "monthly":
        return monthly_progress(db, user_id, today)
    raise ValueError(f"unknown progress view: {view}")


__all__ = [
    "CATEGORY_LABELS",
    "GoalMapping",
    "SuggestedGoal",
    "GoalCatalog",
    "normalize_category",
    "categorize_goal",
    "load_catalog",
    "matching_mappings",
    "suggest_goals",
    "fallback_suggestions",
    "motivational_message",
    "add_goal",
    "complete_goal",
    "create_goals_from_text",
    "category_progress",
    "weekly_progress",
    "monthly_progress",
    "progress_view",
]
