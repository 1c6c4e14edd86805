# menova/routers/profile.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from menova.db.session import get_db
from menova.auth.deps import get_current_user
from menova.models.user import User, UserProfile
from menova.schemas.profile import UserProfileIn, UserProfileOut

router = APIRouter(prefix="/api/profile", tags=["profile"])


def _load_or_create(db: Session, user_id: str) -> UserProfile:
    prof = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
    if not prof:
        # create an empty profile on first read
        prof = UserProfile(user_id=user_id, consent_given=False)
        db.add(prof)
        db.commit()
        db.refresh(prof)
    return prof


@router.get("/", response_model=UserProfileOut)
def get_profile(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return UserProfileOut.model_validate(_load_or_create(db, str(user.id)), from_attributes=True)


@router.put("/", response_model=UserProfileOut)
def upsert_profile(
    payload: UserProfileIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prof = _load_or_create(db, str(user.id))

    # Only fields present in the request are changed
    fields = payload.model_dump(exclude_unset=True)
    if "menopause_stage" in fields:
        prof.menopause_stage = (payload.menopause_stage or "").strip() or None
    if "notes" in fields:
        prof.notes = payload.notes
    if payload.consent_given is not None and payload.consent_given != prof.consent_given:
        prof.consent_given = payload.consent_given
        prof.consent_at = datetime.now(timezone.utc) if payload.consent_given else None

    db.add(prof)
    db.commit()
    db.refresh(prof)
    return UserProfileOut.model_validate(prof, from_attributes=True)
