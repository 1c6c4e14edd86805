import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from menova.db.session import get_db
from menova.auth.deps import get_current_user
from menova.models.user import User, UserProfile
from menova.models.symptom_sample import SymptomSample
from menova.models.daily_goal import DailyGoal
from menova.models.conversation import Conversation
from menova.models.message import Message

router = APIRouter(prefix="/api/privacy", tags=["privacy"])
logger = logging.getLogger("menova")


@router.delete("/delete_data", status_code=status.HTTP_204_NO_CONTENT)
def delete_all_user_data(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Remove everything the user owns except the account itself."""
    uid = str(user.id)
    # Bulk deletes skip ORM cascades, so children go first
    counts = {
        "messages": db.query(Message).filter(Message.user_id == uid).delete(synchronize_session=False),
        "conversations": db.query(Conversation).filter(Conversation.user_id == uid).delete(synchronize_session=False),
        "symptom_samples": db.query(SymptomSample).filter(SymptomSample.user_id == uid).delete(synchronize_session=False),
        "daily_goals": db.query(DailyGoal).filter(DailyGoal.user_id == uid).delete(synchronize_session=False),
        "profile": db.query(UserProfile).filter(UserProfile.user_id == uid).delete(synchronize_session=False),
    }
    db.commit()
    logger.info({"function": "delete_all_user_data", "status": "deleted", "counts": counts})
    return None
