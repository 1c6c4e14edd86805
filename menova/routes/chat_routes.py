"""Chat and voice conversations.

Every user turn re-runs symptom detection over the whole conversation so the
stored title and summary always describe everything said so far.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from menova.auth.deps import get_current_user
from menova.db.session import get_db
from menova.models.conversation import Conversation
from menova.models.message import Message, MessageRole
from menova.models.symptom_sample import SampleSource
from menova.models.user import User
from menova.schemas.chat import ConversationOut, SendIn, StartChatIn, TranscriptIn
from menova.services import assistant, symptom_samples
from menova.services.lexicon import intensity_table
from menova.services.symptom_detection import DetectionResult, detect
from menova.services.symptom_format import create_enhanced_summary, create_symptom_title
from menova.utils.rate_limit import limiter, user_rate_key

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = logging.getLogger("menova")

HISTORY_TURNS = 20


def _get_conversation(db: Session, conversation_id: str, user_id: str) -> Conversation:
    conv = (
        db.query(Conversation)
        .filter(Conversation.id == conversation_id, Conversation.user_id == user_id)
        .first()
    )
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv


def _user_text(db: Session, conv: Conversation) -> str:
    rows = (
        db.query(Message.content)
        .filter(Message.conversation_id == conv.id, Message.role == MessageRole.USER)
        .order_by(Message.created_at.asc())
        .all()
    )
    return "\n".join(r[0] for r in rows)


def _refresh_symptom_context(db: Session, conv: Conversation) -> DetectionResult:
    """Detect over all user turns and update the conversation's title and summary."""
    text = _user_text(db, conv)
    result = detect(text, table=intensity_table("conversation"))
    conv.title = create_symptom_title(result.detected_symptoms)
    conv.summary = create_enhanced_summary(text, result.detected_symptoms, result.intensity)
    conv.primary_symptom = result.primary_symptom
    db.add(conv)
    db.commit()
    return result


def _to_out(conv: Conversation, result: DetectionResult) -> Dict[str, Any]:
    return ConversationOut(
        conversation_id=conv.id,
        title=conv.title,
        summary=conv.summary,
        detected_symptoms=list(result.detected_symptoms),
        intensity=result.intensity,
    ).model_dump()


@router.post("/start")
def start_chat(
    payload: StartChatIn = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    title = (payload.title or "").strip() or None
    conv = Conversation(user_id=str(current_user.id), title=title, source=payload.source)
    db.add(conv)
    db.commit()
    db.refresh(conv)
    return {"conversation_id": conv.id}


@router.post("/send")
@limiter.limit("60/minute", key_func=user_rate_key)
async def send_message(
    request: Request,
    payload: SendIn = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conv_id = (payload.conversation_id or "").strip()
    text = (payload.message or "").strip()
    if not conv_id or not text:
        raise HTTPException(status_code=422, detail="conversation_id and message are required")

    uid = str(current_user.id)
    conv = _get_conversation(db, conv_id, uid)

    db.add(Message(conversation_id=conv.id, user_id=uid, role=MessageRole.USER, content=text))
    db.commit()

    result = _refresh_symptom_context(db, conv)

    # Samples come from this turn only; earlier turns were recorded when they arrived
    turn = detect(text, table=intensity_table("conversation"))
    source = SampleSource.VOICE if conv.source == "voice" else SampleSource.CHAT
    symptom_samples.record_detection(db, uid, text, turn, source)

    recent = (
        db.query(Message)
        .filter(Message.conversation_id == conv.id)
        .order_by(Message.created_at.desc())
        .limit(HISTORY_TURNS)
        .all()
    )
    history: List[Dict[str, str]] = [
        {"role": m.role.value, "content": m.content} for m in reversed(recent)
    ]
    system_prompt = assistant.build_system_prompt(result.detected_symptoms, result.intensity)
    try:
        reply = await assistant.generate_reply(system_prompt, history)
    except Exception:
        logger.warning({"function": "send_message", "status": "assistant_failed"}, exc_info=True)
        reply = ""

    amsg = Message(conversation_id=conv.id, user_id=uid, role=MessageRole.ASSISTANT, content=str(reply or ""))
    db.add(amsg)
    db.commit()
    db.refresh(amsg)

    out = _to_out(conv, result)
    out["message"] = {"id": amsg.id, "role": amsg.role.value, "content": amsg.content}
    return out


@router.post("/transcripts", status_code=201)
def save_transcript(
    payload: TranscriptIn = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Store a finished conversation in one call (voice sessions end this way)."""
    uid = str(current_user.id)
    conv = Conversation(user_id=uid, source=payload.source)
    db.add(conv)
    db.flush()
    for turn in payload.messages:
        content = turn.content.strip()
        if not content:
            continue
        db.add(Message(
            conversation_id=conv.id,
            user_id=uid,
            role=MessageRole(turn.role),
            content=content,
        ))
    db.commit()

    result = _refresh_symptom_context(db, conv)
    source = SampleSource.VOICE if payload.source == "voice" else SampleSource.CHAT
    samples = symptom_samples.record_detection(db, uid, _user_text(db, conv), result, source)
    logger.info({
        "function": "save_transcript",
        "source": payload.source,
        "symptoms": list(result.detected_symptoms),
        "samples": len(samples),
    })
    return _to_out(conv, result)


@router.get("/{conversation_id}/history")
def get_history(
    conversation_id: str,
    limit: int = Query(20, ge=1, le=100),
    before_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    conv = _get_conversation(db, conversation_id, str(current_user.id))

    # Conversations are small; slice the ordered list for cursor pagination
    ordered = (
        db.query(Message)
        .filter(Message.conversation_id == conv.id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )
    if before_id:
        ids = [m.id for m in ordered]
        try:
            idx = ids.index(before_id)
            items = ordered[idx + 1 : idx + 1 + limit]
        except ValueError:
            items = ordered[:limit]
    else:
        items = ordered[:limit]
    # Oldest first within the page
    items = list(reversed(items))

    return {
        "conversation_id": conv.id,
        "title": conv.title,
        "summary": conv.summary,
        "messages": [{"id": m.id, "role": m.role.value, "content": m.content} for m in items],
    }
