from menova.models.conversation import Conversation
from menova.models.message import Message, MessageRole
from menova.models.symptom_sample import SampleSource, SymptomSample


def _start(client, **body):
    r = client.post("/api/chat/start", json=body)
    assert r.status_code == 200, r.text
    return r.json()["conversation_id"]


def test_send_persists_messages_and_reply(client, db, fake_assistant):
    conv_id = _start(client, title="Check-in")
    r = client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "hello"})
    assert r.status_code == 200, r.text
    j = r.json()
    assert j["message"]["role"] == "assistant"
    assert j["message"]["content"] == "I hear you."

    roles = sorted(m.role.value for m in db.query(Message).all())
    assert roles == ["assistant", "user"]
    assert fake_assistant[0]["messages"] == [{"role": "user", "content": "hello"}]


def test_title_and_summary_track_whole_conversation(client, db, fake_assistant):
    conv_id = _start(client)
    client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "I keep having hot flashes"})
    r = client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "and I am very tired"})
    j = r.json()
    assert j["detected_symptoms"] == ["hot_flashes", "sleep", "energy"]
    assert j["intensity"] == 4
    assert j["title"] == "Conversation about hot flashes, sleep quality, energy level"
    assert j["summary"].startswith("DETECTED SYMPTOMS: Hot Flashes, Sleep Quality, Energy Level\nINTENSITY: 4/5")
    assert j["summary"].endswith("I keep having hot flashes\nand I am very tired")

    conv = db.get(Conversation, conv_id)
    assert conv.primary_symptom == "hot_flashes"
    # The assistant sees the detected symptoms
    assert "Hot Flashes" in fake_assistant[-1]["system"]


def test_each_turn_records_samples_with_chat_source(client, db, fake_assistant):
    conv_id = _start(client)
    client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "my headache is 4/5"})
    client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "thanks for listening"})
    rows = db.query(SymptomSample).all()
    assert [(r.symptom_id, r.intensity, r.source) for r in rows] == [("headache", 4, SampleSource.CHAT)]


def test_voice_conversation_uses_voice_source(client, db, fake_assistant):
    conv_id = _start(client, source="voice")
    client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "so much brain fog"})
    assert db.query(SymptomSample).one().source is SampleSource.VOICE


def test_assistant_failure_returns_empty_reply(client, monkeypatch):
    async def boom(system, messages, timeout_s=20):
        raise RuntimeError("upstream down")

    monkeypatch.setattr("menova.services.assistant.generate_reply", boom)
    conv_id = _start(client)
    r = client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "hi"})
    assert r.status_code == 200
    assert r.json()["message"]["content"] == ""


def test_send_to_unknown_conversation(client, fake_assistant):
    r = client.post("/api/chat/send", json={"conversation_id": "nope", "message": "hi"})
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"


def test_send_blank_message(client, fake_assistant):
    conv_id = _start(client)
    r = client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "   "})
    assert r.status_code == 422


def test_transcript_saved_in_one_call(client, db):
    r = client.post("/api/chat/transcripts", json={
        "source": "voice",
        "messages": [
            {"role": "assistant", "content": "How are you feeling today?"},
            {"role": "user", "content": "Pretty anxious and I can't sleep"},
            {"role": "assistant", "content": "That sounds hard."},
            {"role": "user", "content": "It is particularly bad at night"},
        ],
    })
    assert r.status_code == 201, r.text
    j = r.json()
    assert j["detected_symptoms"] == ["sleep", "mood", "anxiety"]
    assert j["intensity"] == 4
    assert j["title"] == "Conversation about sleep quality, mood, anxiety"

    assert db.query(Message).filter(Message.conversation_id == j["conversation_id"]).count() == 4
    rows = db.query(SymptomSample).all()
    assert {r.symptom_id for r in rows} == {"sleep", "mood", "anxiety"}
    assert {r.source for r in rows} == {SampleSource.VOICE}


def test_history_pagination(client, db):
    conv_id = _start(client)
    for i in range(5):
        db.add(Message(conversation_id=conv_id, user_id="user-1", role=MessageRole.USER, content=f"m{i}"))
        db.commit()

    r = client.get(f"/api/chat/{conv_id}/history", params={"limit": 2})
    page = r.json()["messages"]
    assert [m["content"] for m in page] == ["m3", "m4"]

    r = client.get(f"/api/chat/{conv_id}/history", params={"limit": 2, "before_id": page[0]["id"]})
    assert [m["content"] for m in r.json()["messages"]] == ["m1", "m2"]


def test_history_of_someone_elses_conversation(client, db):
    conv = Conversation(user_id="someone-else")
    db.add(conv)
    db.commit()
    r = client.get(f"/api/chat/{conv.id}/history")
    assert r.status_code == 404
