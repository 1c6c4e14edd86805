from menova.models.conversation import Conversation
from menova.models.daily_goal import DailyGoal
from menova.models.message import Message
from menova.models.symptom_sample import SymptomSample
from menova.models.user import User, UserProfile


def test_delete_data_removes_everything_owned(client, db, fake_assistant):
    client.put("/api/profile/", json={"menopause_stage": "perimenopause", "consent_given": True})
    client.post("/api/symptoms/samples", json={"ratings": {"sleep": 3}})
    client.post("/api/goals", json={"goal": "Drink water"})
    conv_id = client.post("/api/chat/start", json={}).json()["conversation_id"]
    client.post("/api/chat/send", json={"conversation_id": conv_id, "message": "severe headache"})

    db.add(SymptomSample(user_id="someone-else", symptom_id="sleep", intensity=2))
    db.commit()

    r = client.delete("/api/privacy/delete_data")
    assert r.status_code == 204

    db.expire_all()
    assert db.query(SymptomSample).filter(SymptomSample.user_id == "user-1").count() == 0
    assert db.query(SymptomSample).count() == 1
    assert db.query(DailyGoal).count() == 0
    assert db.query(Conversation).count() == 0
    assert db.query(Message).count() == 0
    assert db.query(UserProfile).count() == 0
    # The account itself stays
    assert db.get(User, "user-1") is not None
