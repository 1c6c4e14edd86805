from menova.models.symptom_sample import SampleSource, SymptomSample


def test_detect_is_stateless(client, db):
    r = client.post("/api/symptoms/detect", json={"text": "severe hot flashes"})
    assert r.status_code == 200, r.text
    j = r.json()
    assert j["detected_symptoms"] == ["hot_flashes"]
    assert j["primary_symptom"] == "hot_flashes"
    assert j["intensity"] == 5
    assert j["symptoms_text"] == "Hot Flashes"
    assert j["intensity_text"] == "severe (5/5)"
    assert j["title"] == "Conversation about hot flashes"
    assert j["summary"].endswith("\n\nsevere hot flashes")
    assert db.query(SymptomSample).count() == 0


def test_detect_nothing(client):
    r = client.post("/api/symptoms/detect", json={"text": "Went for a walk with my dog"})
    assert r.status_code == 200
    j = r.json()
    assert j["detected_symptoms"] == []
    assert j["intensity"] is None
    assert j["symptoms_text"] == "None specifically identified"


def test_detect_text_too_long(client):
    r = client.post("/api/symptoms/detect", json={"text": "x" * 5001})
    assert r.status_code == 422
    assert r.json()["code"] == "UNPROCESSABLE_ENTITY"


def test_notes_persist_samples(client, db):
    text = "Really bad headache and feeling anxious"
    r = client.post("/api/symptoms/notes", json={"text": text})
    assert r.status_code == 201, r.text
    j = r.json()
    assert j["detection"]["intensity"] == 5
    assert {s["symptom_id"] for s in j["samples"]} == {"mood", "anxiety", "headache"}
    assert all(s["source"] == "notes" and s["notes"] == text for s in j["samples"])
    rows = db.query(SymptomSample).all()
    assert len(rows) == 3
    assert {r.source for r in rows} == {SampleSource.NOTES}


def test_manual_samples(client):
    r = client.post("/api/symptoms/samples", json={"ratings": {"sleep": 2, "energy": 1}, "source": "daily_checkin"})
    assert r.status_code == 201, r.text
    assert {s["symptom_id"]: s["intensity"] for s in r.json()} == {"sleep": 2, "energy": 1}


def test_manual_samples_validation(client):
    r = client.post("/api/symptoms/samples", json={"ratings": {"joint_pain": 2}})
    assert r.status_code == 400
    assert "joint_pain" in r.json()["message"]

    r = client.post("/api/symptoms/samples", json={"ratings": {"sleep": 7}})
    assert r.status_code == 400

    r = client.post("/api/symptoms/samples", json={"ratings": {"sleep": 2}, "source": "chat"})
    assert r.status_code == 422

    r = client.post("/api/symptoms/samples", json={"ratings": {}})
    assert r.status_code == 422


def test_history_trends_and_chart(client):
    for rating in (1, 3, 5):
        r = client.post("/api/symptoms/samples", json={"ratings": {"sleep": rating}})
        assert r.status_code == 201
    client.post("/api/symptoms/samples", json={"ratings": {"mood": 2}})

    r = client.get("/api/symptoms/history", params={"symptom": "sleep", "period": "weekly"})
    assert r.status_code == 200
    assert len(r.json()) == 3

    r = client.get("/api/symptoms/history", params={"period": "daily"})
    assert len(r.json()) == 4

    r = client.get("/api/symptoms/trends", params={"period": "monthly"})
    assert r.status_code == 200
    trends = {t["symptom_id"]: t for t in r.json()}
    assert trends["sleep"]["samples"] == 3
    assert trends["mood"]["trend"] == "stable"

    r = client.get("/api/symptoms/chart", params={"period": "monthly"})
    assert r.status_code == 200
    j = r.json()
    assert j["symptoms"] == ["sleep", "mood"]
    assert len(j["rows"]) == 1
    assert j["rows"][0]["sleep"] == 3


def test_history_rejects_unknown_inputs(client):
    assert client.get("/api/symptoms/history", params={"symptom": "joint_pain"}).status_code == 404
    assert client.get("/api/symptoms/history", params={"period": "yearly"}).status_code == 422
