from sqlalchemy import text


def test_profile_created_on_first_read(client):
    r = client.get("/api/profile/")
    assert r.status_code == 200
    j = r.json()
    assert j["user_id"] == "user-1"
    assert j["consent_given"] is False
    assert j["menopause_stage"] is None


def test_profile_update_and_consent(client, db):
    r = client.put("/api/profile/", json={"menopause_stage": "menopause", "notes": "HRT since May", "consent_given": True})
    assert r.status_code == 200, r.text
    j = r.json()
    assert j["menopause_stage"] == "menopause"
    assert j["notes"] == "HRT since May"
    assert j["consent_at"] is not None

    raw = db.execute(text("SELECT notes FROM user_profile")).scalar()
    assert raw != "HRT since May"

    # Partial update leaves other fields alone
    j = client.put("/api/profile/", json={"consent_given": False}).json()
    assert j["menopause_stage"] == "menopause"
    assert j["consent_at"] is None
