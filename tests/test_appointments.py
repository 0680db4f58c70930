from app.models.appointment import Appointment


def test_book_appointment(client, mock_user, db_session):
    resp = client.post("/appointments", json={"doctor_name": "Dr. Sharma", "slot": "Tue 02:00 PM"})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["doctor_name"] == "Dr. Sharma"
    assert data["slot"] == "Tue 02:00 PM"
    row = db_session.query(Appointment).filter_by(id=data["id"]).first()
    assert row.user_id == mock_user.id


def test_book_appointment_accepts_camel_case(client, mock_user):
    resp = client.post("/appointments", json={"doctorName": "  Dr. Iyer ", "slot": "Fri 09:30 AM"})
    assert resp.status_code == 201
    assert resp.json()["doctor_name"] == "Dr. Iyer"


def test_book_appointment_requires_fields(client, mock_user):
    assert client.post("/appointments", json={"slot": "Mon 10:00 AM"}).status_code == 422
    assert client.post("/appointments", json={"doctor_name": "Dr. X", "slot": ""}).status_code == 422


def test_list_appointments_only_own(client, mock_user, other_user, login_as):
    client.post("/appointments", json={"doctor_name": "Dr. A", "slot": "Mon 10:00 AM"})
    client.post("/appointments", json={"doctor_name": "Dr. B", "slot": "Wed 11:00 AM"})

    mine = client.get("/appointments").json()
    assert {a["doctor_name"] for a in mine} == {"Dr. A", "Dr. B"}

    login_as(other_user)
    assert client.get("/appointments").json() == []


def test_current_user_profile(client, mock_user):
    resp = client.get("/users/me")
    assert resp.status_code == 200
    assert resp.json()["id"] == mock_user.id
    assert resp.json()["email"] == mock_user.email


def test_mock_token_creates_user(client):
    resp = client.get("/users/me", headers={"Authorization": "Bearer mock-user-token"})
    assert resp.status_code == 200
    assert resp.json()["id"] == "user-1"
    assert resp.json()["email"] == "user@example.com"


def test_invalid_token_rejected(client, monkeypatch):
    from app.services import auth

    def _reject(token):
        raise ValueError("bad token")

    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", _reject)
    resp = client.get("/users/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_mock_token_rejected_in_production(client, monkeypatch, db_session):
    from app.models.user import User
    from app.services import auth

    def _reject(token):
        raise ValueError("bad token")

    monkeypatch.setattr(auth.settings, "environment", "production")
    monkeypatch.setattr(auth.firebase_auth, "verify_id_token", _reject)
    resp = client.get("/users/me", headers={"Authorization": "Bearer mock-user-token"})
    assert resp.status_code == 401
    assert db_session.query(User).filter(User.id == "user-1").first() is None


def test_mock_token_accepted_in_development(client, monkeypatch):
    from app.services import auth

    monkeypatch.setattr(auth.settings, "environment", "development")
    resp = client.get("/users/me", headers={"Authorization": "Bearer mock-user-2-token"})
    assert resp.status_code == 200
    assert resp.json()["id"] == "user-2"
